# security.py

import logging
from typing import Dict, Optional

from config import ROLE_PAGE_RULES, ROUTE_TO_PAGE_ID
from menu_tree import permission_key_for

logger = logging.getLogger(__name__)


# --- Capability collaborators ---
# Anything with `can_view_page(page_id) -> bool` and `is_loading` works.
# How permissions are actually evaluated is up to the backend; these are the
# shapes the app and the tests plug in.

class RolePermissions:
    """
    Page visibility for a role, using the same explicit + prefix rules
    as the environment rules in ROLE_PAGE_RULES.
    """

    is_loading = False

    def __init__(self, role: str, rules: Optional[dict] = None):
        self.role = role
        all_rules = ROLE_PAGE_RULES if rules is None else rules
        role_rules = all_rules.get(role, {"explicit": [], "prefixes": []})
        self.explicit = set(role_rules["explicit"])
        self.prefixes = list(role_rules["prefixes"])

    def can_view_page(self, page_id: str) -> bool:
        if page_id in self.explicit:
            return True
        return any(page_id.startswith(pref) for pref in self.prefixes)


class StaticPermissions:
    """
    An already-evaluated permission map (page_id -> bool).
    Page ids missing from the map are denied.
    """

    def __init__(self, page_permissions: Dict[str, bool], is_loading: bool = False):
        self.page_permissions = dict(page_permissions)
        self.is_loading = is_loading

    def can_view_page(self, page_id: str) -> bool:
        if page_id not in self.page_permissions:
            logger.debug("Page %s not in permissions map, denying access", page_id)
            return False
        return bool(self.page_permissions[page_id])


class PendingPermissions:
    """Permissions that have not arrived yet."""

    is_loading = True

    def can_view_page(self, page_id: str) -> bool:
        return True


# --- Filtering ---

def can_view_route(route, permissions, route_index=None) -> bool:
    """
    Can the actor open this route?
    No route (a pure group) and routes with no page_id mapping are always
    viewable; everything else asks the capability collaborator.
    """
    page_id = permission_key_for(route, route_index)
    if page_id is None:
        return True
    return permissions.can_view_page(page_id)


def filter_menu_tree(tree, can_view):
    """
    Prune MENU entries down to what `can_view(route)` allows.

    - An entry whose own route is denied is dropped.
    - A group is filtered recursively. If it HAD children and none survive,
      the whole group is dropped. A group configured with no children stays.
    - Order is never changed.
    """
    filtered = []
    for entry in tree:
        if entry.route and not can_view(entry.route):
            continue
        if entry.is_branch:
            visible_children = filter_menu_tree(entry.children, can_view)
            if len(entry.children) > 0 and len(visible_children) == 0:
                continue
            entry = entry.with_children(visible_children)
        filtered.append(entry)
    return tuple(filtered)


def get_visible_menu(tree, permissions, route_index=None):
    """
    The tree this actor should see.
    While permissions are still loading, the full static tree is shown.
    """
    if permissions.is_loading:
        return tuple(tree)
    index = ROUTE_TO_PAGE_ID if route_index is None else route_index
    return filter_menu_tree(
        tree,
        lambda route: can_view_route(route, permissions, index),
    )
