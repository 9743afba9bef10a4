"""
Octopus Page Registry Service (The "Gatekeeper" for runtime modules)

===============================================================================
PURPOSE:
===============================================================================
Some sidebar modules are not part of the static menu in `config.py`. Their
pages are registered in the ABAC registry backend and discovered at runtime.
This file is the single place that talks to that registry.

NO OTHER FILE IN THE APPLICATION SHOULD CALL THE REGISTRY ENDPOINTS.

===============================================================================
BUSINESS LOGIC:
===============================================================================
1.  **Fetch once, never fail loudly:**
    - `RemoteModuleRegistry.fetch_pages()` makes ONE attempt. Any failure
      (network, timeout, bad status, bad JSON, `success: false`) is logged
      and turned into an empty page list. The sidebar simply renders without
      the module.

2.  **Normalize, then merge (both pure):**
    - `normalize_pages()` turns the active registry pages into sidebar leaves.
    - `merge_remote_branch()` places those leaves into the permission-filtered
      static tree. The position only depends on the tree itself, so the
      module lands in the same place no matter when the fetch finishes.

===============================================================================
QUICK NAVIGATION
===============================================================================
[S1]  Module definitions & errors
[S2]  Response parsing          parse_pages_response()
[S3]  The registry client       RemoteModuleRegistry.fetch_pages()
[S4]  Normalize & merge         normalize_pages(), merge_remote_branch()
-------------------------------------------------------------------------------
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional

import requests

from config import (
    DEFAULT_REMOTE_ICON,
    FLEET_ANCHOR_ID,
    FLEET_BRANCH_ICON,
    FLEET_BRANCH_ID,
    FLEET_BRANCH_LABEL,
    FLEET_MODULE_ID,
    NavSettings,
)
from menu_tree import MenuEntry, icon_from_name, remote_icon_from_name, slugify
from security import filter_menu_tree

logger = logging.getLogger(__name__)


# --- [S1] MODULE DEFINITIONS & ERRORS ---

@dataclass(frozen=True)
class RemoteModule:
    """Where a runtime module's pages go in the sidebar."""
    module_id: int
    branch_id: str
    label: str
    icon_name: str
    anchor_id: Optional[str] = None


FLEET_MODULE = RemoteModule(
    module_id=FLEET_MODULE_ID,
    branch_id=FLEET_BRANCH_ID,
    label=FLEET_BRANCH_LABEL,
    icon_name=FLEET_BRANCH_ICON,
    anchor_id=FLEET_ANCHOR_ID,
)


@dataclass(frozen=True)
class RemotePage:
    title: str
    icon_name: str
    route: str
    is_active: bool


class RemoteFetchError(Exception):
    """The registry answered, but not with a usable page list."""


# --- [S2] RESPONSE PARSING ---

def parse_pages_response(body) -> List[RemotePage]:
    """
    Validate `{success: bool, data: [{page_name, icon, route, is_active}]}`.

    Raises RemoteFetchError when the envelope itself is unusable. Single rows
    that are not objects or have no page_name/route are skipped, so one bad
    row never hides the rest of the module.
    """
    if not isinstance(body, dict):
        raise RemoteFetchError(f"expected a JSON object, got {type(body).__name__}")
    if body.get("success") is not True:
        raise RemoteFetchError("registry reported success=false")

    data = body.get("data") or []
    if not isinstance(data, list):
        raise RemoteFetchError("'data' is not a list")

    pages = []
    for row in data:
        if not isinstance(row, dict):
            logger.debug("Skipping registry row that is not an object: %r", row)
            continue
        title = row.get("page_name")
        route = row.get("route")
        if not isinstance(title, str) or not isinstance(route, str) or not route:
            logger.debug("Skipping registry row without page_name/route: %r", row)
            continue
        pages.append(RemotePage(
            title=title,
            icon_name=row.get("icon") or DEFAULT_REMOTE_ICON,
            route=route,
            is_active=bool(row.get("is_active")),
        ))
    return pages


# --- [S3] THE REGISTRY CLIENT ---

class RemoteModuleRegistry:
    """
    Reads module page lists from the ABAC registry.

    The HTTP call is blocking (`requests`), so it runs in a worker thread and
    the coroutine just awaits it. A `requests.Session` can be passed in.
    """

    def __init__(self, settings: Optional[NavSettings] = None, session=None):
        self.settings = settings or NavSettings.from_env()
        self.session = session or requests.Session()

    def pages_url(self, module_id) -> str:
        base_url = self.settings.backend_base_url.rstrip("/")
        return f"{base_url}/v1/abac/registry/modules/{module_id}/pages"

    async def fetch_pages(self, module_id) -> List[RemotePage]:
        url = self.pages_url(module_id)
        log_extra = {"module_id": module_id, "tenant_id": self.settings.tenant_id}
        try:
            response = await asyncio.to_thread(
                self.session.get,
                url,
                headers=self.settings.tenant_headers(),
                timeout=self.settings.fetch_timeout,
            )
            # 4xx / 5xx -> HTTPError
            response.raise_for_status()
            pages = parse_pages_response(response.json())

        except requests.exceptions.HTTPError as e:
            logger.warning("Module %s pages: bad status from registry: %s", module_id, e, extra=log_extra)
            return []
        except requests.exceptions.Timeout:
            logger.warning("Module %s pages: registry request timed out", module_id, extra=log_extra)
            return []
        except requests.exceptions.ConnectionError as e:
            logger.warning("Module %s pages: could not connect to registry: %s", module_id, e, extra=log_extra)
            return []
        except requests.exceptions.RequestException as e:
            logger.warning("Module %s pages: request failed: %s", module_id, e, extra=log_extra)
            return []
        except (RemoteFetchError, ValueError) as e:
            # ValueError covers bodies that are not JSON at all
            logger.warning("Module %s pages: unusable response: %s", module_id, e, extra=log_extra)
            return []

        logger.info("Module %s pages: %d received", module_id, len(pages), extra=log_extra)
        return pages


# --- [S4] NORMALIZE & MERGE ---

def normalize_pages(pages, module: RemoteModule = FLEET_MODULE):
    """
    Active registry pages -> sidebar leaves, in registry order.

    Ids come from the route, not the title: the registry allows two pages
    with the same name. A repeated slug gets its position appended.
    """
    entries = []
    seen = set()
    for position, page in enumerate(pages):
        if not page.is_active:
            continue
        slug = slugify(page.route) or str(position)
        while slug in seen:
            slug = f"{slug}-{position}"
        seen.add(slug)
        entries.append(MenuEntry(
            id=f"{module.branch_id}/{slug}",
            label=page.title,
            icon=remote_icon_from_name(page.icon_name),
            route=page.route,
        ))
    return tuple(entries)


def merge_remote_branch(filtered_tree, remote_entries, can_view, module: RemoteModule = FLEET_MODULE):
    """
    Put the module's accessible pages into the (already filtered) tree.

    - Nothing accessible -> the tree comes back unchanged.
    - The module's branch already exists -> its children are REPLACED.
    - Otherwise a new branch goes right before the anchor entry, or at the
      end if the anchor is not in the tree.
    """
    accessible = tuple(
        entry for entry in filter_menu_tree(remote_entries, can_view)
        if entry.route
    )
    if not accessible:
        return tuple(filtered_tree)

    merged = list(filtered_tree)
    ids = [entry.id for entry in merged]

    if module.branch_id in ids:
        index = ids.index(module.branch_id)
        merged[index] = merged[index].with_children(accessible)
        return tuple(merged)

    branch = MenuEntry(
        id=module.branch_id,
        label=module.label,
        icon=icon_from_name(module.icon_name),
        children=accessible,
    )
    if module.anchor_id and module.anchor_id in ids:
        merged.insert(ids.index(module.anchor_id), branch)
    else:
        merged.append(branch)
    return tuple(merged)
