"""
nav_state.py

Everything the sidebar needs to know about "where am I" and "how wide am I".

    filter (security.py) -> merge (registry_service.py) -> resolve -> mode

The pure pieces (`resolve_active_state`, `derive_sidebar_mode`) can be used on
their own. `NavigationController` is the one object the UI talks to: it owns
the current location, the cached remote pages, the open module and the
collapsed preference, and tells subscribers whenever the result changes.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, FrozenSet, List, Optional, Tuple

from config import SIDEBAR_WIDTHS
from menu_tree import STATIC_MENU_TREE, MenuEntry, contains_route, find_entry
from registry_service import FLEET_MODULE, RemoteModule, merge_remote_branch, normalize_pages
from security import PendingPermissions, can_view_route, get_visible_menu

logger = logging.getLogger(__name__)


# --- Active module resolution ---

@dataclass(frozen=True)
class ActiveState:
    active_top_level_id: Optional[str] = None
    open_module_id: Optional[str] = None


def find_active_top_level(tree, current_path: str) -> Optional[MenuEntry]:
    """First top-level entry that routes to `current_path` itself or below."""
    for entry in tree:
        if contains_route(entry, current_path):
            return entry
    return None


def has_panel(entry: Optional[MenuEntry]) -> bool:
    """Only a branch with something in it can drive the secondary panel."""
    return entry is not None and entry.is_branch and bool(entry.children)


def panel_entry(tree, entry_id: Optional[str]) -> Optional[MenuEntry]:
    """The top-level entry `entry_id` if it can be shown as a panel right now."""
    entry = next((top for top in tree if top.id == entry_id), None)
    return entry if has_panel(entry) else None


def resolve_active_state(tree, current_path: str, previous_open_module_id: Optional[str]) -> ActiveState:
    """
    Work out the active top-level entry and the open module.

    The open module only moves when a branch becomes active: it opens if
    nothing was open, or switches if a different branch was open. A leaf
    match or no match at all leaves it where it was, even when the open
    module is missing from `tree` for now (e.g. the remote branch while
    permissions load). Whether it can be shown is `panel_entry`'s call.
    """
    active = find_active_top_level(tree, current_path)
    open_module_id = previous_open_module_id

    if has_panel(active) and active.id != open_module_id:
        open_module_id = active.id

    return ActiveState(
        active_top_level_id=active.id if active else None,
        open_module_id=open_module_id,
    )


# --- Sidebar mode ---

class SidebarMode(Enum):
    EXPANDED = "expanded"
    ICON_RAIL = "icon_rail"
    ICON_RAIL_WITH_PANEL = "icon_rail_with_panel"


def derive_sidebar_mode(user_collapsed: bool, open_module_id: Optional[str]) -> SidebarMode:
    if open_module_id is not None:
        return SidebarMode.ICON_RAIL_WITH_PANEL
    if user_collapsed:
        return SidebarMode.ICON_RAIL
    return SidebarMode.EXPANDED


class SidebarLayout:
    """
    Shared layout state the host page reads to size its content area.
    Subscribers are called only when a value really changes.
    """

    def __init__(self, collapsed: bool = False, widths: Optional[dict] = None):
        self._collapsed = collapsed
        self._has_secondary_panel = False
        self.widths = dict(SIDEBAR_WIDTHS if widths is None else widths)
        self._subscribers: List[Callable] = []

    @property
    def is_collapsed(self) -> bool:
        return self._collapsed

    @property
    def has_secondary_panel(self) -> bool:
        return self._has_secondary_panel

    def set_collapsed(self, collapsed: bool) -> None:
        if collapsed != self._collapsed:
            self._collapsed = collapsed
            self._notify()

    def toggle_sidebar(self) -> None:
        self.set_collapsed(not self._collapsed)

    def set_has_secondary_panel(self, has_panel: bool) -> None:
        if has_panel != self._has_secondary_panel:
            self._has_secondary_panel = has_panel
            self._notify()

    def get_sidebar_width(self) -> int:
        if self._has_secondary_panel:
            return self.widths["ICON_RAIL"] + self.widths["SECONDARY_PANEL"]
        if self._collapsed:
            return self.widths["ICON_RAIL"]
        return self.widths["FULL"]

    def subscribe(self, callback: Callable) -> Callable[[], None]:
        self._subscribers.append(callback)
        return lambda: self._subscribers.remove(callback) if callback in self._subscribers else None

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            callback(self)


class SidebarModeController:
    """Holds the open module and pushes "has secondary panel" to the layout."""

    def __init__(self, layout: SidebarLayout):
        self.layout = layout
        self.open_module_id: Optional[str] = None
        # Last value handed to the layout (None = never sent)
        self._propagated_panel: Optional[bool] = None

    @property
    def mode(self) -> SidebarMode:
        return derive_sidebar_mode(self.layout.is_collapsed, self.open_module_id)

    def sync(self, open_module_id: Optional[str]) -> SidebarMode:
        self.open_module_id = open_module_id
        has_panel = open_module_id is not None
        if has_panel != self._propagated_panel:
            self._propagated_panel = has_panel
            self.layout.set_has_secondary_panel(has_panel)
        return self.mode

    def back(self) -> SidebarMode:
        return self.sync(None)

    def toggle(self) -> bool:
        """Flip the collapsed preference. Ignored while a module is open."""
        if self.open_module_id is not None:
            return False
        self.layout.toggle_sidebar()
        return True


# --- The controller ---

@dataclass(frozen=True)
class NavigationSnapshot:
    tree: Tuple[MenuEntry, ...]
    active: ActiveState
    mode: SidebarMode
    sidebar_width: int
    location: str
    expanded: FrozenSet[str] = frozenset()


class NavigationController:
    """
    One per mounted sidebar.

    Inputs: the static tree, the capability collaborator, the remote
    registry, and the layout. Outputs: `snapshot()` and subscriber
    callbacks. Every input change recomputes synchronously.
    """

    def __init__(
        self,
        static_tree=STATIC_MENU_TREE,
        permissions=None,
        registry=None,
        layout: Optional[SidebarLayout] = None,
        module: RemoteModule = FLEET_MODULE,
        route_index: Optional[dict] = None,
        location: str = "/",
    ):
        self.static_tree = tuple(static_tree)
        self.permissions = permissions or PendingPermissions()
        self.registry = registry
        self.layout = layout or SidebarLayout()
        self.module = module
        self.route_index = route_index
        self.location = location
        self.mode_controller = SidebarModeController(self.layout)

        self._remote_entries: Tuple[MenuEntry, ...] = ()
        self._remote_requested = False
        self._mounted = True
        # True after a menu click / back: location rules wait for the next navigate()
        self._manual_selection = False
        self._expanded = set()
        self._subscribers: List[Callable] = []
        self._last_snapshot: Optional[NavigationSnapshot] = None
        self._tree: Tuple[MenuEntry, ...] = ()
        self._active = ActiveState()

        self._recompute(location_changed=True)

    # -- read side --

    @property
    def tree(self) -> Tuple[MenuEntry, ...]:
        return self._tree

    @property
    def active(self) -> ActiveState:
        return self._active

    @property
    def mode(self) -> SidebarMode:
        return self.mode_controller.mode

    @property
    def open_module(self) -> Optional[MenuEntry]:
        """The open module, or None while it is not in the current tree."""
        return panel_entry(self._tree, self._active.open_module_id)

    def is_expanded(self, entry_id: str) -> bool:
        return entry_id in self._expanded

    def snapshot(self) -> NavigationSnapshot:
        return NavigationSnapshot(
            tree=self._tree,
            active=self._active,
            mode=self.mode,
            sidebar_width=self.layout.get_sidebar_width(),
            location=self.location,
            expanded=frozenset(self._expanded),
        )

    def subscribe(self, callback: Callable[[NavigationSnapshot], None]) -> Callable[[], None]:
        self._subscribers.append(callback)
        return lambda: self._subscribers.remove(callback) if callback in self._subscribers else None

    # -- inputs --

    def navigate(self, path: str) -> None:
        self.location = path
        self._manual_selection = False
        self._recompute(location_changed=True)

    def set_permissions(self, permissions) -> None:
        self.permissions = permissions
        self._recompute()

    async def load_remote_pages(self) -> Tuple[MenuEntry, ...]:
        """Fetch the module's pages once per mount and merge them in."""
        if self._remote_requested or self.registry is None:
            return self._remote_entries
        self._remote_requested = True

        pages = await self.registry.fetch_pages(self.module.module_id)
        if not self._mounted:
            logger.debug("Sidebar unmounted before module %s pages arrived; dropping them",
                         self.module.module_id)
            return ()

        self._remote_entries = normalize_pages(pages, self.module)
        self._recompute()
        return self._remote_entries

    def select_entry(self, entry_id: str) -> None:
        """
        A menu click. Top-level branches open the secondary panel, nested
        branches expand in place, leaves navigate. An empty top-level
        branch has no panel to open and is ignored.
        """
        entry = find_entry(self._tree, entry_id)
        if entry is None:
            return
        if entry.is_branch:
            if any(top.id == entry.id for top in self._tree):
                if not has_panel(entry):
                    return
                self._manual_selection = True
                self.mode_controller.sync(entry.id)
                self._active = ActiveState(self._active.active_top_level_id, entry.id)
                self._notify()
            else:
                self.toggle_expanded(entry.id)
            return
        if entry.route:
            self.navigate(entry.route)

    def back(self) -> None:
        """Close the secondary panel. Does not navigate."""
        self._manual_selection = True
        self.mode_controller.back()
        self._active = ActiveState(self._active.active_top_level_id, None)
        self._notify()

    def toggle_sidebar(self) -> bool:
        toggled = self.mode_controller.toggle()
        if toggled:
            self._notify()
        return toggled

    def toggle_expanded(self, entry_id: str) -> None:
        if entry_id in self._expanded:
            self._expanded.discard(entry_id)
        else:
            self._expanded.add(entry_id)
        self._notify()

    def unmount(self) -> None:
        self._mounted = False
        self._subscribers.clear()

    # -- internals --

    def _build_tree(self) -> Tuple[MenuEntry, ...]:
        visible = get_visible_menu(self.static_tree, self.permissions, self.route_index)
        if self.permissions.is_loading:
            return visible
        return merge_remote_branch(
            visible,
            self._remote_entries,
            lambda route: can_view_route(route, self.permissions, self.route_index),
            self.module,
        )

    def _recompute(self, location_changed: bool = False) -> None:
        self._tree = self._build_tree()
        previous = self._active.open_module_id

        if self._manual_selection and not location_changed:
            # Keep the clicked module (or the closed panel) until the next navigate()
            active_entry = find_active_top_level(self._tree, self.location)
            active = ActiveState(active_entry.id if active_entry else None, previous)
        else:
            active = resolve_active_state(self._tree, self.location, previous)

        self._active = active
        # The layout only gets a panel while the open module is actually drawable
        shown = self.open_module
        self.mode_controller.sync(shown.id if shown else None)
        self._notify()

    def _notify(self) -> None:
        snapshot = self.snapshot()
        if snapshot == self._last_snapshot:
            return
        self._last_snapshot = snapshot
        for callback in list(self._subscribers):
            callback(snapshot)
