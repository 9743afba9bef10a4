"""
menu_tree.py

The static navigation tree and its building blocks.

The sidebar is an ordered tree of at most three levels:

    Top-level entry      (rail icon)
      -> Sub entry       (secondary panel row)
           -> Nested     (indented row inside a sub entry)

Every entry is an immutable `MenuEntry`. Trees are plain tuples of entries,
so filtering and merging always build new values and never touch
`config.MENU_ITEMS` or `STATIC_MENU_TREE`.
"""

import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from config import MENU_ITEMS, REMOTE_ICON_NAMES, ROUTE_TO_PAGE_ID

MAX_DEPTH = 3


# --- [S1] ICONS ---

class Icon(str, Enum):
    """Icons the sidebar knows how to draw. UNKNOWN is the explicit fallback."""
    HOME = "Home"
    LAYOUT_DASHBOARD = "LayoutDashboard"
    TRUCK = "Truck"
    CAR = "Car"
    INBOX = "Inbox"
    GIT_BRANCH = "GitBranch"
    SETTINGS = "Settings"
    PACKAGE = "Package"
    LAYERS = "Layers"
    TRENDING_UP = "TrendingUp"
    WRENCH = "Wrench"
    ARCHIVE = "Archive"
    TRASH = "Trash"
    DOLLAR_SIGN = "DollarSign"
    LAYOUT_GRID = "LayoutGrid"
    QR_CODE = "QrCode"
    BOXES = "Boxes"
    FOLDER_TREE = "FolderTree"
    BAR_CHART = "BarChart"
    MAP_PIN = "MapPin"
    HISTORY = "History"
    FILE_SPREADSHEET = "FileSpreadsheet"
    FILE_TEXT = "FileText"
    ACTIVITY = "Activity"
    ZAP = "Zap"
    DATABASE = "Database"
    CLOCK = "Clock"
    WAREHOUSE = "Warehouse"
    ROUTE = "Route"
    CONTAINER = "Container"
    RULER = "Ruler"
    TAG = "Tag"
    LIST_CHECKS = "ListChecks"
    COPYRIGHT = "Copyright"
    SHIELD = "Shield"
    USERS = "Users"
    KEY = "Key"
    NETWORK = "Network"
    UNKNOWN = "Unknown"


# Renderer map: how each icon is drawn in the Streamlit sidebar
ICON_GLYPHS: Dict[Icon, str] = {
    Icon.HOME:             "🏡",
    Icon.LAYOUT_DASHBOARD: "📊",
    Icon.TRUCK:            "🚚",
    Icon.CAR:              "🚗",
    Icon.INBOX:            "📥",
    Icon.GIT_BRANCH:       "🔀",
    Icon.SETTINGS:         "⚙️",
    Icon.PACKAGE:          "📦",
    Icon.LAYERS:           "🗂️",
    Icon.TRENDING_UP:      "📈",
    Icon.WRENCH:           "🔧",
    Icon.ARCHIVE:          "🗄️",
    Icon.TRASH:            "🗑️",
    Icon.DOLLAR_SIGN:      "💲",
    Icon.LAYOUT_GRID:      "🔳",
    Icon.QR_CODE:          "🔖",
    Icon.BOXES:            "📚",
    Icon.FOLDER_TREE:      "🗃️",
    Icon.BAR_CHART:        "📉",
    Icon.MAP_PIN:          "📍",
    Icon.HISTORY:          "🕘",
    Icon.FILE_SPREADSHEET: "🧾",
    Icon.FILE_TEXT:        "📄",
    Icon.ACTIVITY:         "⚡",
    Icon.ZAP:              "🤖",
    Icon.DATABASE:         "💾",
    Icon.CLOCK:            "⏰",
    Icon.WAREHOUSE:        "🏭",
    Icon.ROUTE:            "🛣️",
    Icon.CONTAINER:        "🧱",
    Icon.RULER:            "📏",
    Icon.TAG:              "🏷️",
    Icon.LIST_CHECKS:      "✅",
    Icon.COPYRIGHT:        "©️",
    Icon.SHIELD:           "🛡️",
    Icon.USERS:            "👥",
    Icon.KEY:              "🔑",
    Icon.NETWORK:          "🕸️",
    Icon.UNKNOWN:          "❔",
}


def icon_from_name(name: Optional[str], known: Optional[List[str]] = None) -> Icon:
    """
    Resolve an icon name to an `Icon`.

    `known` restricts the lookup table (the registry backend only has a
    handful of names wired up); anything outside it, or not an Icon at all,
    becomes Icon.UNKNOWN.
    """
    if not name or (known is not None and name not in known):
        return Icon.UNKNOWN
    try:
        return Icon(name)
    except ValueError:
        return Icon.UNKNOWN


def remote_icon_from_name(name: Optional[str]) -> Icon:
    return icon_from_name(name, known=REMOTE_ICON_NAMES)


def render_icon(icon: Icon) -> str:
    return ICON_GLYPHS.get(icon, ICON_GLYPHS[Icon.UNKNOWN])


# --- [S2] THE ENTRY TYPE ---

@dataclass(frozen=True)
class MenuEntry:
    id: str
    label: str
    icon: Icon = Icon.UNKNOWN
    route: Optional[str] = None
    # None -> leaf. A tuple (even an empty one) -> branch.
    children: Optional[Tuple["MenuEntry", ...]] = field(default=None)

    @property
    def is_branch(self) -> bool:
        return self.children is not None

    @property
    def is_inert(self) -> bool:
        """A leaf with nowhere to go."""
        return not self.is_branch and not self.route

    def with_children(self, children) -> "MenuEntry":
        return replace(self, children=tuple(children))


def slugify(text: str) -> str:
    """'Lots & Serial Numbers' -> 'lots-serial-numbers'"""
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower())
    return slug.strip("-")


def build_menu_tree(items: List[dict], parent_id: Optional[str] = None) -> Tuple[MenuEntry, ...]:
    """
    Turn the nested dicts from config.MENU_ITEMS into MenuEntry tuples.

    Ids come from an explicit "key" or the slugified title. Child ids are
    prefixed with the parent id so "Locations" under Reports and under
    Warehouse Management stay distinct.
    """
    entries = []
    for item in items:
        own_id = item.get("key") or slugify(item["title"])
        entry_id = f"{parent_id}/{own_id}" if parent_id else own_id
        children = None
        if "items" in item:
            children = build_menu_tree(item["items"] or [], parent_id=entry_id)
        entries.append(MenuEntry(
            id=entry_id,
            label=item["title"],
            icon=icon_from_name(item.get("icon")),
            route=item.get("route"),
            children=children,
        ))
    return tuple(entries)


STATIC_MENU_TREE: Tuple[MenuEntry, ...] = build_menu_tree(MENU_ITEMS)


# --- [S3] TREE HELPERS ---

def walk(tree, depth: int = 1) -> Iterator[Tuple[MenuEntry, int]]:
    """Depth-first, pre-order walk yielding (entry, depth)."""
    for entry in tree:
        yield entry, depth
        if entry.children:
            yield from walk(entry.children, depth + 1)


def find_entry(tree, entry_id: str) -> Optional[MenuEntry]:
    for entry, _ in walk(tree):
        if entry.id == entry_id:
            return entry
    return None


def contains_route(entry: MenuEntry, path: str) -> bool:
    """True if the entry itself or any descendant routes to `path`."""
    if entry.route == path:
        return True
    return any(contains_route(child, path) for child in entry.children or ())


def trail_to_route(tree, path: str) -> List[MenuEntry]:
    """Entries from the top level down to the one routing to `path` (breadcrumb)."""
    for entry in tree:
        if entry.route == path:
            return [entry]
        if entry.children:
            below = trail_to_route(entry.children, path)
            if below:
                return [entry] + below
    return []


# --- [S4] ROUTE ACCESS INDEX ---

def permission_key_for(route: Optional[str], route_index: Optional[Dict[str, str]] = None) -> Optional[str]:
    """Exact-match lookup. None means no restriction is configured."""
    if not route:
        return None
    index = ROUTE_TO_PAGE_ID if route_index is None else route_index
    return index.get(route)


# --- [S5] TEST-TIME VALIDATION ---

def validate_menu_tree(tree) -> List[str]:
    """
    List the ways a tree is malformed. Never used at runtime: the resolver
    and filter handle these cases with first-match / no-prune rules.
    """
    problems = []
    seen_ids = set()
    seen_routes = {}
    for entry, depth in walk(tree):
        if depth > MAX_DEPTH:
            problems.append(f"{entry.id}: nested deeper than {MAX_DEPTH} levels")
        if entry.id in seen_ids:
            problems.append(f"{entry.id}: duplicate id")
        seen_ids.add(entry.id)
        if entry.route:
            if entry.route in seen_routes:
                problems.append(
                    f"{entry.id}: route {entry.route} already used by {seen_routes[entry.route]}"
                )
            else:
                seen_routes[entry.route] = entry.id
        if entry.is_branch and not entry.children:
            problems.append(f"{entry.id}: branch has no children")
    return problems
