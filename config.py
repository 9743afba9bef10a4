# config.py

import os
from dataclasses import dataclass

# Which entries exist in the Octopus sidebar.
# Top-level entries either navigate directly ("route") or open a group
# ("items"). Groups may hold one more level of nested groups.
# "icon" is a name from REMOTE_ICON_NAMES / menu_tree.Icon.
MENU_ITEMS = [
    # 1. ENTRY POINTS
    {"title": "Overview", "icon": "Home", "route": "/overview"},
    {"title": "Dashboard", "icon": "LayoutDashboard", "route": "/dashboard"},

    # 2. STOCK MOVEMENTS
    {
        "title": "Transfers",
        "icon": "Truck",
        "items": [
            {"title": "Receipts", "icon": "Inbox", "route": "/receipts"},
            {"title": "Deliveries", "icon": "Truck", "route": "/deliveries"},
            {"title": "Internal", "icon": "GitBranch", "route": "/internal"},
            {"title": "Manufacturing", "icon": "Settings", "route": "/manufacturing"},
            {"title": "Dropship", "icon": "Package", "route": "/dropships"},
            {"title": "Batch", "icon": "Layers", "route": "/batch"},
            {"title": "Wave", "icon": "TrendingUp", "route": "/wave"},
        ],
    },
    {
        "title": "Operations",
        "icon": "Wrench",
        "items": [
            {"title": "Physical Inventory", "icon": "Archive", "route": "/physical-inventory"},
            {"title": "Scrap", "icon": "Trash", "route": "/scrap"},
            {"title": "Landed Costs", "icon": "DollarSign", "route": "/landed-costs"},
        ],
    },

    # 3. CATALOG
    {
        "title": "Inventory",
        "icon": "Package",
        "items": [
            {"title": "Products", "icon": "Package", "route": "/products"},
            {"title": "Product Variants", "icon": "LayoutGrid", "route": "/product-variants"},
            {"title": "Lots & Serial Numbers", "icon": "QrCode", "route": "/lots-serial"},
            {"title": "Packages", "icon": "Boxes", "route": "/product-packages"},
            {"title": "Product Categories", "icon": "FolderTree", "route": "/categories"},
        ],
    },

    # 4. REPORTING
    {
        "title": "Reports",
        "icon": "BarChart",
        "items": [
            {"title": "Stocks", "icon": "Archive", "route": "/stocks"},
            {"title": "Locations", "icon": "MapPin", "route": "/reporting-location"},
            {"title": "Moves History", "icon": "History", "route": "/moves-history"},
            {"title": "Valuation", "icon": "DollarSign", "route": "/valuation"},
            {"title": "Report Templates", "icon": "FileSpreadsheet", "route": "/report-templates"},
            {"title": "Headers", "icon": "FileText", "route": "/report-headers"},
            {"title": "Footers", "icon": "FileText", "route": "/report-footers"},
            {"title": "Export Reports", "icon": "FileSpreadsheet", "route": "/report-export"},
            {"title": "Transfer Reports", "icon": "Truck", "route": "/report-transfer"},
            {"title": "Generated Reports", "icon": "FileSpreadsheet", "route": "/generated-reports"},
            {"title": "Auto Rules", "icon": "Activity", "route": "/report-rules"},
        ],
    },
    {
        "title": "Smart Reports",
        "icon": "FileText",
        "items": [
            {"title": "Templates", "icon": "FileSpreadsheet", "route": "/smart-reports"},
            {"title": "Template Builder", "icon": "Layers", "route": "/smart-reports/builder"},
            # Third level: only shown while at least one page inside is visible
            {
                "title": "Automation",
                "icon": "Zap",
                "items": [
                    {"title": "Data Sources", "icon": "Database", "route": "/smart-reports/data-sources"},
                    {"title": "Scheduled", "icon": "Clock", "route": "/smart-reports/scheduled"},
                    {"title": "History", "icon": "History", "route": "/smart-reports/history"},
                ],
            },
        ],
    },

    # 5. WAREHOUSE SETUP
    {
        "title": "Warehouse Management",
        "icon": "Warehouse",
        "items": [
            {"title": "Warehouses", "icon": "Warehouse", "route": "/warehouse-management"},
            {"title": "Locations", "icon": "MapPin", "route": "/locations"},
            {"title": "Routes", "icon": "Route", "route": "/routes"},
            {"title": "Rules", "icon": "Settings", "route": "/rules"},
            {"title": "Storage Categories", "icon": "FolderTree", "route": "/storage"},
            {"title": "Putaway Rules", "icon": "Container", "route": "/putaway"},
        ],
    },
    {
        "title": "Configuration",
        "icon": "Settings",
        "items": [
            {"title": "UoM Categories", "icon": "Ruler", "route": "/uom-categories"},
            {"title": "Delivery Methods", "icon": "Truck", "route": "/delivery-methods"},
            {"title": "Package Types", "icon": "Package", "route": "/package-types"},
            {"title": "Attributes", "icon": "Tag", "route": "/attributes"},
            {"title": "Product Packagings", "icon": "Boxes", "route": "/product-packagings"},
            {"title": "Field Management", "icon": "ListChecks", "route": "/field-management"},
            {"title": "Field Layout Editor", "icon": "LayoutGrid", "route": "/field-layout-editor"},
            {"title": "Integrations", "icon": "Settings", "route": "/integrations"},
            {"title": "License", "icon": "Copyright", "route": "/license"},
        ],
    },
    {"title": "Workflow", "icon": "GitBranch", "route": "/workflow-v2"},

    # 6. ADMIN (the fleet module is inserted right before this entry)
    {
        "title": "User Management",
        "icon": "Shield",
        "items": [
            {"title": "Users", "icon": "Users", "route": "/users"},
            {"title": "Roles", "icon": "Shield", "route": "/roles"},
            {"title": "Policies", "icon": "Key", "route": "/policies"},
            {"title": "Org Chart", "icon": "Network", "route": "/org-chart"},
        ],
    },
]

# Route -> page_id in the permissions backend.
# Routes missing here have no restriction configured and are always shown.
ROUTE_TO_PAGE_ID = {
    "/overview": "overview",
    "/receipts": "receipts",
    "/deliveries": "deliveries",
    "/internal": "internal",
    "/manufacturing": "manufacturing",
    "/dropships": "dropship",  # route is /dropships but page_id is 'dropship'
    "/batch": "batch",
    "/wave": "wave",
    "/physical-inventory": "physical-inventory",
    "/scrap": "scrap",
    "/landed-costs": "landed-costs",
    "/products": "products",
    "/product-variants": "product-variants",
    "/lots-serial": "lots-serial",
    "/product-packages": "product-packages",
    "/categories": "categories",
    "/stocks": "stocks",
    "/reporting-location": "reporting-location",
    "/moves-history": "moves-history",
    "/valuation": "valuation",
    "/warehouse-management": "warehouse-management",
    "/locations": "locations",
    "/routes": "routes",
    "/rules": "rules",
    "/storage": "storage",
    "/putaway": "putaway",
    "/warehouse-navigator": "warehouse-navigator",
    "/uom-categories": "uom-categories",
    "/delivery-methods": "delivery-methods",
    "/package-types": "package-types",
    "/attributes": "attributes",
    "/product-packagings": "product-packagings",
    "/workflow-v2": "workflow-v2",
    "/users": "users",
    "/roles": "roles",
    "/policies": "policies",
    "/policy-editor": "policy-editor",
    "/org-chart": "org-chart",
    "/dashboard": "dashboard",
    "/inventory": "inventory",
    "/fleet-management": "fleet-management",
    "/all-vehicles": "all-vehicles",
    # Smart Reports pages
    "/smart-reports": "smart-reports",
    "/smart-reports/builder": "smart-reports-builder",
    "/smart-reports/data-sources": "smart-reports-data-sources",
    "/smart-reports/history": "smart-reports-history",
    "/smart-reports/scheduled": "smart-reports-scheduled",
    # Reports pages
    "/report-templates": "report-templates",
    "/report-template-editor": "report-template-editor",
    "/generated-reports": "generated-reports",
    # Integrations
    "/integrations": "integrations",
    # Email
    "/send-email": "send-email",
}

# Which page_ids each role can view.
# Two parts:
#  - "explicit": named page_ids they're allowed
#  - "prefixes": any page_id starting with this string is also allowed
ROLE_PAGE_RULES = {
    "admin": {
        "explicit": [],
        "prefixes": [""]
    },
    "warehouse_manager": {
        "explicit": [
            "overview", "dashboard", "receipts", "deliveries", "internal",
            "physical-inventory", "scrap", "stocks", "locations", "routes",
            "rules", "storage", "putaway", "warehouse-management",
            "warehouse-navigator"
        ],
        "prefixes": ["fleet", "all-vehicles"]
    },
    "analyst": {
        "explicit": [
            "overview", "dashboard", "stocks", "valuation", "moves-history",
            "reporting-location", "report-templates", "generated-reports"
        ],
        "prefixes": ["smart-reports"]
    },
    "viewer": {
        "explicit": [
            "overview", "dashboard"
        ],
        "prefixes": []
    }
}

# Remote module whose pages are discovered at runtime (ABAC registry).
FLEET_MODULE_ID = 11
FLEET_BRANCH_ID = "fleet-management"
FLEET_BRANCH_LABEL = "Fleet Management"
FLEET_BRANCH_ICON = "Car"
# The fleet branch is inserted right before this top-level entry
FLEET_ANCHOR_ID = "user-management"

# Icon names the registry backend is known to send.
# Anything else renders with the "unknown" fallback glyph.
REMOTE_ICON_NAMES = [
    "Car", "Truck", "Home", "Package", "Settings",
    "Shield", "Users", "Key", "Network",
]
DEFAULT_REMOTE_ICON = "Settings"

# Sidebar widths in pixels (icon rail / full rail / secondary panel)
SIDEBAR_WIDTHS = {
    "ICON_RAIL": 60,
    "FULL": 240,
    "SECONDARY_PANEL": 208,
}


@dataclass
class NavSettings:
    """Runtime settings for the navigation shell, loaded from environment."""
    backend_base_url: str = "http://localhost:8000/api"
    tenant_id: str = ""
    fetch_timeout: float = 10.0
    log_level: str = "INFO"
    log_format: str = "text"
    default_role: str = "admin"

    @classmethod
    def from_env(cls) -> "NavSettings":
        return cls(
            backend_base_url=os.environ.get("NAV_BACKEND_BASE_URL", "http://localhost:8000/api"),
            tenant_id=os.environ.get("NAV_TENANT_ID", ""),
            fetch_timeout=float(os.environ.get("NAV_FETCH_TIMEOUT", "10")),
            log_level=os.environ.get("LOG_LEVEL", "INFO"),
            log_format=os.environ.get("LOG_FORMAT", "text"),
            default_role=os.environ.get("NAV_DEFAULT_ROLE", "admin"),
        )

    def tenant_headers(self) -> dict:
        """Headers sent with every registry call (tenant-scoped)."""
        headers = {"Content-Type": "application/json"}
        if self.tenant_id:
            headers["X-Tenant-ID"] = self.tenant_id
        return headers
