"""Shared fixtures for the navigation tests."""

from unittest.mock import MagicMock

import pytest

from config import NavSettings
from menu_tree import Icon, MenuEntry
from registry_service import RemoteModule, RemotePage
from security import StaticPermissions


# ---------------------------------------------------------------------------
# Trees
# ---------------------------------------------------------------------------

def leaf(entry_id, route, label=None):
    return MenuEntry(id=entry_id, label=label or entry_id.title(), icon=Icon.HOME, route=route)


def branch(entry_id, children, label=None):
    return MenuEntry(id=entry_id, label=label or entry_id.title(), icon=Icon.PACKAGE,
                     children=tuple(children))


@pytest.fixture
def sample_tree():
    """Seven top-level entries, "User Management" at index 6."""
    return (
        leaf("overview", "/overview"),
        leaf("dashboard", "/dashboard"),
        branch("transfers", [
            leaf("transfers/receipts", "/receipts"),
            leaf("transfers/deliveries", "/deliveries"),
        ]),
        branch("reports", [
            leaf("reports/stocks", "/stocks"),
            branch("reports/automation", [
                leaf("reports/automation/history", "/smart-reports/history"),
            ]),
        ]),
        branch("configuration", []),
        leaf("workflow", "/workflow-v2"),
        branch("user-management", [
            leaf("user-management/users", "/users"),
            leaf("user-management/roles", "/roles"),
        ], label="User Management"),
    )


@pytest.fixture
def route_index():
    return {
        "/overview": "overview",
        "/dashboard": "dashboard",
        "/receipts": "receipts",
        "/deliveries": "deliveries",
        "/stocks": "stocks",
        "/smart-reports/history": "smart-reports-history",
        "/users": "users",
        "/roles": "roles",
        "/fleet/vehicles": "fleet-vehicles",
        "/fleet/drivers": "fleet-drivers",
    }


# ---------------------------------------------------------------------------
# Permissions / registry
# ---------------------------------------------------------------------------

@pytest.fixture
def allow_all(route_index):
    return StaticPermissions({page_id: True for page_id in route_index.values()})


@pytest.fixture
def test_module():
    return RemoteModule(
        module_id=11,
        branch_id="fleet-management",
        label="Fleet Management",
        icon_name="Car",
        anchor_id="user-management",
    )


@pytest.fixture
def remote_pages():
    return [
        RemotePage(title="Vehicles", icon_name="Car", route="/fleet/vehicles", is_active=True),
        RemotePage(title="Drivers", icon_name="Users", route="/fleet/drivers", is_active=True),
        RemotePage(title="Retired", icon_name="Truck", route="/fleet/retired", is_active=False),
    ]


@pytest.fixture
def settings():
    return NavSettings(backend_base_url="http://registry.test/api/", tenant_id="tenant-7",
                       fetch_timeout=3.0)


@pytest.fixture
def mock_response():
    """requests.Response stand-in with a successful pages payload."""
    response = MagicMock()
    response.raise_for_status.return_value = None
    response.json.return_value = {
        "success": True,
        "data": [
            {"page_name": "Vehicles", "icon": "Car", "route": "/fleet/vehicles", "is_active": True},
            {"page_name": "Drivers", "icon": "Users", "route": "/fleet/drivers", "is_active": True},
        ],
    }
    return response


@pytest.fixture
def mock_session(mock_response):
    session = MagicMock()
    session.get.return_value = mock_response
    return session
