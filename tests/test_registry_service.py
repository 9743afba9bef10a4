"""Tests for the registry client, normalize and merge."""

import logging
from unittest.mock import AsyncMock, MagicMock

import pytest
import requests

from menu_tree import Icon, validate_menu_tree
from nav_state import NavigationController
from registry_service import (
    RemoteFetchError,
    RemoteModuleRegistry,
    RemotePage,
    merge_remote_branch,
    normalize_pages,
    parse_pages_response,
)

from conftest import branch, leaf


def ids(tree):
    return [entry.id for entry in tree]


def allow(route):
    return True


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

class TestParsePagesResponse:

    def test_valid_body(self):
        pages = parse_pages_response({
            "success": True,
            "data": [{"page_name": "Vehicles", "route": "/v", "is_active": True}],
        })
        assert pages[0].title == "Vehicles"
        assert pages[0].icon_name == "Settings"

    def test_null_data_is_empty(self):
        assert parse_pages_response({"success": True, "data": None}) == []

    @pytest.mark.parametrize("body", [
        [],
        {"success": False, "data": []},
        {"success": True, "data": {"oops": 1}},
    ])
    def test_bad_shapes_raise(self, body):
        with pytest.raises(RemoteFetchError):
            parse_pages_response(body)

    def test_bad_rows_are_skipped_not_fatal(self):
        """One unusable row never hides the good ones."""
        pages = parse_pages_response({
            "success": True,
            "data": [
                {"page_name": "Vehicles", "icon": "Car", "route": "/fleet/vehicles", "is_active": True},
                {"page_name": "Retired", "route": None, "is_active": False},
                {"page_name": "Draft", "route": "", "is_active": True},
                {"route": "/fleet/nameless", "is_active": True},
                "row",
            ],
        })
        assert [page.title for page in pages] == ["Vehicles"]


# ---------------------------------------------------------------------------
# Fetching
# ---------------------------------------------------------------------------

class TestFetchPages:

    @pytest.mark.asyncio
    async def test_success(self, settings, mock_session):
        """Pages come back and the call is tenant-scoped."""
        registry = RemoteModuleRegistry(settings, session=mock_session)
        pages = await registry.fetch_pages(11)

        assert [page.title for page in pages] == ["Vehicles", "Drivers"]
        args, kwargs = mock_session.get.call_args
        assert args[0] == "http://registry.test/api/v1/abac/registry/modules/11/pages"
        assert kwargs["headers"]["X-Tenant-ID"] == "tenant-7"
        assert kwargs["timeout"] == 3.0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        requests.exceptions.Timeout("slow"),
        requests.exceptions.ConnectionError("down"),
        requests.exceptions.RequestException("odd"),
    ])
    async def test_network_errors_give_empty_list(self, settings, mock_session, error, caplog):
        mock_session.get.side_effect = error
        registry = RemoteModuleRegistry(settings, session=mock_session)

        with caplog.at_level(logging.WARNING, logger="registry_service"):
            assert await registry.fetch_pages(11) == []
        assert caplog.records
        assert caplog.records[-1].module_id == 11

    @pytest.mark.asyncio
    async def test_bad_status_gives_empty_list(self, settings, mock_session, mock_response):
        mock_response.raise_for_status.side_effect = requests.exceptions.HTTPError("500")
        registry = RemoteModuleRegistry(settings, session=mock_session)
        assert await registry.fetch_pages(11) == []

    @pytest.mark.asyncio
    async def test_success_false_gives_empty_list(self, settings, mock_session, mock_response):
        mock_response.json.return_value = {"success": False, "data": []}
        registry = RemoteModuleRegistry(settings, session=mock_session)
        assert await registry.fetch_pages(11) == []

    @pytest.mark.asyncio
    async def test_non_json_gives_empty_list(self, settings, mock_session, mock_response):
        mock_response.json.side_effect = ValueError("not json")
        registry = RemoteModuleRegistry(settings, session=mock_session)
        assert await registry.fetch_pages(11) == []

    @pytest.mark.asyncio
    async def test_mixed_rows_keep_good_pages(self, settings, mock_session, mock_response):
        mock_response.json.return_value = {
            "success": True,
            "data": [
                {"page_name": "Vehicles", "icon": "Car", "route": "/fleet/vehicles", "is_active": True},
                {"page_name": "Retired", "icon": "Truck", "route": None, "is_active": False},
            ],
        }
        registry = RemoteModuleRegistry(settings, session=mock_session)
        pages = await registry.fetch_pages(11)
        assert [page.title for page in pages] == ["Vehicles"]

    def test_no_tenant_header_without_tenant(self, settings):
        settings.tenant_id = ""
        assert "X-Tenant-ID" not in settings.tenant_headers()


# ---------------------------------------------------------------------------
# Normalize / merge
# ---------------------------------------------------------------------------

class TestNormalizePages:

    def test_inactive_pages_are_dropped(self, remote_pages, test_module):
        entries = normalize_pages(remote_pages, test_module)
        assert ids(entries) == ["fleet-management/fleet-vehicles", "fleet-management/fleet-drivers"]
        assert entries[0].icon is Icon.CAR
        assert all(not entry.is_branch for entry in entries)

    def test_same_title_pages_get_distinct_ids(self, test_module):
        """Ids follow the route, so equal titles stay apart."""
        pages = [
            RemotePage(title="Vehicles", icon_name="Car", route="/fleet/vehicles", is_active=True),
            RemotePage(title="Vehicles", icon_name="Car", route="/fleet/drivers", is_active=True),
        ]
        entries = normalize_pages(pages, test_module)
        assert len(set(ids(entries))) == 2
        assert validate_menu_tree(entries) == []

    def test_clashing_slugs_get_position_suffix(self, test_module):
        pages = [
            RemotePage(title="A", icon_name="Car", route="/fleet/a", is_active=True),
            RemotePage(title="B", icon_name="Car", route="/fleet-a", is_active=True),
            RemotePage(title="C", icon_name="Car", route="/", is_active=True),
            RemotePage(title="D", icon_name="Car", route="/*", is_active=True),
        ]
        entries = normalize_pages(pages, test_module)
        assert ids(entries) == [
            "fleet-management/fleet-a",
            "fleet-management/fleet-a-1",
            "fleet-management/2",
            "fleet-management/3",
        ]

    @pytest.mark.asyncio
    async def test_second_same_title_page_navigates_to_its_own_route(self, sample_tree, allow_all,
                                                                      route_index, test_module):
        pages = [
            RemotePage(title="Vehicles", icon_name="Car", route="/fleet/vehicles", is_active=True),
            RemotePage(title="Vehicles", icon_name="Car", route="/fleet/drivers", is_active=True),
        ]
        registry = MagicMock()
        registry.fetch_pages = AsyncMock(return_value=pages)
        controller = NavigationController(static_tree=sample_tree, permissions=allow_all,
                                          registry=registry, module=test_module,
                                          route_index=route_index)
        await controller.load_remote_pages()

        second = controller.tree[6].children[1]
        controller.select_entry(second.id)
        assert controller.location == "/fleet/drivers"


class TestMergeRemoteBranch:

    def test_inserts_before_anchor(self, sample_tree, remote_pages, test_module):
        """New branch takes the anchor's index; the anchor moves down one."""
        entries = normalize_pages(remote_pages[:1], test_module)
        merged = merge_remote_branch(sample_tree, entries, allow, test_module)

        assert merged[6].id == "fleet-management"
        assert merged[7].id == "user-management"
        assert len(merged) == len(sample_tree) + 1
        assert ids(merged[6].children) == ["fleet-management/fleet-vehicles"]

    def test_appends_without_anchor(self, sample_tree, remote_pages, test_module):
        tree = sample_tree[:6]
        merged = merge_remote_branch(tree, normalize_pages(remote_pages, test_module), allow, test_module)
        assert merged[-1].id == "fleet-management"

    def test_replaces_existing_branch(self, sample_tree, remote_pages, test_module):
        """Existing branch keeps its place; children become the remote pages."""
        tree = sample_tree[:2] + (branch("fleet-management", [leaf("fleet-management/old", "/old")]),) \
            + sample_tree[2:]
        merged = merge_remote_branch(tree, normalize_pages(remote_pages, test_module), allow, test_module)

        assert ids(merged).count("fleet-management") == 1
        assert merged[2].id == "fleet-management"
        assert ids(merged[2].children) == ["fleet-management/fleet-vehicles", "fleet-management/fleet-drivers"]

    def test_empty_remote_list_is_a_no_op(self, sample_tree, test_module):
        assert merge_remote_branch(sample_tree, (), allow, test_module) == sample_tree

    def test_all_remote_denied_is_a_no_op(self, sample_tree, remote_pages, test_module):
        entries = normalize_pages(remote_pages, test_module)
        assert merge_remote_branch(sample_tree, entries, lambda route: False, test_module) == sample_tree

    def test_remote_pages_are_filtered(self, sample_tree, remote_pages, test_module):
        entries = normalize_pages(remote_pages, test_module)
        merged = merge_remote_branch(sample_tree, entries, lambda route: route != "/fleet/drivers",
                                     test_module)
        assert ids(merged[6].children) == ["fleet-management/fleet-vehicles"]
