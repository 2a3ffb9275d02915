"""Tests for the list-screen view-model."""

import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import httpx
import pytest

from shopscope.api.client import AdminApiClient, ApiError, ResourceGateway
from shopscope.models import FetchResponse, MutationResponse
from shopscope.screens import ORDERS, PRODUCTS, USERS
from shopscope.view.bulk import BulkOperation
from shopscope.view.controller import ListController, NoticeLevel
from shopscope.view.sorting import SortDirection

NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)


def product(i: int, **fields) -> dict:
    record = {
        "_id": f"p{i}",
        "name": f"Product {i:03d}",
        "price": 100 + i,
        "stock": 20,
        "status": "active",
        "category": "Books",
        "createdAt": f"2024-01-{(i % 28) + 1:02d}T00:00:00Z",
    }
    record.update(fields)
    return record


def make_gateway(records=()):
    gateway = AsyncMock()
    gateway.fetch = AsyncMock(return_value=FetchResponse(success=True, data=list(records)))
    gateway.delete = AsyncMock(return_value=MutationResponse(success=True))
    gateway.set_status = AsyncMock(return_value=MutationResponse(success=True))
    return gateway


def make_controller(records=(), screen=PRODUCTS) -> ListController:
    return ListController(screen, make_gateway(records), debounce_ms=20, clock=lambda: NOW)


@pytest.fixture
def sample():
    return [
        product(1, name="Widget", price=10, stock=0),
        product(2, name="Gadget", price=25, stock=5, status="draft"),
        product(3, name="Gizmo", price=10, stock=50),
    ]


class TestLoading:
    @pytest.mark.asyncio
    async def test_load_populates_source_and_stats(self, sample):
        controller = make_controller(sample)
        assert await controller.load()
        state = controller.state()
        assert state.total_items == 3
        assert state.stats == {"total": 3, "active": 2, "out_of_stock": 1, "low_stock": 1}
        assert state.notice is None
        assert not state.loading

    @pytest.mark.asyncio
    async def test_fetch_failure_empties_view_and_posts_notice(self, sample):
        controller = make_controller(sample)
        await controller.load()
        controller.gateway.fetch = AsyncMock(side_effect=ApiError("Could not reach the server"))

        await controller.refresh()
        state = controller.state()
        assert state.total_items == 0
        assert state.rows == ()
        assert state.stats == {"total": 0, "active": 0, "out_of_stock": 0, "low_stock": 0}
        assert state.notice.level is NoticeLevel.ERROR
        assert "Could not reach the server" in state.notice.message

        controller.dismiss_notice()
        assert controller.state().notice is None

    @pytest.mark.asyncio
    async def test_unsuccessful_envelope_is_a_failure(self):
        controller = make_controller()
        controller.gateway.fetch = AsyncMock(return_value=FetchResponse.failure("Unauthorized"))
        await controller.refresh()
        assert controller.state().notice.message == "Failed to load products: Unauthorized"

    @pytest.mark.asyncio
    async def test_stale_response_is_discarded(self):
        old = [product(1, name="Old")]
        new = [product(2, name="New")]
        release_old = asyncio.Event()
        calls = 0

        async def fetch(filters=None, page=1, limit=100):
            nonlocal calls
            calls += 1
            if calls == 1:
                await release_old.wait()
                return FetchResponse(success=True, data=old)
            return FetchResponse(success=True, data=new)

        controller = make_controller()
        controller.gateway.fetch = AsyncMock(side_effect=fetch)

        first = asyncio.create_task(controller.refresh())
        while calls == 0:
            await asyncio.sleep(0)
        assert await controller.refresh()
        release_old.set()
        assert await first is False

        names = [row.record["name"] for row in controller.state().rows]
        assert names == ["New"]

    @pytest.mark.asyncio
    async def test_malformed_pagination_becomes_fetch_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={
                "success": True,
                "data": [{"_id": "p1"}],
                "pagination": {"page": 1, "limit": 10, "total": None, "pages": None},
            })

        client = AdminApiClient("http://shop.test/api", transport=httpx.MockTransport(handler))
        controller = ListController(PRODUCTS, ResourceGateway(client, PRODUCTS.resource), clock=lambda: NOW)

        assert await controller.refresh()
        state = controller.state()
        assert state.total_items == 0
        assert state.stats["total"] == 0
        assert state.notice.level is NoticeLevel.ERROR

    @pytest.mark.asyncio
    async def test_successful_reload_clears_load_error(self, sample):
        controller = make_controller()
        controller.gateway.fetch = AsyncMock(side_effect=[
            FetchResponse.failure("boom"),
            FetchResponse(success=True, data=sample),
        ])
        await controller.refresh()
        assert controller.state().notice.message == "Failed to load products: boom"

        await controller.refresh()
        state = controller.state()
        assert state.total_items == 3
        assert state.notice is None

    @pytest.mark.asyncio
    async def test_reload_keeps_unrelated_notice(self, sample):
        controller = make_controller(sample)
        await controller.load()
        await controller.run_bulk(BulkOperation.delete())
        assert controller.notice.level is NoticeLevel.WARNING
        await controller.refresh()
        assert controller.state().notice.level is NoticeLevel.WARNING

    def test_apply_fetch_sequence(self, sample):
        controller = make_controller()
        seq1 = controller.begin_fetch()
        seq2 = controller.begin_fetch()
        assert controller.loading
        assert not controller.apply_fetch(seq1, FetchResponse(success=True, data=sample))
        assert controller.loading
        assert controller.apply_fetch(seq2, FetchResponse(success=True, data=sample[:1]))
        assert not controller.loading
        assert controller.state().total_items == 1


class TestViewOperations:
    @pytest.mark.asyncio
    async def test_default_sort_is_created_desc(self):
        records = [product(i) for i in range(1, 4)]
        controller = make_controller(records)
        await controller.load()
        ids = [row.id for row in controller.state().rows]
        assert ids == ["p3", "p2", "p1"]

    @pytest.mark.asyncio
    async def test_filter_and_sort_scenario(self, sample):
        controller = make_controller(sample)
        await controller.load()
        controller.set_filter("status", "active")
        controller.set_sort("price", SortDirection.ASCENDING)
        assert [row.id for row in controller.state().rows] == ["p1", "p3"]

    @pytest.mark.asyncio
    async def test_filters_apply_client_side(self, sample):
        controller = make_controller(sample)
        await controller.load()
        controller.set_filter("status", "draft")
        controller.submit_query("gad")
        assert [row.id for row in controller.state().rows] == ["p2"]
        await controller.refresh()
        controller.gateway.fetch.assert_awaited_with(page=1, limit=100)
        assert controller.state().total_items == 1

    @pytest.mark.asyncio
    async def test_price_range_filter(self, sample):
        controller = make_controller(sample)
        await controller.load()
        controller.set_filter("priceRange", {"min": "15"})
        assert [row.id for row in controller.state().rows] == ["p2"]
        controller.clear_filters()
        assert controller.state().total_items == 3

    @pytest.mark.asyncio
    async def test_sort_by_toggles(self, sample):
        controller = make_controller(sample)
        await controller.load()
        spec = controller.sort_by("price")
        assert spec.direction is SortDirection.DESCENDING
        spec = controller.sort_by("price")
        assert spec.direction is SortDirection.ASCENDING
        spec = controller.sort_by("name")
        assert spec.key.name == "name"
        assert spec.direction is SortDirection.DESCENDING

    @pytest.mark.asyncio
    async def test_unsortable_column_keeps_sort(self, sample):
        controller = make_controller(sample)
        await controller.load()
        before = controller.sort
        assert controller.sort_by("sku") == before

    @pytest.mark.asyncio
    async def test_debounced_query(self, sample):
        controller = make_controller(sample)
        await controller.load()
        controller.type_query("g")
        controller.type_query("gi")
        controller.type_query("giz")
        assert controller.state().query == ""
        await asyncio.sleep(0.1)
        state = controller.state()
        assert state.query == "giz"
        assert [row.id for row in state.rows] == ["p3"]

    @pytest.mark.asyncio
    async def test_submit_and_clear_query(self, sample):
        controller = make_controller(sample)
        await controller.load()
        controller.type_query("wid")
        controller.submit_query()
        assert [row.id for row in controller.state().rows] == ["p1"]
        controller.clear_query()
        assert controller.state().total_items == 3

    @pytest.mark.asyncio
    async def test_listener_called_on_debounced_change(self, sample):
        seen = []
        controller = make_controller(sample)
        controller.subscribe(lambda c: seen.append(c.search.query))
        await controller.load()
        controller.type_query("gad")
        await asyncio.sleep(0.1)
        assert seen[-1] == "gad"


class TestPaging:
    @pytest.mark.asyncio
    async def test_navigation_and_clamping(self):
        controller = make_controller([product(i) for i in range(97)])
        await controller.load()
        controller.set_page_size(25)
        controller.last_page()
        state = controller.state()
        assert state.current_page == 4
        assert len(state.rows) == 22
        assert (state.start, state.end) == (76, 97)

        controller.next_page()
        assert controller.state().current_page == 4
        controller.go_to_page(99)
        assert controller.state().current_page == 4
        controller.previous_page()
        assert controller.state().current_page == 3
        controller.first_page()
        assert controller.state().current_page == 1

    @pytest.mark.asyncio
    async def test_filter_change_resets_page(self):
        controller = make_controller([product(i) for i in range(40)])
        await controller.load()
        controller.go_to_page(3)
        assert controller.state().current_page == 3
        controller.set_filter("category", "Books")
        assert controller.state().current_page == 1

    @pytest.mark.asyncio
    async def test_page_size_change_clamps(self):
        controller = make_controller([product(i) for i in range(40)])
        await controller.load()
        controller.go_to_page(4)
        controller.set_page_size(25)
        assert controller.state().current_page == 2

    def test_invalid_page_size(self):
        with pytest.raises(ValueError):
            make_controller().set_page_size(30)


class TestSelectionAndBulk:
    @pytest.mark.asyncio
    async def test_toggle_all_visible(self, sample):
        controller = make_controller(sample)
        await controller.load()
        controller.set_filter("status", "active")
        controller.toggle_all_visible()
        state = controller.state()
        assert state.selected_count == 2
        assert state.is_all_selected
        assert all(row.selected for row in state.rows)

        controller.toggle_row("p1")
        state = controller.state()
        assert state.selected_count == 1
        assert state.is_indeterminate

        controller.toggle_all_visible()
        assert controller.state().selected_count == 2
        controller.toggle_all_visible()
        assert controller.state().selected_count == 0

    @pytest.mark.asyncio
    async def test_selection_is_kept_when_search_hides_rows(self, sample):
        controller = make_controller(sample)
        await controller.load()
        controller.toggle_row("p2")
        controller.submit_query("widget")
        state = controller.state()
        assert state.selected_count == 1
        assert not any(row.selected for row in state.rows)

    @pytest.mark.asyncio
    async def test_run_bulk_clears_selection_and_refreshes(self, sample):
        controller = make_controller(sample)
        await controller.load()
        controller.toggle_row("p1")
        controller.toggle_row("p3")

        result = await controller.run_bulk(BulkOperation.set_status("inactive"))

        assert result.all_succeeded
        assert sorted(i.id for i in result.items) == ["p1", "p3"]
        assert controller.gateway.fetch.await_count == 2
        state = controller.state()
        assert state.selected_count == 0
        assert state.notice.level is NoticeLevel.SUCCESS

    @pytest.mark.asyncio
    async def test_run_bulk_partial_failure_notice(self, sample):
        controller = make_controller(sample)
        await controller.load()

        async def delete(record_id):
            if record_id == "p2":
                return MutationResponse(success=False, error="Locked")
            return MutationResponse(success=True)

        controller.gateway.delete = AsyncMock(side_effect=delete)
        controller.toggle_all_visible(True)
        result = await controller.run_bulk(BulkOperation.delete())

        assert len(result.failed) == 1
        notice = controller.state().notice
        assert notice.level is NoticeLevel.ERROR
        assert "2 of 3 succeeded" in notice.message

    @pytest.mark.asyncio
    async def test_run_bulk_without_selection(self, sample):
        controller = make_controller(sample)
        await controller.load()
        result = await controller.run_bulk(BulkOperation.delete())
        assert result.items == ()
        assert controller.state().notice.level is NoticeLevel.WARNING
        controller.gateway.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_run_bulk_rejects_unknown_status(self, sample):
        controller = make_controller(sample)
        await controller.load()
        controller.toggle_row("p1")
        with pytest.raises(ValueError):
            await controller.run_bulk(BulkOperation.set_status("teleported"))

    @pytest.mark.asyncio
    async def test_selected_records_in_view_order(self, sample):
        controller = make_controller(sample)
        await controller.load()
        controller.set_sort("name", SortDirection.ASCENDING)
        controller.toggle_row("p1")
        controller.toggle_row("p2")
        assert [r["_id"] for r in controller.selected_records()] == ["p2", "p1"]


class TestOrdersScreen:
    @pytest.mark.asyncio
    async def test_orders_debounce_and_stats(self):
        orders = [
            {"_id": "o1", "status": "pending", "totalAmount": 500, "user": {"name": "Ann", "email": "ann@x.io"}},
            {"_id": "o2", "status": "delivered", "total": 900, "customerName": "Ben"},
        ]
        controller = make_controller(orders, screen=ORDERS)
        assert controller._debouncer.delay == 0.5
        await controller.load()
        assert controller.state().stats == {"total": 2, "pending": 1, "processing": 0, "delivered": 1}
        controller.submit_query("ann@")
        assert [row.id for row in controller.state().rows] == ["o1"]


class TestRecordActions:
    @pytest.mark.asyncio
    async def test_delete_record(self, sample):
        controller = make_controller(sample)
        await controller.load()
        controller.toggle_row("p2")
        controller.toggle_row("p3")

        response = await controller.delete_record("p2")

        assert response.success
        controller.gateway.delete.assert_awaited_once_with("p2")
        assert controller.gateway.fetch.await_count == 2
        assert controller.selection.ids == {"p3"}
        assert controller.state().notice.message == "Product deleted"

    @pytest.mark.asyncio
    async def test_failed_delete_keeps_selection_and_skips_refresh(self, sample):
        controller = make_controller(sample)
        await controller.load()
        controller.toggle_row("p1")
        controller.gateway.delete = AsyncMock(side_effect=ApiError("Product is referenced by orders"))

        response = await controller.delete_record("p1")

        assert not response.success
        assert controller.gateway.fetch.await_count == 1
        assert controller.selection.ids == {"p1"}
        notice = controller.state().notice
        assert notice.level is NoticeLevel.ERROR
        assert notice.message == "Failed to delete product p1: Product is referenced by orders"

    @pytest.mark.asyncio
    async def test_order_status_transition(self):
        orders = [{"_id": "o1", "status": "pending"}, {"_id": "o2", "status": "delivered"}]
        controller = make_controller(orders, screen=ORDERS)
        await controller.load()

        labels = [a.status for a in controller.status_actions("o1")]
        assert labels == ["processing", "cancelled"]
        assert controller.status_actions("o2") == ()
        assert controller.status_actions("missing") == ()

        response = await controller.set_record_status("o1", "processing")
        assert response.success
        controller.gateway.set_status.assert_awaited_once_with("o1", "processing")
        assert controller.state().notice.message == "Order status updated to processing"

    @pytest.mark.asyncio
    async def test_set_record_status_rejects_unknown_status(self, sample):
        controller = make_controller(sample)
        await controller.load()
        with pytest.raises(ValueError):
            await controller.set_record_status("p1", "teleported")
        controller.gateway.set_status.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_user_status_toggle(self):
        users = [{"_id": "u1", "status": "active"}, {"_id": "u2", "status": "suspended"}]
        controller = make_controller(users, screen=USERS)
        await controller.load()
        assert [a.status for a in controller.status_actions("u1")] == ["inactive"]
        assert [a.status for a in controller.status_actions("u2")] == ["active"]

    @pytest.mark.asyncio
    async def test_update_record_without_refresh(self, sample):
        controller = make_controller(sample)
        controller.gateway.update = AsyncMock(return_value=MutationResponse(success=True))
        await controller.load()

        response = await controller.update_record("p1", {"price": 12}, refresh=False)

        assert response.success
        controller.gateway.update.assert_awaited_once_with("p1", {"price": 12})
        assert controller.gateway.fetch.await_count == 1
        assert controller.notice.message == "Product updated"
