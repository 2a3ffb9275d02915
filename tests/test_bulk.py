"""Tests for bulk delete / status fan-out."""

from unittest.mock import AsyncMock

import pytest

from shopscope.api.client import ApiError
from shopscope.models import MutationResponse
from shopscope.view.bulk import BulkAction, BulkOperation, BulkOperationRunner


def make_gateway():
    gateway = AsyncMock()
    gateway.delete = AsyncMock(return_value=MutationResponse(success=True))
    gateway.set_status = AsyncMock(return_value=MutationResponse(success=True))
    return gateway


class TestBulkOperation:
    def test_set_status_requires_value(self):
        with pytest.raises(ValueError):
            BulkOperation(BulkAction.SET_STATUS)

    def test_labels(self):
        assert BulkOperation.delete().label == "delete"
        assert BulkOperation.set_status("draft").label == "set status to draft"


class TestBulkOperationRunner:
    @pytest.mark.asyncio
    async def test_all_succeed(self):
        gateway = make_gateway()
        result = await BulkOperationRunner(gateway).run(["1", "2", "3"], BulkOperation.delete())
        assert result.all_succeeded
        assert [i.id for i in result.items] == ["1", "2", "3"]
        assert gateway.delete.await_count == 3
        assert result.summary() == "delete: all 3 succeeded"

    @pytest.mark.asyncio
    async def test_status_calls_gateway_per_id(self):
        gateway = make_gateway()
        await BulkOperationRunner(gateway).run(["a", "b"], BulkOperation.set_status("inactive"))
        gateway.set_status.assert_any_await("a", "inactive")
        gateway.set_status.assert_any_await("b", "inactive")
        gateway.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_partial_failure_reported_per_id(self):
        gateway = make_gateway()

        async def delete(record_id):
            if record_id == "2":
                raise ApiError("Product is referenced by an order", 409)
            if record_id == "3":
                return MutationResponse(success=False, error="Not found")
            return MutationResponse(success=True)

        gateway.delete = AsyncMock(side_effect=delete)
        result = await BulkOperationRunner(gateway).run(["1", "2", "3", "4"], BulkOperation.delete())

        assert not result.all_succeeded
        assert [i.id for i in result.succeeded] == ["1", "4"]
        failed = {i.id: i.error for i in result.failed}
        assert failed == {"2": "Product is referenced by an order", "3": "Not found"}
        assert result.summary() == "delete: 2 of 4 succeeded"
        # the other calls still ran; nothing is rolled back
        assert gateway.delete.await_count == 4

    @pytest.mark.asyncio
    async def test_duplicate_ids_issued_once(self):
        gateway = make_gateway()
        result = await BulkOperationRunner(gateway).run(["1", "1", "2"], BulkOperation.delete())
        assert [i.id for i in result.items] == ["1", "2"]
        assert gateway.delete.await_count == 2

    @pytest.mark.asyncio
    async def test_empty_ids(self):
        gateway = make_gateway()
        result = await BulkOperationRunner(gateway).run([], BulkOperation.delete())
        assert result.items == ()
        assert result.all_succeeded
        gateway.delete.assert_not_awaited()
