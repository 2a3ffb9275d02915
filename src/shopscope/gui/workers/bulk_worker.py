"""Background bulk and single-record delete / status change."""

from __future__ import annotations

from shopscope.api.client import ApiError
from shopscope.models import MutationResponse
from shopscope.view.bulk import BulkOperation, BulkOperationRunner, BulkResult, RecordGateway

from .base_worker import AsyncWorker


class BulkWorker(AsyncWorker):
    """Run *operation* over *ids*; ``result`` carries the BulkResult."""

    def __init__(self, gateway: RecordGateway, ids: list[str], operation: BulkOperation) -> None:
        super().__init__()
        self.runner = BulkOperationRunner(gateway)
        self.ids = list(ids)
        self.operation = operation

    async def execute_async(self) -> BulkResult:
        return await self.runner.run(self.ids, self.operation)


class RecordWorker(AsyncWorker):
    """Apply *operation* to a single row.

    ``result`` carries ``(row_id, operation, MutationResponse)``; API errors
    come back as a failed response.
    """

    def __init__(self, gateway: RecordGateway, row_id: str, operation: BulkOperation) -> None:
        super().__init__()
        self.gateway = gateway
        self.row_id = row_id
        self.operation = operation

    async def execute_async(self) -> tuple[str, BulkOperation, MutationResponse]:
        try:
            response = await self.operation.apply(self.gateway, self.row_id)
        except ApiError as exc:
            response = MutationResponse(success=False, error=exc.message)
        return self.row_id, self.operation, response
