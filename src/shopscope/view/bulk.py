"""Fan-out of one action over every selected record id."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from ..models import FetchResponse, MutationResponse

logger = logging.getLogger(__name__)


class RecordGateway(Protocol):
    """Collection boundary of one list screen."""

    async def fetch(
        self,
        filters: Mapping[str, Any] | None = None,
        page: int = 1,
        limit: int = 100,
    ) -> FetchResponse:
        ...

    async def update(self, record_id: str, fields: Mapping[str, Any]) -> MutationResponse:
        ...

    async def set_status(self, record_id: str, status: str) -> MutationResponse:
        ...

    async def delete(self, record_id: str) -> MutationResponse:
        ...


class BulkAction(str, Enum):
    DELETE = "delete"
    SET_STATUS = "set_status"


@dataclass(frozen=True)
class BulkOperation:
    action: BulkAction
    status: str | None = None

    def __post_init__(self) -> None:
        if self.action is BulkAction.SET_STATUS and not self.status:
            raise ValueError("set_status needs a status value")

    @classmethod
    def delete(cls) -> BulkOperation:
        return cls(BulkAction.DELETE)

    @classmethod
    def set_status(cls, status: str) -> BulkOperation:
        return cls(BulkAction.SET_STATUS, status)

    @property
    def label(self) -> str:
        if self.action is BulkAction.DELETE:
            return "delete"
        return f"set status to {self.status}"

    async def apply(self, gateway: RecordGateway, record_id: str) -> MutationResponse:
        if self.action is BulkAction.DELETE:
            return await gateway.delete(record_id)
        return await gateway.set_status(record_id, self.status or "")


@dataclass(frozen=True)
class BulkItemResult:
    id: str
    success: bool
    error: str | None = None


@dataclass(frozen=True)
class BulkResult:
    """Per-id outcome of a bulk run.

    Calls are not rolled back: when some items fail, the ones in
    :attr:`succeeded` have already been applied on the server.
    """

    operation: BulkOperation
    items: tuple[BulkItemResult, ...] = ()

    @property
    def succeeded(self) -> tuple[BulkItemResult, ...]:
        return tuple(i for i in self.items if i.success)

    @property
    def failed(self) -> tuple[BulkItemResult, ...]:
        return tuple(i for i in self.items if not i.success)

    @property
    def all_succeeded(self) -> bool:
        return all(i.success for i in self.items)

    def summary(self) -> str:
        total = len(self.items)
        ok = len(self.succeeded)
        if total and ok == total:
            return f"{self.operation.label}: all {total} succeeded"
        return f"{self.operation.label}: {ok} of {total} succeeded"


class BulkOperationRunner:
    """Issues *operation* for every id concurrently; never raises.

    No retry and no rollback.  Failures (an exception or a non-success
    response) are reported per id.
    """

    def __init__(self, gateway: RecordGateway) -> None:
        self.gateway = gateway

    async def run(self, ids: Iterable[str], operation: BulkOperation) -> BulkResult:
        ordered = list(dict.fromkeys(ids))
        if not ordered:
            return BulkResult(operation)

        logger.info("Bulk %s on %d records", operation.label, len(ordered))
        outcomes = await asyncio.gather(
            *(operation.apply(self.gateway, record_id) for record_id in ordered),
            return_exceptions=True,
        )

        items: list[BulkItemResult] = []
        for record_id, outcome in zip(ordered, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning("Bulk %s failed for %s: %s", operation.label, record_id, outcome)
                items.append(BulkItemResult(record_id, False, str(outcome) or type(outcome).__name__))
            elif not outcome.success:
                logger.warning("Bulk %s rejected for %s: %s", operation.label, record_id, outcome.error)
                items.append(BulkItemResult(record_id, False, outcome.error or "Request failed"))
            else:
                items.append(BulkItemResult(record_id, True))

        result = BulkResult(operation, tuple(items))
        logger.info("Bulk %s", result.summary())
        return result
