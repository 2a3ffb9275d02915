"""Background fetch of one screen's record collection."""

from __future__ import annotations

import logging

from shopscope.api.client import ApiError
from shopscope.models import FetchResponse
from shopscope.view.bulk import RecordGateway

from .base_worker import AsyncWorker

logger = logging.getLogger(__name__)


class FetchWorker(AsyncWorker):
    """Fetch the whole (unfiltered) collection behind *gateway*.

    The ``result`` signal carries ``(seq, FetchResponse)``; *seq* is the
    number the controller handed out in ``begin_fetch`` and is passed back
    untouched so stale responses can be recognised.  API errors come back
    as a failed response, not on the ``error`` signal.
    """

    def __init__(self, gateway: RecordGateway, seq: int, limit: int = 100) -> None:
        super().__init__()
        self.gateway = gateway
        self.seq = seq
        self.limit = limit

    async def execute_async(self) -> tuple[int, FetchResponse]:
        try:
            response = await self.gateway.fetch(page=1, limit=self.limit)
        except ApiError as exc:
            logger.warning("Fetch #%d failed: %s", self.seq, exc.message)
            response = FetchResponse.failure(exc.message)
        return self.seq, response
