from __future__ import annotations

from typing import Literal

import structlog

from courts.client import CourtFinder, CourtsApiError
from courts.types import CourtFindResult, FindParams

logger = structlog.get_logger(__name__)

QueryStatus = Literal["idle", "loading", "success", "error"]


class CourtQuery:
    """
    Keyed court lookup.

    Only the response whose key matches the most recently requested key is
    applied; late answers for older keys are dropped. In-flight requests are
    never cancelled.
    """

    def __init__(self, finder: CourtFinder) -> None:
        self.finder = finder
        self.current_key: tuple | None = None
        self.status: QueryStatus = "idle"
        self.data: list[CourtFindResult] = []
        self.error: str | None = None

    @staticmethod
    def enabled(params: FindParams | None) -> bool:
        return params is not None and len(params.judicial_ids) > 0

    async def run(self, params: FindParams | None) -> list[CourtFindResult] | None:
        """
        Fetch results for `params`.

        Returns the applied result list (empty on failure), or None when the
        query is disabled or the response was superseded by a newer key.
        """
        if params is None or not self.enabled(params):
            return None
        key = params.key
        self.current_key = key
        self.status = "loading"
        try:
            rows = await self.finder.find(params)
        except CourtsApiError as exc:
            logger.warning("courts_find_failed", key=key, error=str(exc))
            return self._fail(key, str(exc))
        except Exception:
            logger.exception("courts_find_crashed", key=key)
            return self._fail(key, "Court lookup failed")

        if key != self.current_key:
            logger.debug("courts_stale_response_dropped", key=key)
            return None
        self.status = "success"
        self.error = None
        self.data = list(rows)
        return self.data

    def _fail(self, key: tuple, message: str) -> list[CourtFindResult] | None:
        if key != self.current_key:
            logger.debug("courts_stale_error_dropped", key=key)
            return None
        self.status = "error"
        self.error = message
        self.data = []
        return []
