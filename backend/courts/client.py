from __future__ import annotations

import os
from typing import Any, Protocol

import httpx
import structlog

from courts.types import Court, CourtFindResult, FindParams

logger = structlog.get_logger(__name__)


class CourtsApiError(Exception):
    """
    Court API request failed (transport error, non-2xx status or bad payload).
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class CourtFinder(Protocol):
    async def find(self, params: FindParams) -> list[CourtFindResult]: ...


def api_base_url() -> str:
    return (os.getenv("DADAR_API_URL") or "http://localhost:8000/api").rstrip("/")


class CourtsClient:
    """
    Async client for the court lookup API.
    """

    def __init__(
        self,
        *,
        base_url: str | None = None,
        timeout_s: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url or api_base_url(),
            timeout=timeout_s,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get_all(self) -> list[Court]:
        data = await self._get("/court/")
        return [Court.model_validate(row) for row in data]

    async def get_by_id(self, court_id: str) -> Court:
        data = await self._get(f"/court/{court_id}/")
        return Court.model_validate(data)

    async def find(self, params: FindParams) -> list[CourtFindResult]:
        logger.debug("courts_find", params=params.key)
        data = await self._get("/court/find", params=params.to_query())
        try:
            return [CourtFindResult.model_validate(row) for row in data]
        except (TypeError, ValueError) as exc:
            raise CourtsApiError(f"Unexpected /court/find payload: {exc}") from exc

    async def _get(self, path: str, *, params: Any = None) -> Any:
        try:
            resp = await self._client.get(path, params=params)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "courts_api_status_error",
                path=path,
                status_code=exc.response.status_code,
            )
            raise CourtsApiError(
                f"GET {path} failed with {exc.response.status_code}",
                status_code=exc.response.status_code,
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("courts_api_error", path=path, error=str(exc))
            raise CourtsApiError(f"GET {path} failed: {exc}") from exc
