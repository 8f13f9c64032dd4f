"""
TMDBService — thin async client for The Movie Database API.

Primary (load-bearing) metadata source for TV ratings: show details,
external-id cross-references and per-season episode lists.

Requires:
    TMDB_API_KEY env var  (free key at https://www.themoviedb.org/settings/api)

Every call carries the API key and the configured locale. There is no
retry: a non-2xx answer raises UpstreamError with the response body so
the caller can fail the whole request.
"""
import logging
from typing import Any, Optional

import httpx

from app.core import config
from app.core.errors import UpstreamError

logger = logging.getLogger(__name__)


class TMDBService:
    """Async TMDB client. Single attempt per call, fails fast."""

    def __init__(
        self,
        base_url: str = config.TMDB_BASE,
        timeout: float = config.HTTP_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def fetch(self, path: str, params: Optional[dict[str, Any]] = None) -> dict:
        """
        GET ``{TMDB_BASE}{path}`` and return the decoded JSON body.

        ``None`` values in ``params`` are left out of the query string.
        Raises ConfigurationError when TMDB_API_KEY is unset and
        UpstreamError on a non-2xx status or a transport failure.
        """
        query = {"api_key": config.tmdb_api_key(), "language": config.TMDB_LANGUAGE}
        for key, value in (params or {}).items():
            if value is not None:
                query[key] = str(value)

        url = f"{self._base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.get(url, params=query)
        except httpx.HTTPError as exc:
            logger.warning(f"TMDB request failed for {path}: {exc}")
            raise UpstreamError("TMDb", None, str(exc)) from exc

        if not resp.is_success:
            logger.warning(f"TMDB {resp.status_code} for {path}")
            raise UpstreamError("TMDb", resp.status_code, resp.text)

        return resp.json()

    async def get_tv_details(self, tv_id: str) -> dict:
        return await self.fetch(f"/tv/{tv_id}")

    async def get_tv_external_ids(self, tv_id: str) -> dict:
        return await self.fetch(f"/tv/{tv_id}/external_ids")

    async def get_tv_season(self, tv_id: str, season_number: int) -> dict:
        return await self.fetch(f"/tv/{tv_id}/season/{season_number}")


# ── Module-level singleton ──────────────────────────────────────────────────
_tmdb_service: Optional[TMDBService] = None


def get_tmdb_service() -> TMDBService:
    """FastAPI dependency — returns the shared TMDBService instance."""
    global _tmdb_service
    if _tmdb_service is None:
        _tmdb_service = TMDBService()
    return _tmdb_service
