"""
OMDbService — async client for the OMDb API (IMDb ratings).

Secondary, best-effort source. Requests never raise for upstream trouble:
every outcome comes back as either OmdbSuccess or OmdbFailure, so a
season whose ratings could not be fetched simply ends up without them.
The one exception is a missing OMDB_API_KEY, which is a deployment
mistake and raises ConfigurationError before any request is made.

OMDb signals throttling in the JSON body (``{"Response": "False",
"Error": "Request limit reached!"}``), not with a 429, so the retry
predicate looks at the decoded ``Error`` field.
"""
import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Union

import httpx

from app.core import config
from app.core.retry import retry_on_result

logger = logging.getLogger(__name__)

_LIMIT_RE = re.compile("limit", re.IGNORECASE)


@dataclass(frozen=True)
class OmdbSuccess:
    data: dict


@dataclass(frozen=True)
class OmdbFailure:
    error: str
    status: Optional[int] = None
    rate_limited: bool = False


OmdbResult = Union[OmdbSuccess, OmdbFailure]


def _is_rate_limited(result: OmdbResult) -> bool:
    return isinstance(result, OmdbFailure) and result.rate_limited


class OMDbService:
    """Async OMDb client with linear backoff on rate-limit responses."""

    def __init__(
        self,
        base_url: str = config.OMDB_BASE,
        timeout: float = config.HTTP_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._base_url = base_url
        self._timeout = timeout
        self._transport = transport
        self._sleep = sleep

    def ensure_configured(self) -> None:
        """Raise ConfigurationError if OMDB_API_KEY is not set."""
        config.omdb_api_key()

    async def fetch(
        self,
        params: dict[str, Any],
        retries: int = config.OMDB_RETRIES,
        backoff: float = config.OMDB_BACKOFF_SECONDS,
    ) -> OmdbResult:
        """
        Query OMDb with ``params``.

        Makes at most ``retries + 1`` requests. Only a body whose ``Error``
        mentions a limit is retried, waiting ``backoff * n`` seconds before
        retry ``n``. Anything else that is not a success is returned at once.
        """
        query = {"apikey": config.omdb_api_key()}
        for key, value in params.items():
            if value is not None:
                query[key] = str(value)

        retrying = retry_on_result(
            max_attempts=retries + 1,
            backoff=backoff,
            should_retry=_is_rate_limited,
            sleep=self._sleep,
        )
        result = await retrying(self._attempt, query)
        if isinstance(result, OmdbFailure):
            logger.warning(
                f"OMDb lookup failed for {params}: {result.error} "
                f"(status={result.status}, rate_limited={result.rate_limited})"
            )
        return result

    async def _attempt(self, query: dict[str, str]) -> OmdbResult:
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.get(self._base_url, params=query)
        except httpx.HTTPError as exc:
            return OmdbFailure(error=f"{type(exc).__name__}: {exc}")

        try:
            data = resp.json()
        except ValueError:
            data = None

        if not isinstance(data, dict):
            return OmdbFailure(error=f"HTTP {resp.status_code}", status=resp.status_code)

        if resp.is_success and data.get("Response") != "False":
            return OmdbSuccess(data)

        error = data.get("Error")
        limited = isinstance(error, str) and bool(_LIMIT_RE.search(error))
        return OmdbFailure(
            error=error or f"HTTP {resp.status_code}",
            status=resp.status_code,
            rate_limited=limited,
        )

    async def get_season(self, imdb_id: str, season_number: int) -> OmdbResult:
        return await self.fetch({"i": imdb_id, "Season": season_number})

    async def get_title(self, imdb_id: str) -> OmdbResult:
        return await self.fetch({"i": imdb_id, "plot": "short", "r": "json"})


# ── Module-level singleton ──────────────────────────────────────────────────
_omdb_service: Optional[OMDbService] = None


def get_omdb_service() -> OMDbService:
    """FastAPI dependency — returns the shared OMDbService instance."""
    global _omdb_service
    if _omdb_service is None:
        _omdb_service = OMDbService()
    return _omdb_service
