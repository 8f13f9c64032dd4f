"""OMDb router — title-level IMDb / Rotten Tomatoes / Metacritic scores.

Upstream trouble is reported as ``200 {"ok": false, ...}`` rather than an
error status, so the details page can quietly fall back to TMDB data.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from app.core import config
from app.core.cache import TTLCache
from app.core.errors import ConfigurationError
from app.services.omdb_service import OMDbService, OmdbFailure, get_omdb_service
from app.services.parsing import parse_score_0_100

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/omdb", tags=["omdb"])

_CACHE_HEADERS = {"Cache-Control": "s-maxage=86400, stale-while-revalidate=43200"}

_title_cache = TTLCache(config.OMDB_TITLE_CACHE_TTL_SECONDS)


def get_title_cache() -> TTLCache:
    return _title_cache


def _rating_value(data: dict, source: str) -> Optional[str]:
    for rating in data.get("Ratings") or []:
        if str(rating.get("Source") or "").lower() == source.lower():
            value = rating.get("Value")
            return value.strip() if isinstance(value, str) else None
    return None


def extract_extra_scores(data: dict) -> dict:
    """Rotten Tomatoes and Metacritic scores on a 0-100 scale (or None)."""
    rt_raw = _rating_value(data, "Rotten Tomatoes")
    mc_raw = _rating_value(data, "Metacritic")
    if not mc_raw or mc_raw == "N/A":
        metascore = data.get("Metascore")
        mc_raw = metascore if isinstance(metascore, str) else None
    return {
        "rt_score": parse_score_0_100(rt_raw),
        "mc_score": parse_score_0_100(mc_raw),
    }


@router.get("")
async def omdb_title(
    imdb_id: Optional[str] = Query(None, alias="i", description="IMDb id, e.g. tt0903747"),
    service: OMDbService = Depends(get_omdb_service),
    cache: TTLCache = Depends(get_title_cache),
):
    """Returns the OMDb record for an IMDb id plus parsed extra scores."""
    if not imdb_id:
        return JSONResponse(
            status_code=400,
            content={"ok": False, "error": 'Missing "i" (IMDb id) query param'},
        )

    hit = cache.get(imdb_id)
    if hit is not None:
        return JSONResponse(content=hit, headers=_CACHE_HEADERS)

    try:
        result = await service.get_title(imdb_id)
    except ConfigurationError:
        logger.error("OMDB_API_KEY is not set")
        return {"ok": False, "error": "OMDb API key not configured"}

    if isinstance(result, OmdbFailure):
        body = {"ok": False, "error": result.error or "OMDb error"}
        if result.status is not None and result.status >= 400:
            body["upstream_status"] = result.status
        return body

    payload = {"ok": True, **result.data, **extract_extra_scores(result.data)}
    cache.set(imdb_id, payload)
    return JSONResponse(content=payload, headers=_CACHE_HEADERS)
