"""TV router — per-episode ratings for a whole show."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from app.schemas import ErrorResponse, TvRatingsResponse
from app.services.ratings_service import TvRatingsService, get_tv_ratings_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tv", tags=["tv"])


@router.get(
    "/{tv_id}/ratings",
    response_model=TvRatingsResponse,
    responses={500: {"model": ErrorResponse}},
)
async def tv_ratings(
    tv_id: str,
    exclude_specials: Optional[str] = Query(
        None, alias="excludeSpecials", description='"true" drops season 0 (specials)'
    ),
    service: TvRatingsService = Depends(get_tv_ratings_service),
):
    """
    Returns every season of a TV show with per-episode TMDB and IMDb ratings.

    IMDb ratings are best-effort: a season whose OMDb lookup failed is still
    returned, with null imdb_rating values. If TMDB show data cannot be
    fetched the whole request fails with 500 and ``{"error": ...}``.
    """
    try:
        return await service.aggregate(tv_id, exclude_specials=exclude_specials == "true")
    except Exception as exc:
        logger.exception(f"Ratings for tv {tv_id} failed")
        return JSONResponse(status_code=500, content={"error": str(exc) or "Error"})
