from typing import List, Optional, Union
from pydantic import BaseModel

Number = Union[int, float]


class EpisodeRating(BaseModel):
    """One episode with its TMDB score and, when available, its IMDb score."""
    episode_number: int
    name: Optional[str] = None
    tmdb_rating: Optional[float] = None
    tmdb_votes: Optional[Number] = None
    imdb_rating: Optional[float] = None
    imdb_votes: Optional[Number] = None   # not sourced per episode; always null


class SeasonRatings(BaseModel):
    season_number: int
    name: Optional[str] = None
    episodes: List[EpisodeRating]


class TvRatingsResponse(BaseModel):
    """Per-episode ratings for every season of a TV show."""
    id: int
    name: Optional[str] = None
    first_air_date: Optional[str] = None
    poster_path: Optional[str] = None
    external_id: Optional[str] = None   # IMDb series id
    seasons: List[SeasonRatings]


class ErrorResponse(BaseModel):
    error: str
