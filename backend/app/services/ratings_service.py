"""
TvRatingsService — per-episode TMDB + IMDb ratings for a whole TV show.

For one show it fetches TMDB details and external ids (both required),
then fans out one task per season. Each season task fetches the TMDB
season and, when the show has an IMDb id, the matching OMDb season in
parallel, and merges IMDb ratings into the TMDB episodes by episode
number.

Season tasks are settled independently: a season whose TMDB fetch fails
is left out, a season whose OMDb fetch fails keeps null IMDb ratings.
Only the two top-level TMDB calls (and a missing credential) fail the
request. Results are cached for 10 minutes per (show, exclude_specials).
"""
import asyncio
import logging
from typing import Optional

from app.core import config
from app.core.cache import TTLCache
from app.core.errors import AggregationError, ConfigurationError
from app.schemas import EpisodeRating, SeasonRatings, TvRatingsResponse
from app.services.omdb_service import OMDbService, OmdbSuccess, get_omdb_service
from app.services.parsing import is_number, parse_episode_number, parse_rating, parse_votes
from app.services.tmdb_service import TMDBService, get_tmdb_service

logger = logging.getLogger(__name__)


def cache_key(tv_id: str, exclude_specials: bool) -> str:
    return f"tv-ratings:{tv_id}:{1 if exclude_specials else 0}"


def build_imdb_lookup(omdb_season: Optional[dict]) -> dict[int, Optional[float]]:
    """Map episode number → IMDb rating from an OMDb season body.

    Malformed bodies yield no ratings rather than an error.
    """
    lookup: dict[int, Optional[float]] = {}
    if not isinstance(omdb_season, dict):
        return lookup
    episodes = omdb_season.get("Episodes")
    if not isinstance(episodes, list):
        return lookup
    for episode in episodes:
        if not isinstance(episode, dict):
            continue
        number = parse_episode_number(episode.get("Episode"))
        if number is None:
            continue
        lookup[number] = parse_rating(episode.get("imdbRating"))
    return lookup


def merge_season(season_meta: dict, tmdb_season: dict, omdb_season: Optional[dict]) -> SeasonRatings:
    """Build a SeasonRatings from a TMDB season and an optional OMDb season.

    TMDB episodes without a usable episode number are skipped.
    """
    imdb_lookup = build_imdb_lookup(omdb_season)

    episodes = []
    for ep in tmdb_season.get("episodes") or []:
        if not isinstance(ep, dict):
            continue
        number = parse_episode_number(ep.get("episode_number"))
        if number is None:
            continue
        vote_average = ep.get("vote_average")
        episodes.append(EpisodeRating(
            episode_number=number,
            name=ep.get("name"),
            tmdb_rating=vote_average if is_number(vote_average) else None,
            tmdb_votes=parse_votes(ep.get("vote_count")),
            imdb_rating=imdb_lookup.get(number),
            imdb_votes=None,
        ))
    episodes.sort(key=lambda e: e.episode_number)

    return SeasonRatings(
        season_number=season_meta["season_number"],
        name=season_meta.get("name"),
        episodes=episodes,
    )


class TvRatingsService:
    """Aggregates and caches per-episode ratings for TV shows."""

    def __init__(
        self,
        tmdb: TMDBService,
        omdb: OMDbService,
        cache: Optional[TTLCache] = None,
    ) -> None:
        self._tmdb = tmdb
        self._omdb = omdb
        self._cache = cache if cache is not None else TTLCache(config.RATINGS_CACHE_TTL_SECONDS)

    @property
    def cache(self) -> TTLCache:
        return self._cache

    async def aggregate(self, tv_id: str, exclude_specials: bool = False) -> TvRatingsResponse:
        """
        Return merged ratings for ``tv_id``, from cache when still fresh.

        Raises AggregationError when TMDB details or external ids cannot be
        fetched, and ConfigurationError when a required API key is missing.
        """
        key = cache_key(tv_id, exclude_specials)
        hit = self._cache.get(key)
        if hit is not None:
            logger.debug(f"ratings cache hit: {key}")
            return hit

        try:
            details, external_ids = await asyncio.gather(
                self._tmdb.get_tv_details(tv_id),
                self._tmdb.get_tv_external_ids(tv_id),
            )
        except ConfigurationError:
            raise
        except Exception as exc:
            raise AggregationError(str(exc)) from exc

        imdb_id = (external_ids or {}).get("imdb_id") or None
        if imdb_id:
            self._omdb.ensure_configured()

        seasons_meta = [
            s for s in details.get("seasons") or []
            if not (exclude_specials and s.get("season_number") == 0)
        ]
        results = await asyncio.gather(
            *(self._load_season(tv_id, s, imdb_id) for s in seasons_meta),
            return_exceptions=True,
        )

        seasons = []
        dropped = 0
        for season_meta, result in zip(seasons_meta, results):
            if isinstance(result, ConfigurationError):
                raise result
            if isinstance(result, BaseException):
                logger.warning(
                    f"Dropping season {season_meta.get('season_number')} of tv {tv_id}: {result}"
                )
                dropped += 1
                continue
            seasons.append(result)
        seasons.sort(key=lambda s: s.season_number)

        payload = TvRatingsResponse(
            id=details.get("id", tv_id),
            name=details.get("name"),
            first_air_date=details.get("first_air_date"),
            poster_path=details.get("poster_path"),
            external_id=imdb_id,
            seasons=seasons,
        )
        # Payloads missing a season are returned but not cached.
        if dropped:
            logger.info(f"tv {tv_id}: {dropped} seasons missing, not caching")
        else:
            self._cache.set(key, payload)
        logger.info(f"tv {tv_id}: {len(seasons)} seasons aggregated (imdb_id={imdb_id})")
        return payload

    async def _load_season(self, tv_id: str, season_meta: dict, imdb_id: Optional[str]) -> SeasonRatings:
        season_number = season_meta["season_number"]

        fetches = [self._tmdb.get_tv_season(tv_id, season_number)]
        if imdb_id:
            fetches.append(self._omdb.get_season(imdb_id, season_number))
        results = await asyncio.gather(*fetches, return_exceptions=True)
        tmdb_season = results[0]
        omdb_result = results[1] if imdb_id else None

        if isinstance(tmdb_season, BaseException):
            raise tmdb_season
        if isinstance(omdb_result, ConfigurationError):
            raise omdb_result
        if isinstance(omdb_result, BaseException):
            logger.warning(f"OMDb season {season_number} for {imdb_id} raised: {omdb_result}")
            omdb_result = None

        omdb_season = omdb_result.data if isinstance(omdb_result, OmdbSuccess) else None
        return merge_season(season_meta, tmdb_season, omdb_season)


# ── Module-level singleton ──────────────────────────────────────────────────
_ratings_service: Optional[TvRatingsService] = None


def get_tv_ratings_service() -> TvRatingsService:
    """FastAPI dependency — returns the shared TvRatingsService instance."""
    global _ratings_service
    if _ratings_service is None:
        _ratings_service = TvRatingsService(
            tmdb=get_tmdb_service(),
            omdb=get_omdb_service(),
            cache=TTLCache(
                config.RATINGS_CACHE_TTL_SECONDS,
                max_entries=config.ratings_cache_max_entries(),
            ),
        )
    return _ratings_service
