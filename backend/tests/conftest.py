"""Shared fixtures: fake TMDB/OMDb upstreams served through httpx.MockTransport."""

from typing import Callable, Optional

import httpx
import pytest

from app.core.cache import TTLCache
from app.services.omdb_service import OMDbService
from app.services.ratings_service import TvRatingsService
from app.services.tmdb_service import TMDBService


class FakeClock:
    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Async stand-in for asyncio.sleep that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(float(seconds))


def tmdb_show(tv_id: int = 1396, seasons=(0, 1, 2)) -> dict:
    return {
        "id": tv_id,
        "name": "Breaking Bad",
        "first_air_date": "2008-01-20",
        "poster_path": "/ggFHVNu6YYI5L9pCfOacjizRGt.jpg",
        "seasons": [
            {"season_number": n, "name": "Specials" if n == 0 else f"Season {n}"}
            for n in seasons
        ],
    }


def tmdb_season(season_number: int, episode_numbers=(1, 2, 3)) -> dict:
    return {
        "season_number": season_number,
        "episodes": [
            {
                "episode_number": n,
                "name": f"S{season_number}E{n}",
                "vote_average": 8.0 + n / 10,
                "vote_count": f"{n},000",
            }
            for n in episode_numbers
        ],
    }


def omdb_season(season_number: int, ratings: dict) -> dict:
    return {
        "Title": "Breaking Bad",
        "Season": str(season_number),
        "Response": "True",
        "Episodes": [
            {"Episode": str(n), "imdbRating": r} for n, r in ratings.items()
        ],
    }


class Upstream:
    """
    Routes fake requests to handlers keyed by path (TMDB) or by Season (OMDb).

    Each handler returns an ``httpx.Response``; every request is recorded.
    """

    def __init__(self) -> None:
        self.tmdb_routes: dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.omdb_handler: Optional[Callable[[httpx.Request], httpx.Response]] = None
        self.requests: list[httpx.Request] = []

    def tmdb_json(self, path: str, body: dict, status: int = 200) -> None:
        self.tmdb_routes[path] = lambda request: httpx.Response(status, json=body)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == "api.themoviedb.org":
            path = request.url.path.removeprefix("/3")
            handler = self.tmdb_routes.get(path)
            if handler is None:
                return httpx.Response(404, text='{"status_message": "not found"}')
            return handler(request)
        if self.omdb_handler is None:
            return httpx.Response(500, text="no omdb handler")
        return self.omdb_handler(request)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def tmdb_paths(self) -> list[str]:
        return [
            r.url.path.removeprefix("/3")
            for r in self.requests
            if r.url.host == "api.themoviedb.org"
        ]

    def omdb_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == "www.omdbapi.com"]


@pytest.fixture(autouse=True)
def api_keys(monkeypatch):
    monkeypatch.setenv("TMDB_API_KEY", "tmdb-test-key")
    monkeypatch.setenv("OMDB_API_KEY", "omdb-test-key")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def upstream() -> Upstream:
    return Upstream()


@pytest.fixture
def tmdb(upstream) -> TMDBService:
    return TMDBService(transport=upstream.transport())


@pytest.fixture
def omdb(upstream, sleep) -> OMDbService:
    return OMDbService(transport=upstream.transport(), sleep=sleep)


@pytest.fixture
def ratings_service(tmdb, omdb, clock) -> TvRatingsService:
    return TvRatingsService(tmdb=tmdb, omdb=omdb, cache=TTLCache(600, clock=clock))
