"""Runtime settings read from the environment (and backend/.env via dotenv)."""

import os
from typing import List, Optional

from app.core.errors import ConfigurationError

# ── Upstream endpoints ───────────────────────────────────────────────────────
TMDB_BASE = "https://api.themoviedb.org/3"
OMDB_BASE = "https://www.omdbapi.com/"

# ── Fixed policy constants ───────────────────────────────────────────────────
RATINGS_CACHE_TTL_SECONDS = 60 * 10        # 10 min
OMDB_TITLE_CACHE_TTL_SECONDS = 60 * 60 * 24
OMDB_RETRIES = 2
OMDB_BACKOFF_SECONDS = 0.5

# ── Tunables ─────────────────────────────────────────────────────────────────
TMDB_LANGUAGE = os.environ.get("TMDB_LANGUAGE", "en-US")
HTTP_TIMEOUT_SECONDS = float(os.environ.get("HTTP_TIMEOUT_SECONDS", "10"))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()


def ratings_cache_max_entries() -> Optional[int]:
    """Capacity bound for the ratings cache; None means unbounded."""
    raw = os.environ.get("RATINGS_CACHE_MAX_ENTRIES", "").strip()
    if not raw:
        return None
    value = int(raw)
    return value if value > 0 else None


def cors_origins() -> List[str]:
    raw = os.environ.get(
        "CORS_ORIGINS",
        "http://localhost:3000,http://localhost,http://localhost:80",
    )
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


# ── Credentials ──────────────────────────────────────────────────────────────
# Read on every call so a key added to the environment is picked up without
# a restart, and a missing key fails before any request goes out.

def _require(name: str) -> str:
    value = os.environ.get(name, "").strip()
    if not value:
        raise ConfigurationError(f"Missing {name}")
    return value


def tmdb_api_key() -> str:
    return _require("TMDB_API_KEY")


def omdb_api_key() -> str:
    return _require("OMDB_API_KEY")
