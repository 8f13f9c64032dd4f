import httpx
import pytest

from app.core.errors import ConfigurationError, UpstreamError
from app.services.tmdb_service import TMDBService


@pytest.mark.asyncio
async def test_fetch_sends_key_and_locale(upstream, tmdb):
    upstream.tmdb_json("/tv/1396", {"id": 1396})

    data = await tmdb.fetch("/tv/1396", {"append": "x", "skip": None})

    assert data == {"id": 1396}
    params = upstream.requests[0].url.params
    assert params["api_key"] == "tmdb-test-key"
    assert params["language"] == "en-US"
    assert params["append"] == "x"
    assert "skip" not in params


@pytest.mark.asyncio
async def test_non_success_status_raises_with_body(upstream, tmdb):
    upstream.tmdb_json("/tv/1", {"status_message": "Invalid id"}, status=404)

    with pytest.raises(UpstreamError) as excinfo:
        await tmdb.get_tv_details(1)

    assert excinfo.value.status == 404
    assert "Invalid id" in excinfo.value.body
    assert len(upstream.requests) == 1


@pytest.mark.asyncio
async def test_transport_error_becomes_upstream_error():
    def fail(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = TMDBService(transport=httpx.MockTransport(fail))
    with pytest.raises(UpstreamError) as excinfo:
        await client.get_tv_season(1, 1)
    assert excinfo.value.status is None


@pytest.mark.asyncio
async def test_missing_key_fails_before_request(monkeypatch, upstream, tmdb):
    monkeypatch.delenv("TMDB_API_KEY")

    with pytest.raises(ConfigurationError):
        await tmdb.get_tv_external_ids(1)
    assert upstream.requests == []
