"""Integration tests for the admin cache flush endpoint."""

from unittest.mock import AsyncMock

from conftest import BAG_URL, bag_doc, bag_reply

from addressiq.core.errors import CacheError

FLUSH = "/admin/cache/flush"


class TestFlush:
    def test_unconfigured_secret(self, api):
        response = api().post(FLUSH, headers={"X-Admin-Secret": "anything"})
        assert response.status_code == 403
        assert response.headers["content-type"].startswith("application/problem+json")

    def test_wrong_secret(self, api):
        client = api(admin_secret="s3cret")
        assert client.post(FLUSH).status_code == 401
        assert client.post(FLUSH, headers={"X-Admin-Secret": "nope"}).status_code == 401

    def test_cache_disabled(self, api):
        response = api(admin_secret="s3cret", cache_enabled=False).post(FLUSH, headers={"X-Admin-Secret": "s3cret"})
        assert response.status_code == 503
        assert response.json()["detail"] == "cache service not available"

    def test_flushes(self, api, upstream):
        upstream.add(BAG_URL, json=bag_reply(bag_doc()))
        client = api(admin_secret="s3cret")
        params = {"postcode": "3541ED", "houseNumber": "53"}
        client.get("/api/property", params=params)

        response = client.post(FLUSH, headers={"X-Admin-Secret": "s3cret"})

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "message": "cache flushed successfully"}
        assert client.get("/api/property", params=params).json()["property"]["cached"] is False

    def test_backend_failure(self, api):
        client = api(admin_secret="s3cret")
        client.app.state.cache.flush = AsyncMock(side_effect=CacheError("cache flush failed: down"))

        response = client.post(FLUSH, headers={"X-Admin-Secret": "s3cret"})

        assert response.status_code == 500
        assert response.json()["detail"] == "failed to flush cache"
