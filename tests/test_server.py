"""Tests for the FastAPI server endpoints."""

import pytest
from httpx import ASGITransport, AsyncClient

from polyline_pip.config import Settings
from polyline_pip.index import IndexSnapshot
from polyline_pip.server import create_app

CANONICAL_POLYLINE = "_p~iF~ps|U_ulLnnqC_mqNvxq`@"


@pytest.fixture
def client(index, settings):
    transport = ASGITransport(app=create_app(settings, index))
    return AsyncClient(transport=transport, base_url="http://test")


@pytest.fixture
def no_geojson_client(index):
    app = create_app(Settings(allow_geojson=False, sources=[]), index)
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.mark.asyncio
class TestPolylineEndpoint:
    async def test_segment_results(self, client):
        resp = await client.get("/polyline", params={"polyline": CANONICAL_POLYLINE})
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/json"
        assert resp.headers["access-control-allow-origin"] == "*"
        data = resp.json()
        assert len(data) == 2
        assert all("places" in rs for rs in data)

    async def test_unique(self, client):
        resp = await client.get("/polyline", params={"polyline": CANONICAL_POLYLINE, "unique": "1"})
        assert resp.status_code == 200
        ids = [p["wof:id"] for p in resp.json()["places"]]
        assert len(ids) == len(set(ids)) == 4

    async def test_geojson_collection_set(self, client):
        resp = await client.get("/polyline", params={"polyline": CANONICAL_POLYLINE, "format": "geojson"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["type"] == "FeatureCollectionSet"
        assert len(data["collections"]) == 2

    async def test_unique_geojson(self, client):
        params = {"polyline": CANONICAL_POLYLINE, "format": "geojson", "unique": "1"}
        resp = await client.get("/polyline", params=params)
        assert resp.status_code == 200
        assert resp.json()["type"] == "FeatureCollection"
        assert len(resp.json()["features"]) == 4

    async def test_identical_requests_are_byte_identical(self, client):
        params = {"polyline": CANONICAL_POLYLINE, "unique": "1"}
        first = await client.get("/polyline", params=params)
        second = await client.get("/polyline", params=params)
        assert first.content == second.content

    async def test_missing_polyline_returns_400(self, client):
        resp = await client.get("/polyline")
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Missing 'polyline' parameter"

    async def test_malformed_polyline_returns_400(self, client):
        resp = await client.get("/polyline", params={"polyline": "_p~i"})
        assert resp.status_code == 400
        assert "truncated" in resp.json()["detail"]

    async def test_oversized_polyline_returns_400(self, client):
        resp = await client.get("/polyline", params={"polyline": "~" * 210 + "??"})
        assert resp.status_code == 400
        assert resp.json()["detail"].startswith("Invalid coordinate")

    async def test_excessive_coordinates_returns_400(self, index):
        app = create_app(Settings(max_coords=2, sources=[]), index)
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
            resp = await c.get("/polyline", params={"polyline": CANONICAL_POLYLINE})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "E_EXCESSIVE_COORDINATES"

    async def test_invalid_filter_returns_400(self, client):
        resp = await client.get("/polyline", params={"polyline": CANONICAL_POLYLINE, "is_current": "7"})
        assert resp.status_code == 400

    async def test_geojson_disabled_returns_400(self, no_geojson_client):
        resp = await no_geojson_client.get("/polyline", params={"polyline": "_p~i", "format": "geojson"})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Invalid format"

    async def test_indexing_returns_503(self, client, index):
        index.start_indexing()
        resp = await client.get("/polyline", params={"format": "geojson"})
        assert resp.status_code == 503

    async def test_index_failure_returns_500(self, client, monkeypatch):
        def broken(self, path, filters=None):
            raise RuntimeError("index exploded")

        monkeypatch.setattr(IndexSnapshot, "query_path_intersection", broken)
        resp = await client.get("/polyline", params={"polyline": CANONICAL_POLYLINE})
        assert resp.status_code == 500
        assert resp.json()["detail"] == "index exploded"


@pytest.mark.asyncio
class TestPointEndpoints:
    async def test_point_in_polygon(self, client):
        resp = await client.get("/", params={"latitude": 38.5, "longitude": -120.2})
        assert resp.status_code == 200
        ids = [p["wof:id"] for p in resp.json()["places"]]
        assert ids == ["85633793", "85688637", "101"]

    async def test_point_in_polygon_geojson(self, client):
        params = {"latitude": 38.5, "longitude": -120.2, "format": "geojson", "placetype": "region"}
        resp = await client.get("/", params=params)
        assert resp.status_code == 200
        features = resp.json()["features"]
        assert [f["properties"]["wof:id"] for f in features] == ["85688637"]

    async def test_point_out_of_range(self, client):
        resp = await client.get("/", params={"latitude": 91, "longitude": 0})
        assert resp.status_code == 400

    async def test_point_missing_latitude(self, client):
        resp = await client.get("/", params={"longitude": 0})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Invalid latitude"

    async def test_candidates(self, client):
        resp = await client.get("/candidates", params={"latitude": 43.252, "longitude": -126.453})
        assert resp.status_code == 200
        data = resp.json()
        assert data["type"] == "FeatureCollection"
        assert [f["properties"]["id"] for f in data["features"]] == ["85688513"]

    async def test_ping_while_indexing(self, client, index):
        index.start_indexing()
        resp = await client.get("/ping")
        assert resp.status_code == 200
        assert resp.json() == {"ok": True}
