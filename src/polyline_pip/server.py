"""FastAPI server for point-in-polygon and polyline queries."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import Response
from pydantic import ValidationError

from .config import Settings, get_settings
from .envelope import ResultEnvelope, UniqueCollection, UniqueResults
from .errors import ClientInputError, DownstreamError, PipelineError
from .filters import FilterError, parse_filters
from .geojson import GeoJSONError, bbox_feature, to_feature_collection
from .index import PlaceIndex
from .models import Coordinate, FeatureCollection
from .pipeline import check_available, check_format, run_polyline_query

logger = logging.getLogger(__name__)

CORS_HEADERS = {"Access-Control-Allow-Origin": "*"}


def create_app(settings: Settings | None = None, index: PlaceIndex | None = None) -> FastAPI:
    """Build the app. Configured sources are indexed in the background on startup."""
    settings = settings or get_settings()
    index = index if index is not None else PlaceIndex(data_endpoint=settings.data_endpoint)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        task = None
        if settings.sources:
            index.start_indexing()
            task = asyncio.create_task(asyncio.to_thread(index.index_sources, settings.sources))
            task.add_done_callback(_log_indexing_result)
        yield
        if task is not None and not task.done():
            task.cancel()

    app = FastAPI(title="Polyline PIP", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.index = index

    @app.get("/ping")
    async def ping():
        return {"ok": True}

    @app.get("/polyline")
    def polyline(request: Request):
        """Places intersecting each segment of an encoded polyline."""
        try:
            envelope = run_polyline_query(request.query_params, index, settings)
            return _json_response(envelope)
        except PipelineError as e:
            raise HTTPException(status_code=e.status_code, detail=e.message)

    @app.get("/")
    def point_in_polygon(request: Request):
        """Places containing a single ``latitude``/``longitude``."""
        params = request.query_params
        try:
            check_available(index)
            coord = _coordinate(params)
            fmt = params.get("format", "")
            check_format(fmt, settings)
            try:
                filters = parse_filters(params)
            except FilterError as e:
                raise ClientInputError(str(e)) from e

            snapshot = index.snapshot()
            result = snapshot.query_point(coord, filters)

            if fmt == "geojson":
                try:
                    collection = to_feature_collection(result.places, snapshot)
                except GeoJSONError as e:
                    raise DownstreamError(str(e)) from e
                return _json_response(UniqueCollection(features=collection.features))

            return _json_response(UniqueResults(places=result.places))
        except PipelineError as e:
            raise HTTPException(status_code=e.status_code, detail=e.message)

    @app.get("/candidates")
    def candidates(request: Request):
        """Bounding boxes of places that might contain ``latitude``/``longitude``."""
        try:
            check_available(index)
            coord = _coordinate(request.query_params)
        except PipelineError as e:
            raise HTTPException(status_code=e.status_code, detail=e.message)

        places = index.query_candidates(coord)
        collection = FeatureCollection(features=[bbox_feature(p) for p in places])
        return Response(
            content=collection.model_dump_json(),
            media_type="application/json",
            headers=CORS_HEADERS,
        )

    return app


def _coordinate(params) -> Coordinate:
    try:
        lat = float(params.get("latitude", ""))
    except ValueError:
        raise ClientInputError("Invalid latitude") from None
    try:
        lon = float(params.get("longitude", ""))
    except ValueError:
        raise ClientInputError("Invalid longitude") from None
    try:
        return Coordinate(lat=lat, lon=lon)
    except ValidationError:
        raise ClientInputError(f"Invalid coordinate: latitude {lat}, longitude {lon}") from None


def _json_response(envelope: ResultEnvelope) -> Response:
    try:
        body = envelope.to_json()
    except Exception as e:
        logger.exception("Failed to serialize response")
        raise DownstreamError(str(e)) from e
    return Response(content=body, media_type="application/json", headers=CORS_HEADERS)


def _log_indexing_result(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Indexing failed: %s", exc, exc_info=exc)


app = create_app()
