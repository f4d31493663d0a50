"""Polyline query pipeline: options, decoding, intersection, result assembly.

The steps run in a fixed order and the first failure wins:

1. refuse while the index is (re)indexing
2. parse options, gate ``format=geojson`` on configuration
3. decode the polyline (Valhalla dialect uses 6 decimal places)
4. bound the number of coordinates
5. parse filters
6. query the index, one result per path segment
7. optionally flatten to unique places
8. optionally convert to GeoJSON
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from pydantic import BaseModel

from .config import Settings
from .envelope import (
    ResultEnvelope,
    SegmentCollections,
    SegmentResults,
    UniqueCollection,
    UniqueResults,
    unique_places,
)
from .errors import ClientInputError, DownstreamError, ServiceBusyError
from .filters import FilterError, parse_filters
from .geojson import GeoJSONError, to_feature_collection
from .index import PlaceIndex
from .polyline import DecodeError, decode_polyline, scale_for

logger = logging.getLogger(__name__)

EXCESSIVE_COORDINATES = "E_EXCESSIVE_COORDINATES"
GEOJSON_FORMAT = "geojson"


class PolylineQuery(BaseModel):
    polyline: str
    valhalla: bool = False
    unique: bool = False
    format: str = ""

    @property
    def geojson(self) -> bool:
        return self.format == GEOJSON_FORMAT

    @classmethod
    def from_params(cls, params: Mapping[str, str]) -> PolylineQuery:
        """Read options from query parameters.

        ``valhalla`` and ``unique`` are switched on by any non-empty value;
        the value itself is not parsed.
        """
        polyline = params.get("polyline", "")
        if not polyline:
            raise ClientInputError("Missing 'polyline' parameter")

        return cls(
            polyline=polyline,
            valhalla=params.get("valhalla", "") != "",
            unique=params.get("unique", "") != "",
            format=params.get("format", ""),
        )


def check_available(index: PlaceIndex) -> None:
    if index.is_indexing():
        raise ServiceBusyError("indexing records")


def check_format(fmt: str, settings: Settings) -> None:
    if fmt == GEOJSON_FORMAT and not settings.allow_geojson:
        raise ClientInputError("Invalid format")


def run_polyline_query(
    params: Mapping[str, str], index: PlaceIndex, settings: Settings
) -> ResultEnvelope:
    """Run a polyline query end to end and return its response envelope."""
    check_available(index)

    query = PolylineQuery.from_params(params)
    check_format(query.format, settings)

    try:
        path = decode_polyline(query.polyline, scale_for(query.valhalla))
    except DecodeError as e:
        raise ClientInputError(str(e)) from e

    if len(path) > settings.max_coords:
        raise ClientInputError(EXCESSIVE_COORDINATES)

    try:
        filters = parse_filters(params)
    except FilterError as e:
        raise ClientInputError(str(e)) from e

    # query and geometry lookups must see the same index contents
    snapshot = index.snapshot()

    try:
        results = snapshot.query_path_intersection(path, filters)
    except Exception as e:
        logger.exception("Path intersection query failed")
        raise DownstreamError(str(e)) from e

    logger.debug("Queried %d coordinates, %d segments", len(path), len(results))

    if query.unique:
        places = unique_places(results)
        if not query.geojson:
            return UniqueResults(places=places)
        try:
            collection = to_feature_collection(places, snapshot)
        except GeoJSONError as e:
            logger.exception("GeoJSON conversion failed")
            raise DownstreamError(str(e)) from e
        return UniqueCollection(features=collection.features)

    if not query.geojson:
        return SegmentResults(results)

    collections = []
    for rs in results:
        try:
            collections.append(to_feature_collection(rs.places, snapshot))
        except GeoJSONError as e:
            logger.exception("GeoJSON conversion failed")
            raise DownstreamError(str(e)) from e
    return SegmentCollections(collections=collections)
