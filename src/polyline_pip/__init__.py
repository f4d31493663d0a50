"""Point-in-polygon lookups along encoded polylines."""

from .envelope import ResultEnvelope, unique_places
from .filters import Filters, parse_filters
from .index import PlaceIndex
from .models import Coordinate, PathSegment, PlaceRecord, SegmentResult
from .pipeline import run_polyline_query
from .polyline import DecodeError, decode_polyline
from .reader import read_geojson, read_shapefile, read_source
from .segments import compute_segments

__all__ = [
    "Coordinate",
    "DecodeError",
    "Filters",
    "PathSegment",
    "PlaceIndex",
    "PlaceRecord",
    "ResultEnvelope",
    "SegmentResult",
    "compute_segments",
    "decode_polyline",
    "parse_filters",
    "read_geojson",
    "read_shapefile",
    "read_source",
    "run_polyline_query",
    "unique_places",
]
