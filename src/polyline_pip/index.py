"""In-memory spatial index of place geometries backed by a shapely STRtree."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from pathlib import Path

from shapely import STRtree
from shapely.geometry import LineString, Point
from shapely.geometry.base import BaseGeometry

from .filters import Filters
from .models import Coordinate, PlaceRecord, SegmentResult
from .reader import Place, read_source
from .segments import compute_segments

logger = logging.getLogger(__name__)


class IndexSnapshot:
    """An immutable view of the indexed places.

    A request should take one snapshot and use it for both querying and
    geometry lookups, so a concurrent reindex cannot split the two.
    """

    def __init__(self, places: list[PlaceRecord], geoms: list[BaseGeometry]):
        self.places = places
        self.geoms = geoms
        self.tree = STRtree(geoms) if geoms else None
        self.by_id = {p.id: g for p, g in zip(places, geoms)}

    def __len__(self) -> int:
        return len(self.places)

    def geometry(self, place_id: str) -> BaseGeometry:
        return self.by_id[place_id]

    def _intersecting(self, geom: BaseGeometry, filters: Filters | None) -> list[PlaceRecord]:
        if self.tree is None:
            return []

        # STRtree returns indices in arbitrary order; keep insertion order
        hits = sorted(int(i) for i in self.tree.query(geom, predicate="intersects"))
        matched = [self.places[i] for i in hits]
        if filters is not None:
            matched = [p for p in matched if filters.matches(p)]
        return matched

    def query_point(self, coord: Coordinate, filters: Filters | None = None) -> SegmentResult:
        return SegmentResult(places=self._intersecting(Point(coord.lon, coord.lat), filters))

    def query_candidates(self, coord: Coordinate) -> list[PlaceRecord]:
        """Places whose bounding box contains the coordinate."""
        if self.tree is None:
            return []
        hits = sorted(int(i) for i in self.tree.query(Point(coord.lon, coord.lat)))
        return [self.places[i] for i in hits]

    def query_path_intersection(
        self, path: list[Coordinate], filters: Filters | None = None
    ) -> list[SegmentResult]:
        """One SegmentResult per path segment, in path order."""
        results: list[SegmentResult] = []
        for seg in compute_segments(path):
            if seg.start == seg.end:
                geom = Point(seg.start.lon, seg.start.lat)
            else:
                geom = LineString([(seg.start.lon, seg.start.lat), (seg.end.lon, seg.end.lat)])
            results.append(SegmentResult(places=self._intersecting(geom, filters)))
        return results


class PlaceIndex:
    """Point-in-polygon and path-intersection lookups over a set of places.

    Queries run against an IndexSnapshot; a bulk reindex swaps in a new
    snapshot without disturbing requests holding the old one.
    """

    def __init__(self, data_endpoint: str = ""):
        self.data_endpoint = data_endpoint
        self._indexing = threading.Event()
        self._lock = threading.Lock()
        self._pending: list[Place] = []
        self._snapshot = IndexSnapshot([], [])

    def __len__(self) -> int:
        return len(self._snapshot)

    def snapshot(self) -> IndexSnapshot:
        return self._snapshot

    def is_indexing(self) -> bool:
        return self._indexing.is_set()

    def add(self, place: PlaceRecord, geometry: BaseGeometry) -> None:
        """Queue a place; it becomes queryable after build()."""
        with self._lock:
            self._pending.append((place, geometry))

    def build(self) -> None:
        with self._lock:
            current = self._snapshot
            places = current.places + [p for p, _ in self._pending]
            geoms = current.geoms + [g for _, g in self._pending]
            self._pending = []
            self._snapshot = IndexSnapshot(places, geoms)

    def start_indexing(self) -> None:
        """Report is_indexing() until the next index_sources() call finishes."""
        self._indexing.set()

    def index_sources(self, paths: Iterable[str | Path]) -> int:
        """Replace the index contents with every place read from ``paths``.

        is_indexing() reports True for the duration.
        """
        self.start_indexing()
        try:
            places: list[PlaceRecord] = []
            geoms: list[BaseGeometry] = []
            for path in paths:
                logger.info("Indexing %s", path)
                for place, geom in read_source(path, data_endpoint=self.data_endpoint):
                    places.append(place)
                    geoms.append(geom)
            snapshot = IndexSnapshot(places, geoms)
            with self._lock:
                self._pending = []
                self._snapshot = snapshot
            logger.info("Indexed %d places", len(places))
            return len(places)
        finally:
            self._indexing.clear()

    def geometry(self, place_id: str) -> BaseGeometry:
        return self._snapshot.geometry(place_id)

    def query_point(self, coord: Coordinate, filters: Filters | None = None) -> SegmentResult:
        return self._snapshot.query_point(coord, filters)

    def query_candidates(self, coord: Coordinate) -> list[PlaceRecord]:
        return self._snapshot.query_candidates(coord)

    def query_path_intersection(
        self, path: list[Coordinate], filters: Filters | None = None
    ) -> list[SegmentResult]:
        return self._snapshot.query_path_intersection(path, filters)
