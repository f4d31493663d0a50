"""Result envelopes: the four response shapes of a polyline query.

=========  =========  ======================  ==========================================
unique     geojson    envelope                JSON
=========  =========  ======================  ==========================================
no         no         SegmentResults          ``[{"places": [...]}, ...]``
yes        no         UniqueResults           ``{"places": [...]}``
no         yes        SegmentCollections      ``{"type": "FeatureCollectionSet", ...}``
yes        yes        UniqueCollection        ``{"type": "FeatureCollection", ...}``
=========  =========  ======================  ==========================================
"""

from __future__ import annotations

from typing import Union

from pydantic import RootModel

from .models import FeatureCollection, FeatureCollectionSet, PlaceRecord, SegmentResult


def unique_places(results: list[SegmentResult]) -> list[PlaceRecord]:
    """Flatten segment results, keeping the first occurrence of each place id."""
    seen: dict[str, PlaceRecord] = {}
    for rs in results:
        for place in rs.places:
            if place.id not in seen:
                seen[place.id] = place
    return list(seen.values())


class SegmentResults(RootModel[list[SegmentResult]]):
    def to_json(self) -> bytes:
        return self.model_dump_json(by_alias=True).encode()


class UniqueResults(SegmentResult):
    def to_json(self) -> bytes:
        return self.model_dump_json(by_alias=True).encode()


class SegmentCollections(FeatureCollectionSet):
    def to_json(self) -> bytes:
        return self.model_dump_json().encode()


class UniqueCollection(FeatureCollection):
    def to_json(self) -> bytes:
        return self.model_dump_json().encode()


ResultEnvelope = Union[SegmentResults, UniqueResults, SegmentCollections, UniqueCollection]
