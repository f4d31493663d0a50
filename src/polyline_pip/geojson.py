"""Conversion of standard places results to GeoJSON."""

from __future__ import annotations

from collections.abc import Iterable

from shapely.geometry import box, mapping

from .index import IndexSnapshot
from .models import Feature, FeatureCollection, PlaceRecord


class GeoJSONError(Exception):
    pass


def place_properties(place: PlaceRecord) -> dict:
    return place.model_dump(by_alias=True)


def to_feature_collection(places: Iterable[PlaceRecord], snapshot: IndexSnapshot) -> FeatureCollection:
    """Build a FeatureCollection, looking up each place's geometry in ``snapshot``."""
    features: list[Feature] = []
    for place in places:
        try:
            geom = snapshot.geometry(place.id)
        except KeyError:
            raise GeoJSONError(f"Missing geometry for {place.id}") from None
        features.append(Feature(geometry=mapping(geom), properties=place_properties(place)))
    return FeatureCollection(features=features)


def bbox_feature(place: PlaceRecord) -> Feature:
    """A bounding-box polygon for a place, with its id as the only property."""
    bbox = box(place.min_longitude, place.min_latitude, place.max_longitude, place.max_latitude)
    return Feature(geometry=mapping(bbox), properties={"id": place.id})
