"""Pydantic data models for the polyline point-in-polygon service."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class Coordinate(BaseModel):
    """A validated WGS84 latitude/longitude pair."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)


class PlaceRecord(BaseModel):
    """A standard places result: one matched place, keyed by ``id``.

    Serialized with Who's On First property names (``by_alias=True``).
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(..., alias="wof:id")
    parent_id: str = Field("-1", alias="wof:parent_id")
    name: str = Field("", alias="wof:name")
    placetype: str = Field("", alias="wof:placetype")
    country: str = Field("", alias="wof:country")
    repo: str = Field("", alias="wof:repo")
    path: str = Field("", alias="wof:path")
    uri: str = Field("", alias="mz:uri")
    superseded_by: list[str] = Field(default_factory=list, alias="wof:superseded_by")
    supersedes: list[str] = Field(default_factory=list, alias="wof:supersedes")
    latitude: float = Field(0.0, alias="mz:latitude")
    longitude: float = Field(0.0, alias="mz:longitude")
    min_latitude: float = Field(0.0, alias="mz:min_latitude")
    min_longitude: float = Field(0.0, alias="mz:min_longitude")
    max_latitude: float = Field(0.0, alias="mz:max_latitude")
    max_longitude: float = Field(0.0, alias="mz:max_longitude")
    is_current: int = Field(-1, alias="mz:is_current")
    is_ceased: int = Field(-1, alias="mz:is_ceased")
    is_deprecated: int = Field(-1, alias="mz:is_deprecated")
    is_superseded: int = Field(-1, alias="mz:is_superseded")
    is_superseding: int = Field(-1, alias="mz:is_superseding")
    lastmodified: int = Field(-1, alias="wof:lastmodified")


class SegmentResult(BaseModel):
    """Places matched by one segment of a path."""

    places: list[PlaceRecord] = Field(default_factory=list)


class PathSegment(BaseModel):
    """One queried unit of a path, between two consecutive coordinates."""

    index: int
    start: Coordinate
    end: Coordinate


class Feature(BaseModel):
    type: Literal["Feature"] = "Feature"
    geometry: dict[str, Any]
    properties: dict[str, Any]


class FeatureCollection(BaseModel):
    type: Literal["FeatureCollection"] = "FeatureCollection"
    features: list[Feature] = Field(default_factory=list)


class FeatureCollectionSet(BaseModel):
    type: Literal["FeatureCollectionSet"] = "FeatureCollectionSet"
    collections: list[FeatureCollection] = Field(default_factory=list)
