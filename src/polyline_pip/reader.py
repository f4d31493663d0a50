"""Place source readers: WOF-style GeoJSON files and polygon shapefiles."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import shapefile
import shapely
from pyproj import CRS, Transformer
from shapely.geometry import shape
from shapely.geometry.base import BaseGeometry

from .models import PlaceRecord

logger = logging.getLogger(__name__)

GEOJSON_EXTS = {".geojson", ".json"}
SHAPEFILE_EXT = ".shp"

Place = tuple[PlaceRecord, BaseGeometry]


def wof_path(place_id: str) -> str:
    """Relative WOF path for an id, e.g. ``101/736/545/101736545.geojson``."""
    chunks = [place_id[i:i + 3] for i in range(0, len(place_id), 3)]
    return "/".join(chunks + [f"{place_id}.geojson"])


def detect_crs(prj_source: str | Path | None) -> tuple[int | None, str | None, bool | None]:
    """Parse CRS from a .prj WKT string or file path.

    Returns (epsg_code, crs_name, is_projected) or (None, None, None) on failure.
    """
    if prj_source is None:
        return None, None, None

    wkt = prj_source if isinstance(prj_source, str) else ""
    if isinstance(prj_source, Path):
        if not prj_source.exists():
            return None, None, None
        wkt = prj_source.read_text()

    if not wkt.strip():
        return None, None, None

    try:
        crs = CRS.from_wkt(wkt)
    except Exception:
        return None, None, None

    epsg = crs.to_epsg()
    return epsg, crs.name, crs.is_projected


def place_from_properties(
    props: Mapping[str, Any],
    geometry: BaseGeometry,
    *,
    data_endpoint: str = "",
) -> PlaceRecord:
    """Build a PlaceRecord from WOF feature properties and its geometry."""
    place_id = str(props.get("wof:id", props.get("id", "")))
    if not place_id:
        raise ValueError("Feature has no 'wof:id' or 'id' property")

    min_lon, min_lat, max_lon, max_lat = geometry.bounds
    centroid = geometry.centroid
    lat = props.get("lbl:latitude", props.get("geom:latitude", centroid.y))
    lon = props.get("lbl:longitude", props.get("geom:longitude", centroid.x))

    superseded_by = [str(i) for i in props.get("wof:superseded_by", [])]
    supersedes = [str(i) for i in props.get("wof:supersedes", [])]

    path = wof_path(place_id)
    uri = f"{data_endpoint.rstrip('/')}/{path}" if data_endpoint else ""

    return PlaceRecord(
        id=place_id,
        parent_id=str(props.get("wof:parent_id", "-1")),
        name=str(props.get("wof:name", props.get("name", ""))),
        placetype=str(props.get("wof:placetype", props.get("placetype", ""))),
        country=str(props.get("wof:country", "")),
        repo=str(props.get("wof:repo", "")),
        path=path,
        uri=uri,
        superseded_by=superseded_by,
        supersedes=supersedes,
        latitude=float(lat),
        longitude=float(lon),
        min_latitude=min_lat,
        min_longitude=min_lon,
        max_latitude=max_lat,
        max_longitude=max_lon,
        is_current=int(props.get("mz:is_current", -1)),
        is_ceased=_edtf_flag(props.get("edtf:cessation")),
        is_deprecated=_edtf_flag(props.get("edtf:deprecated")),
        is_superseded=1 if superseded_by else 0,
        is_superseding=1 if supersedes else 0,
        lastmodified=int(props.get("wof:lastmodified", -1)),
    )


def _edtf_flag(value: Any) -> int:
    # "u"/"uuuu" is EDTF for unknown
    if value is None:
        return -1
    value = str(value).strip()
    if value in ("", "u", "uuuu"):
        return 0
    return 1


def read_geojson(path: str | Path, *, data_endpoint: str = "") -> list[Place]:
    """Read a GeoJSON Feature or FeatureCollection of WOF records."""
    with open(path, encoding="utf-8") as f:
        doc = json.load(f)

    if doc.get("type") == "FeatureCollection":
        features = doc.get("features", [])
    elif doc.get("type") == "Feature":
        features = [doc]
    else:
        raise ValueError(f"Unsupported GeoJSON type in {path}: {doc.get('type')}")

    places: list[Place] = []
    for feature in features:
        geometry = shape(feature["geometry"])
        props = dict(feature.get("properties") or {})
        if "id" not in props and feature.get("id") is not None:
            props["id"] = feature["id"]
        places.append((place_from_properties(props, geometry, data_endpoint=data_endpoint), geometry))
    return places


def read_shapefile(
    shp_path: str | Path,
    *,
    id_field: str = "id",
    name_field: str = "name",
    placetype_field: str = "placetype",
    data_endpoint: str = "",
) -> list[Place]:
    """Read a polygon shapefile, reprojecting to WGS84 when the .prj is projected."""
    shp_path = Path(shp_path)
    sf = shapefile.Reader(str(shp_path))
    prj_path = shp_path.with_suffix(".prj")
    epsg, _, is_projected = detect_crs(prj_path if prj_path.exists() else None)

    if "POLYGON" not in sf.shapeTypeName.upper():
        sf.close()
        raise ValueError(f"Unsupported shape type: {sf.shapeTypeName}. Only POLYGON shapes are supported.")

    project = None
    if is_projected and epsg is not None:
        transformer = Transformer.from_crs(f"EPSG:{epsg}", "EPSG:4326", always_xy=True)
        project = transformer.transform

    places: list[Place] = []
    try:
        for sr in sf.iterShapeRecords():
            geometry = shape(sr.shape.__geo_interface__)
            if project is not None:
                geometry = shapely.transform(geometry, project, interleaved=False)

            record = sr.record.as_dict()
            props = {
                "id": record.get(id_field, ""),
                "name": record.get(name_field, ""),
                "placetype": record.get(placetype_field, ""),
            }
            places.append((place_from_properties(props, geometry, data_endpoint=data_endpoint), geometry))
    finally:
        sf.close()

    return places


def read_source(path: str | Path, *, data_endpoint: str = "") -> list[Place]:
    """Read every supported file at ``path``, walking directories recursively."""
    path = Path(path)

    if path.is_dir():
        places: list[Place] = []
        for child in sorted(path.rglob("*")):
            if child.suffix.lower() in GEOJSON_EXTS or child.suffix.lower() == SHAPEFILE_EXT:
                places.extend(read_source(child, data_endpoint=data_endpoint))
        return places

    suffix = path.suffix.lower()
    if suffix in GEOJSON_EXTS:
        places = read_geojson(path, data_endpoint=data_endpoint)
    elif suffix == SHAPEFILE_EXT:
        places = read_shapefile(path, data_endpoint=data_endpoint)
    else:
        raise ValueError(f"Unsupported source: {path}")

    logger.debug("Read %d places from %s", len(places), path)
    return places
