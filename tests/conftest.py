import pytest
from shapely.geometry import box

from polyline_pip.config import Settings
from polyline_pip.index import PlaceIndex
from polyline_pip.reader import place_from_properties

# (id, placetype, (min_lon, min_lat, max_lon, max_lat), extra properties)
PLACES = [
    ("85633793", "country", (-125.0, 35.0, -115.0, 45.0), {}),
    ("85688637", "region", (-122.0, 37.0, -119.0, 42.0), {}),
    ("85688513", "region", (-130.0, 42.0, -124.0, 45.0), {}),
    ("101", "locality", (-121.0, 38.0, -120.0, 39.0), {"edtf:deprecated": "2019-01-01"}),
]


@pytest.fixture
def settings():
    return Settings(allow_geojson=True, max_coords=500, sources=[])


@pytest.fixture
def index():
    idx = PlaceIndex()
    for place_id, placetype, bounds, extra in PLACES:
        geom = box(*bounds)
        props = {"wof:id": place_id, "wof:name": f"place {place_id}", "wof:placetype": placetype, **extra}
        idx.add(place_from_properties(props, geom), geom)
    idx.build()
    return idx
