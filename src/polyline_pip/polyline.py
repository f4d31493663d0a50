"""Encoded polyline decoder.

Handles plain Google-style polylines (5 decimal places) as well as Valhalla's
6 decimal place variant. Both use the same encoding; only the scale differs.

See https://developers.google.com/maps/documentation/utilities/polylinealgorithm
"""

from __future__ import annotations

from pydantic import ValidationError

from .models import Coordinate

STANDARD_PRECISION = 1.0e5
VALHALLA_PRECISION = 1.0e6


class DecodeError(ValueError):
    """Raised when an encoded polyline is malformed or decodes to an invalid coordinate."""


def scale_for(valhalla: bool) -> float:
    return VALHALLA_PRECISION if valhalla else STANDARD_PRECISION


def decode_polyline(encoded: str, scale: float) -> list[Coordinate]:
    """Decode ``encoded`` into a list of coordinates, dividing by ``scale``.

    Raises DecodeError if the input ends in the middle of a value, contains a
    character outside the encoding alphabet, or produces an out-of-range
    coordinate. A trailing latitude with no matching longitude is ignored.
    """
    coords: list[Coordinate] = []
    lat = lon = 0
    count = index = 0
    length = len(encoded)

    while index < length:
        result = 0
        shift = 0
        b = 0x20

        while b >= 0x20:
            if index >= length:
                raise DecodeError("Invalid polyline: truncated at position %d" % index)

            b = ord(encoded[index]) - 63
            if b < 0 or b > 0x3F:
                raise DecodeError("Invalid polyline: unexpected character at position %d" % index)
            index += 1

            result |= (b & 0x1F) << shift
            shift += 5

        # zig-zag sign
        if result & 1:
            delta = ~(result >> 1)
        else:
            delta = result >> 1

        if count % 2 == 0:
            lat += delta
        else:
            lon += delta
            coords.append(_coordinate(lat, lon, scale))

        count += 1

    return coords


def _coordinate(lat: int, lon: int, scale: float) -> Coordinate:
    try:
        return Coordinate(lat=lat / scale, lon=lon / scale)
    except OverflowError:
        raise DecodeError("Invalid coordinate: value too large") from None
    except ValidationError:
        raise DecodeError(f"Invalid coordinate: latitude {lat / scale}, longitude {lon / scale}") from None
