"""Segment computation between consecutive path coordinates."""

from .models import Coordinate, PathSegment


def compute_segments(path: list[Coordinate]) -> list[PathSegment]:
    """Compute segments between consecutive coordinates.

    A single-coordinate path yields one point segment so that it can still
    be queried; an empty path yields no segments.
    """
    if len(path) == 1:
        return [PathSegment(index=0, start=path[0], end=path[0])]

    return [
        PathSegment(index=i - 1, start=path[i - 1], end=path[i])
        for i in range(1, len(path))
    ]
