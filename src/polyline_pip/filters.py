"""Query-string filters applied to standard places results."""

from __future__ import annotations

from collections.abc import Mapping

from pydantic import BaseModel, Field

from .models import PlaceRecord

PLACETYPES = frozenset({
    "planet", "continent", "ocean", "empire", "country", "dependency", "disputed",
    "marinearea", "macroregion", "region", "macrocounty", "county", "localadmin",
    "metroarea", "locality", "borough", "macrohood", "neighbourhood", "microhood",
    "campus", "building", "address", "venue", "postalcode", "timezone", "intersection",
    "custom",
})

EXISTENTIAL_FLAGS = ("is_current", "is_ceased", "is_deprecated", "is_superseded", "is_superseding")
EXISTENTIAL_VALUES = frozenset({-1, 0, 1})


class FilterError(ValueError):
    """Raised for an unknown placetype or an invalid existential flag value."""


class Filters(BaseModel):
    """Parsed filters. An empty criterion matches every place."""

    placetypes: frozenset[str] = Field(default_factory=frozenset)
    is_current: frozenset[int] = Field(default_factory=frozenset)
    is_ceased: frozenset[int] = Field(default_factory=frozenset)
    is_deprecated: frozenset[int] = Field(default_factory=frozenset)
    is_superseded: frozenset[int] = Field(default_factory=frozenset)
    is_superseding: frozenset[int] = Field(default_factory=frozenset)

    def matches(self, place: PlaceRecord) -> bool:
        if self.placetypes and place.placetype not in self.placetypes:
            return False

        for flag in EXISTENTIAL_FLAGS:
            allowed = getattr(self, flag)
            if allowed and getattr(place, flag) not in allowed:
                return False

        return True


def parse_filters(params: Mapping[str, str]) -> Filters:
    """Build Filters from query parameters, raising FilterError on bad values."""
    kwargs: dict[str, frozenset] = {}

    placetypes = _split(params.get("placetype", ""))
    for pt in placetypes:
        if pt not in PLACETYPES:
            raise FilterError(f"Invalid placetype: {pt}")
    kwargs["placetypes"] = frozenset(placetypes)

    for flag in EXISTENTIAL_FLAGS:
        values = set()
        for raw in _split(params.get(flag, "")):
            try:
                value = int(raw)
            except ValueError:
                raise FilterError(f"Invalid {flag} value: {raw}") from None
            if value not in EXISTENTIAL_VALUES:
                raise FilterError(f"Invalid {flag} value: {raw}")
            values.add(value)
        kwargs[flag] = frozenset(values)

    return Filters(**kwargs)


def _split(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]
