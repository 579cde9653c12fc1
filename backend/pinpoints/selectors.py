"""Marker selectors.

A single marker is addressed either by its storage id or by its
coordinate pair, depending on which routing scheme is deployed. Path
segments are parsed into one of the two selector types at the routing
boundary so the repository only ever sees typed values.
"""

import math
from dataclasses import dataclass
from typing import Union

from .errors import NotFound


@dataclass(frozen=True)
class ById:
    marker_id: int


@dataclass(frozen=True)
class ByCoordinates:
    lat: float
    lng: float


Selector = Union[ById, ByCoordinates]


def parse_id(raw: str) -> ById:
    try:
        return ById(int(raw))
    except ValueError as exc:
        raise NotFound(cause=exc) from exc


def parse_coordinates(raw_lat: str, raw_lng: str) -> ByCoordinates:
    try:
        lat, lng = float(raw_lat), float(raw_lng)
    except ValueError as exc:
        raise NotFound(cause=exc) from exc
    if not (math.isfinite(lat) and math.isfinite(lng)):
        raise NotFound()
    return ByCoordinates(lat, lng)
