"""Pydantic request/response schemas used by the API.

Schemas keep the wire shapes stable: a marker is always rendered as
``{"user", "lat", "lng", "note"}`` and a collection as ``{"markers": [...]}``.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from . import models


class MarkerIn(BaseModel):
    """Body of ``PUT /marker``.

    Coordinates default to zero so that an omitted field and an explicit
    ``0`` are indistinguishable; both are rejected by the route.
    """
    lat: float = Field(default=0.0, strict=True, allow_inf_nan=False)
    lng: float = Field(default=0.0, strict=True, allow_inf_nan=False)
    note: Optional[str] = ""

    @field_validator("note")
    @classmethod
    def _none_note_is_empty(cls, v):
        return v or ""


class MarkerOut(BaseModel):
    user: str
    lat: float
    lng: float
    note: str = ""

    @classmethod
    def from_row(cls, row: models.Marker) -> "MarkerOut":
        return cls(user=row.username, lat=row.lat, lng=row.lng, note=row.note or "")


class MarkerCollectionOut(BaseModel):
    markers: List[MarkerOut] = []


class MessageOut(BaseModel):
    message: str
