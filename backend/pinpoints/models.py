"""SQLModel data models.

The service persists a single table, `markers`. Rows are always scoped to
the `username` of the identity that created them.
"""

from typing import Optional

from sqlmodel import Field, SQLModel


class Marker(SQLModel, table=True):
    """A geographic point saved by a user.

    Fields:
    - `username`: identity taken from the creator's bearer token
    - `lat` / `lng`: coordinates, stored as double precision
    - `note`: free text, may be empty
    """
    __tablename__ = "markers"

    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(index=True, nullable=False)
    lat: float = Field(nullable=False)
    lng: float = Field(nullable=False)
    note: Optional[str] = Field(default="")
