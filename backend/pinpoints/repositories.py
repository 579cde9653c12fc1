"""Marker repository.

`MarkerRepository` is the marker store: every query is filtered by the
requesting identity, and statements bind their arguments as parameters.
Each operation is a single statement committed on its own. SQLAlchemy
failures are rolled back and re-raised as `PersistenceError`; lookups
that match nothing raise `NotFound`.
"""

from typing import List

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from . import models
from .errors import NotFound, PersistenceError
from .selectors import ByCoordinates, ById, Selector


def _where(user: str, selector: Selector):
    clauses = [models.Marker.username == user]
    if isinstance(selector, ById):
        clauses.append(models.Marker.id == selector.marker_id)
    elif isinstance(selector, ByCoordinates):
        clauses.append(models.Marker.lat == selector.lat)
        clauses.append(models.Marker.lng == selector.lng)
    else:
        raise TypeError(f"unsupported selector {selector!r}")
    return clauses


class MarkerRepository:
    """CRUD operations for `Marker` rows scoped to one user."""
    def __init__(self, session: Session):
        self.session = session

    def create(self, user: str, lat: float, lng: float, note: str = "") -> models.Marker:
        """Insert a new marker for `user` and return the managed row."""
        marker = models.Marker(username=user, lat=lat, lng=lng, note=note)
        try:
            self.session.add(marker)
            self.session.commit()
            self.session.refresh(marker)
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise PersistenceError(cause=exc) from exc
        return marker

    def list_for_user(self, user: str) -> List[models.Marker]:
        """Return every marker of `user` in storage order; may be empty."""
        stmt = select(models.Marker).where(models.Marker.username == user)
        try:
            return list(self.session.exec(stmt).all())
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise PersistenceError(cause=exc) from exc

    def get(self, user: str, selector: Selector) -> models.Marker:
        """Return the marker of `user` matching `selector`."""
        stmt = select(models.Marker).where(*_where(user, selector))
        try:
            marker = self.session.exec(stmt).first()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise PersistenceError(cause=exc) from exc
        if marker is None:
            raise NotFound()
        return marker

    def delete(self, user: str, selector: Selector) -> int:
        """Delete the markers of `user` matching `selector`.

        Returns the number of deleted rows, which is never zero: an empty
        match raises `NotFound` so callers can tell it apart from a
        storage failure.
        """
        stmt = delete(models.Marker).where(*_where(user, selector))
        try:
            result = self.session.execute(stmt)
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise PersistenceError(cause=exc) from exc
        if not result.rowcount:
            raise NotFound("Could not find marker to delete")
        return result.rowcount
