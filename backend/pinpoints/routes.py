"""HTTP controllers for the marker API.

Controllers are intentionally thin: they resolve the caller's identity,
parse the request into typed values, delegate to `MarkerRepository` and
translate store errors into the boundary messages clients see.

Endpoints implemented:
- GET /healthcheck
- GET /pingDB
- GET /marker
- PUT /marker
- GET /marker/{selector}
- DELETE /marker/{selector}

``{selector}`` is ``{lat}/{lng}`` or ``{marker_id}`` depending on the
``MARKER_SELECTOR`` setting; `build_router` picks the matching routes.
Any other method on a marker route answers 405, after authentication.
"""

import logging
from functools import partial

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from . import database
from .auth import get_identity
from .context import AppContext, get_context
from .errors import (
    BadRequestBody,
    MethodNotAllowed,
    NotFound,
    PersistenceError,
    StoreError,
    StoreUnavailable,
)
from .repositories import MarkerRepository
from .schemas import MarkerCollectionOut, MarkerIn, MarkerOut
from .selectors import parse_coordinates, parse_id

logger = logging.getLogger("pinpoints.api")

COLLECTION_UNSUPPORTED = ["POST", "PATCH", "DELETE", "OPTIONS"]
SINGLE_UNSUPPORTED = ["POST", "PATCH", "PUT", "OPTIONS"]


async def read_body(request: Request) -> bytes:
    return await request.body()


def parse_marker_body(body: bytes) -> MarkerIn:
    """Validate a ``PUT /marker`` body.

    A zero coordinate counts as absent. Coordinate ranges are not checked.
    """
    try:
        payload = MarkerIn.model_validate_json(body)
    except ValidationError as exc:
        raise BadRequestBody(cause=exc) from exc
    if payload.lat == 0 or payload.lng == 0:
        raise BadRequestBody()
    return payload


def _unsupported(request: Request, user: str = Depends(get_identity)):
    raise MethodNotAllowed(request.method)


def _get_marker(db: Session, user: str, make_selector) -> MarkerOut:
    try:
        row = MarkerRepository(db).get(user, make_selector())
    except StoreError as exc:
        logger.info("Could not find marker: %s", exc.cause or exc.message)
        raise NotFound("Could not find marker") from exc
    return MarkerOut.from_row(row)


def _delete_marker(db: Session, user: str, make_selector) -> Response:
    try:
        MarkerRepository(db).delete(user, make_selector())
    except StoreError as exc:
        logger.error("Could not delete marker: %s", exc.cause or exc.message)
        raise NotFound("Could not delete marker") from exc
    return Response(status_code=204)


router = APIRouter()


@router.get("/healthcheck", response_class=PlainTextResponse)
def healthcheck():
    return "OK"


@router.get("/pingDB", response_class=PlainTextResponse)
def ping_db(ctx: AppContext = Depends(get_context)):
    try:
        database.ping(ctx.engine)
    except SQLAlchemyError as exc:
        logger.error("Failed to ping database: %s", exc)
        raise StoreUnavailable(cause=exc) from exc
    return "OK"


@router.get("/marker", response_model=MarkerCollectionOut)
def list_markers(
    user: str = Depends(get_identity),
    db: Session = Depends(database.get_session),
):
    try:
        rows = MarkerRepository(db).list_for_user(user)
    except PersistenceError as exc:
        logger.info("Could not find markers: %s", exc.cause)
        raise NotFound("Could not find markers") from exc
    return MarkerCollectionOut(markers=[MarkerOut.from_row(r) for r in rows])


@router.put("/marker", status_code=201, response_model=MarkerOut)
def create_marker(
    user: str = Depends(get_identity),
    body: bytes = Depends(read_body),
    db: Session = Depends(database.get_session),
):
    payload = parse_marker_body(body)
    try:
        MarkerRepository(db).create(user, payload.lat, payload.lng, payload.note)
    except PersistenceError as exc:
        logger.error("Could not insert in database: %s", exc.cause)
        raise
    return MarkerOut(user=user, lat=payload.lat, lng=payload.lng, note=payload.note)


router.add_api_route("/marker", _unsupported, methods=COLLECTION_UNSUPPORTED, include_in_schema=False)


by_coordinates_router = APIRouter()


@by_coordinates_router.get("/marker/{lat}/{lng}", response_model=MarkerOut)
def get_marker_by_coordinates(
    lat: str,
    lng: str,
    user: str = Depends(get_identity),
    db: Session = Depends(database.get_session),
):
    return _get_marker(db, user, partial(parse_coordinates, lat, lng))


@by_coordinates_router.delete("/marker/{lat}/{lng}", status_code=204)
def delete_marker_by_coordinates(
    lat: str,
    lng: str,
    user: str = Depends(get_identity),
    db: Session = Depends(database.get_session),
):
    return _delete_marker(db, user, partial(parse_coordinates, lat, lng))


by_coordinates_router.add_api_route(
    "/marker/{lat}/{lng}", _unsupported, methods=SINGLE_UNSUPPORTED, include_in_schema=False
)


by_id_router = APIRouter()


@by_id_router.get("/marker/{marker_id}", response_model=MarkerOut)
def get_marker_by_id(
    marker_id: str,
    user: str = Depends(get_identity),
    db: Session = Depends(database.get_session),
):
    return _get_marker(db, user, partial(parse_id, marker_id))


@by_id_router.delete("/marker/{marker_id}", status_code=204)
def delete_marker_by_id(
    marker_id: str,
    user: str = Depends(get_identity),
    db: Session = Depends(database.get_session),
):
    return _delete_marker(db, user, partial(parse_id, marker_id))


by_id_router.add_api_route("/marker/{marker_id}", _unsupported, methods=SINGLE_UNSUPPORTED, include_in_schema=False)


def build_router(selector_mode: str) -> APIRouter:
    """Return the full route set for the given selector scheme."""
    api = APIRouter()
    api.include_router(router)
    api.include_router(by_id_router if selector_mode == "id" else by_coordinates_router)
    return api
