"""FastAPI application factory and process entry point.

`create_app` builds the application context once (settings, database
engine, token verification key) and installs the routes, error handlers
and request logging middleware. `run` is the process entry point: any
startup failure is logged and terminates the process before it serves
traffic.
"""

import json
import logging
import time
import uuid
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import database, keys
from .config import ConfigError, Settings
from .context import AppContext
from .errors import ApiError, StartupError
from .routes import build_router
from .schemas import MessageOut

logger = logging.getLogger("pinpoints.api")


async def api_error_handler(request: Request, exc: ApiError):
    return JSONResponse(status_code=exc.status_code, content=MessageOut(message=exc.message).model_dump())


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 405:
        message = f"Method {request.method} is not supported"
    else:
        message = str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content=MessageOut(message=message).model_dump(), headers=exc.headers)


async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    record = {
        "request_id": req_id,
        "path": request.url.path,
        "method": request.method,
        "client": request.client.host if request.client else "unknown",
    }
    response: Response
    try:
        response = await call_next(request)
    except Exception:
        record["duration_ms"] = round((time.perf_counter() - started) * 1000.0, 2)
        logger.exception("request_failed %s", json.dumps(record, ensure_ascii=True))
        raise
    response.headers["X-Request-ID"] = req_id
    record["status_code"] = response.status_code
    record["duration_ms"] = round((time.perf_counter() - started) * 1000.0, 2)
    logger.info("request_done %s", json.dumps(record, ensure_ascii=True))
    return response


def create_app(settings: Optional[Settings] = None, engine=None, verification_key=None) -> FastAPI:
    """Build the application.

    Collaborators that are not passed in are created from `settings`: the
    verification key is fetched from the key service and the engine is
    connected, pinged and given its tables. Failures raise `StartupError`
    or `ConfigError`.
    """
    settings = settings or Settings()
    if verification_key is None:
        verification_key = keys.resolve_public_key(settings)
    if engine is None:
        engine = database.build_engine(settings.DATABASE_URL)
    database.prepare_database(engine)

    app = FastAPI(title="Trip Pin Points Marker API")
    app.state.context = AppContext(settings=settings, engine=engine, verification_key=verification_key)
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.middleware("http")(request_context_middleware)
    app.include_router(build_router(settings.MARKER_SELECTOR))
    logger.info("Serving markers by %s", settings.MARKER_SELECTOR)
    return app


def run():
    try:
        settings = Settings()
    except ConfigError as exc:
        logging.basicConfig(level="INFO")
        logger.critical("%s", exc)
        raise SystemExit(1)
    logging.basicConfig(level=settings.LOG_LEVEL)
    try:
        app = create_app(settings)
    except StartupError as exc:
        logger.critical("%s", exc)
        raise SystemExit(1)
    try:
        uvicorn.run(app, host=settings.HOST, port=settings.PORT)
    finally:
        app.state.context.engine.dispose()
