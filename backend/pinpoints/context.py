"""Per-process application context.

The context is built once by `main.create_app` and stored on
``app.state``; request handlers receive it through the `get_context`
dependency instead of reaching for module level globals.
"""

from dataclasses import dataclass

from fastapi import Request
from sqlalchemy.engine import Engine

from .config import Settings


@dataclass
class AppContext:
    settings: Settings
    engine: Engine
    verification_key: object


def get_context(request: Request) -> AppContext:
    return request.app.state.context
