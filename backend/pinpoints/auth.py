"""Bearer token verification and the FastAPI identity dependency.

`extract_identity` turns a raw ``Authorization`` header value into the
caller's identity: the header must read ``Bearer <token>``, the token must
be a JWT signed by the configured RSA key, and the identity is read from a
designated claim (``zid`` by default). Failures raise the auth error kinds
from `errors`, which the application renders as JSON responses.

Whether a missing identity claim is an error is configurable. In strict
mode it raises `MalformedClaims`; in lenient mode the identity is the
empty string.
"""

import logging
import re
from typing import Optional

import jwt
from fastapi import Depends, Header

from .context import AppContext, get_context
from .errors import InvalidCredential, MalformedClaims, MissingCredential

logger = logging.getLogger("pinpoints.auth")

BEARER_RE = re.compile(r"^Bearer (.*)")


def extract_identity(
    raw_header: Optional[str],
    key,
    claim: str = "zid",
    require_claim: bool = True,
    algorithms=("RS256",),
) -> str:
    match = BEARER_RE.match(raw_header or "")
    if match is None:
        raise MissingCredential()
    token = match.group(1)

    try:
        claims = jwt.decode(token, key, algorithms=list(algorithms))
    except jwt.PyJWTError as exc:
        raise InvalidCredential(cause=exc) from exc

    value = claims.get(claim)
    if value is None:
        if require_claim:
            raise MalformedClaims(claim)
        return ""
    return str(value)


def get_identity(
    authorization: Optional[str] = Header(default=None),
    ctx: AppContext = Depends(get_context),
) -> str:
    """FastAPI dependency returning the identity of the calling user."""
    settings = ctx.settings
    try:
        return extract_identity(
            authorization,
            ctx.verification_key,
            claim=settings.IDENTITY_CLAIM,
            require_claim=settings.REQUIRE_IDENTITY_CLAIM,
            algorithms=(settings.JWT_ALGORITHM,),
        )
    except (InvalidCredential, MalformedClaims) as exc:
        logger.info("Rejected bearer token: %s", exc.cause or exc.message)
        raise
