"""Verification key loading.

The token issuer publishes its RSA public key as PEM text on a key
distribution endpoint. The key is fetched once while the application is
built; a failure there is fatal and the process never starts serving.
"""

import logging

import httpx
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey

from .errors import StartupError

logger = logging.getLogger("pinpoints.keys")


def load_public_key(pem) -> RSAPublicKey:
    """Parse a PEM encoded RSA public key.

    Both PKCS#1 (``BEGIN RSA PUBLIC KEY``) and SubjectPublicKeyInfo
    (``BEGIN PUBLIC KEY``) encodings are accepted.
    """
    if isinstance(pem, str):
        pem = pem.encode("ascii", errors="ignore")
    try:
        key = serialization.load_pem_public_key(pem.strip())
    except (ValueError, TypeError) as exc:
        raise StartupError(f"Failed to parse public key: {exc}") from exc
    if not isinstance(key, RSAPublicKey):
        raise StartupError(f"Expected an RSA public key, got {type(key).__name__}")
    return key


def fetch_public_key(url: str) -> RSAPublicKey:
    # no timeout and no retry: the fetch runs once at startup
    logger.info("Fetching authorization key from %s", url)
    try:
        res = httpx.get(url, timeout=None, follow_redirects=True)
        res.raise_for_status()
    except httpx.HTTPError as exc:
        raise StartupError(f"Failed to get authorization key: {exc}") from exc
    return load_public_key(res.content)


def resolve_public_key(settings) -> RSAPublicKey:
    """Return the inline key from settings, or fetch it from the key service."""
    if settings.AUTH_PUBLIC_KEY:
        return load_public_key(settings.AUTH_PUBLIC_KEY)
    return fetch_public_key(settings.AUTH_KEY_URL)
