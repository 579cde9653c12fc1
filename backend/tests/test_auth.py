import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa

from pinpoints.auth import extract_identity
from pinpoints.errors import InvalidCredential, MalformedClaims, MissingCredential


def test_valid_token_yields_identity(make_token, public_key):
    header = f"Bearer {make_token(user='string3')}"
    assert extract_identity(header, public_key) == "string3"


@pytest.mark.parametrize("header", [None, "", "Token abc", "bearer abc", "Basic dXNlcjpwdw==", "Bearer"])
def test_missing_or_malformed_header(header, public_key):
    with pytest.raises(MissingCredential):
        extract_identity(header, public_key)


@pytest.mark.parametrize("token", ["", "1234", "a.b.c"])
def test_garbage_token_is_invalid(token, public_key):
    with pytest.raises(InvalidCredential):
        extract_identity(f"Bearer {token}", public_key)


def test_token_signed_by_other_key_is_invalid(make_token, public_key):
    other = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    with pytest.raises(InvalidCredential):
        extract_identity(f"Bearer {make_token(key=other)}", public_key)


def test_expired_token_is_invalid(make_token, public_key):
    with pytest.raises(InvalidCredential):
        extract_identity(f"Bearer {make_token(expires_in=-60)}", public_key)


def test_hmac_token_rejected_for_rsa_key(public_key):
    token = jwt.encode({"zid": "string3"}, "shared-secret", algorithm="HS256")
    with pytest.raises(InvalidCredential):
        extract_identity(f"Bearer {token}", public_key)


def test_missing_claim_strict(make_token, public_key):
    header = f"Bearer {make_token(drop=('zid',))}"
    with pytest.raises(MalformedClaims) as info:
        extract_identity(header, public_key, require_claim=True)
    assert info.value.message == "Could not find zid in given token"


def test_missing_claim_lenient(make_token, public_key):
    header = f"Bearer {make_token(drop=('zid',))}"
    assert extract_identity(header, public_key, require_claim=False) == ""


def test_custom_claim_and_non_string_value(make_token, public_key):
    header = f"Bearer {make_token(uid=42)}"
    assert extract_identity(header, public_key, claim="uid") == "42"
