"""Checks on bearer token claims and key lookup for the website API."""

from __future__ import annotations

import hmac
import re
from collections.abc import Mapping
from typing import Any

AUDIENCE = "https://api.ttnmapper.org"
ISSUER = "https://auth.ttnmapper.org/"
USER_PREFIX = "auth0|"

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_DECIMAL = re.compile(r"[+-]?[0-9]+")


class AuthError(Exception):
    """Raised when a token cannot be accepted or its claims are unusable."""


def _same(a: str, b: str) -> bool:
    return hmac.compare_digest(a.encode(), b.encode())


def _audience_ok(claim: Any, expected: str) -> bool:
    if isinstance(claim, str):
        audiences = [claim]
    elif isinstance(claim, (list, tuple)):
        if not all(isinstance(item, str) for item in claim):
            return False
        audiences = list(claim)
    else:
        audiences = []
    # An absent or blank audience is accepted, as the claim is optional.
    if not "".join(audiences):
        return True
    matched = False
    for audience in audiences:
        if _same(audience, expected):
            matched = True
    return matched


def _issuer_ok(claim: Any, expected: str) -> bool:
    issuer = claim if isinstance(claim, str) else ""
    if issuer == "":
        return True
    return _same(issuer, expected)


def check_claims(claims: Mapping[str, Any]) -> Mapping[str, Any]:
    """Verify the audience and issuer claims; return the claims if they pass."""
    if not _audience_ok(claims.get("aud"), AUDIENCE):
        raise AuthError("invalid audience")
    if not _issuer_ok(claims.get("iss"), ISSUER):
        raise AuthError("invalid issuer")
    return claims


def pem_certificate(jwks: Mapping[str, Any], kid: str | None) -> str:
    """Return the PEM certificate for the key with the given id from a key set."""
    cert = ""
    for key in jwks.get("keys") or []:
        if kid is None or key.get("kid") != kid:
            continue
        chain = key.get("x5c") or []
        if not chain:
            raise AuthError(f"key {kid!r} has no certificate")
        cert = "-----BEGIN CERTIFICATE-----\n" + chain[0] + "\n-----END CERTIFICATE-----"
    if cert == "":
        raise AuthError("Unable to find appropriate key.")
    return cert


def user_id_from_claims(claims: Mapping[str, Any]) -> int:
    """Return the numeric user id carried in the subject claim."""
    subject = claims.get("sub")
    if not isinstance(subject, str):
        raise AuthError("can't get userid from request context")
    text = subject.removeprefix(USER_PREFIX)
    if not _DECIMAL.fullmatch(text):
        raise AuthError(f"invalid user id {text!r}")
    value = int(text)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise AuthError(f"user id {text!r} out of range")
    return value