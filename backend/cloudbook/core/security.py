"""Password hashing and signed session tokens."""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import secrets
import time
from typing import Any

HASH_ALGORITHM = "pbkdf2_sha256"
SALT_BYTES = 16
PLACEHOLDER_PASSWORD_HASH = "-"


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64decode(value: str) -> bytes:
    padding = "=" * (-len(value) % 4)
    return base64.urlsafe_b64decode(value + padding)


def hash_password(password: str, *, iterations: int) -> str:
    """Return a salted one-way hash in the form ``pbkdf2_sha256$iter$salt$hash``."""
    salt = secrets.token_bytes(SALT_BYTES)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return f"{HASH_ALGORITHM}${iterations}${_b64encode(salt)}${_b64encode(digest)}"


def verify_password(password: str, stored_hash: str | None) -> bool:
    if not stored_hash or stored_hash == PLACEHOLDER_PASSWORD_HASH:
        return False
    try:
        algorithm, iterations_raw, salt_raw, digest_raw = stored_hash.split("$")
        iterations = int(iterations_raw)
        salt = _b64decode(salt_raw)
        expected = _b64decode(digest_raw)
    except ValueError:
        return False
    if algorithm != HASH_ALGORITHM:
        return False
    candidate = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return hmac.compare_digest(candidate, expected)


def _sign(message: bytes, secret: str) -> bytes:
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).digest()


def sign_token(claims: dict[str, Any], *, secret: str, ttl_seconds: int, now: float | None = None) -> str:
    """Sign ``claims`` into ``<payload>.<signature>``, adding ``iat`` and ``exp``."""
    issued_at = int(now if now is not None else time.time())
    payload = dict(claims, iat=issued_at, exp=issued_at + ttl_seconds)
    body = _b64encode(json.dumps(payload, separators=(",", ":"), sort_keys=True).encode("utf-8"))
    signature = _b64encode(_sign(body.encode("ascii"), secret))
    return f"{body}.{signature}"


def decode_token(token: str, *, secret: str, now: float | None = None) -> dict[str, Any] | None:
    """Return the claims of a well-signed, unexpired token, else None."""
    if not token or token.count(".") != 1:
        return None
    body, signature = token.split(".")
    try:
        expected = _sign(body.encode("ascii"), secret)
        if not hmac.compare_digest(expected, _b64decode(signature)):
            return None
        payload = json.loads(_b64decode(body))
    except (ValueError, UnicodeError):
        return None
    if not isinstance(payload, dict):
        return None
    current = now if now is not None else time.time()
    exp = payload.get("exp")
    if not isinstance(exp, int) or exp <= current:
        return None
    return payload
