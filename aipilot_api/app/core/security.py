"""
Security helpers for password hashing and JWT authentication.

Tokens are HS256 JSON Web Tokens built from HMAC-SHA256 signatures and
base64url encoding.  Two kinds are issued: short lived access tokens
signed with ``settings.jwt_secret`` and long lived refresh tokens
signed with ``settings.refresh_secret``.  Both embed the user id as
``sub`` plus ``username``, ``isVerified`` and an ``exp`` timestamp.

Passwords are hashed with PBKDF2-HMAC-SHA256 and a per-password salt.
"""

import base64
import hashlib
import hmac
import json
import logging
import os
import time
from typing import Any, Dict, Optional

from fastapi import Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings
from .i18n import translate
from .responses import ApiError, ErrorCode

logger = logging.getLogger(__name__)

PBKDF2_ITERATIONS = 100_000
JWT_HEADER = {"alg": "HS256", "typ": "JWT"}


def _b64_url_encode(data: bytes) -> str:
    """Base64-url encode bytes without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def _b64_url_decode(data: str) -> bytes:
    """Decode base64-url encoded string, adding padding if necessary."""
    padding = '=' * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _sign(message: bytes, secret: str) -> bytes:
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).digest()


def _json_segment(obj: Dict[str, Any]) -> str:
    return _b64_url_encode(json.dumps(obj, separators=(",", ":")).encode("utf-8"))


def _json_decode(segment: str) -> Dict[str, Any]:
    return json.loads(_b64_url_decode(segment).decode("utf-8"))


def encode_token(data: Dict[str, Any], secret: str, expires_in: int) -> str:
    """Create a signed JWT carrying ``data`` and an ``exp`` claim.

    Parameters
    ----------
    data : dict
        Claims to embed in the token (e.g. {"sub": "<user id>"}).
    secret : str
        HMAC key used for the signature.
    expires_in : int
        Lifetime of the token in seconds.

    Returns
    -------
    str
        A token of the form ``header.payload.signature``.
    """
    issued_at = int(time.time())
    claims = {**data, "iat": issued_at, "exp": issued_at + expires_in}
    unsigned = f"{_json_segment(JWT_HEADER)}.{_json_segment(claims)}"
    return f"{unsigned}.{_b64_url_encode(_sign(unsigned.encode('ascii'), secret))}"


def decode_token(token: str, secret: str) -> Optional[Dict[str, Any]]:
    """Verify and decode a JWT.

    Returns the payload when the signature matches ``secret``, the
    header announces HS256 and ``exp`` lies in the future; otherwise
    ``None``.
    """
    try:
        unsigned, _, signature = token.rpartition(".")
        header_segment, _, payload_segment = unsigned.partition(".")
        if not header_segment or not payload_segment or "." in payload_segment:
            return None
        if _json_decode(header_segment).get("alg") != JWT_HEADER["alg"]:
            return None
        expected = _sign(unsigned.encode("ascii"), secret)
        if not hmac.compare_digest(expected, _b64_url_decode(signature)):
            return None
        claims = _json_decode(payload_segment)
        expires_at = claims.get("exp")
        if expires_at is None or int(expires_at) < int(time.time()):
            return None
        return claims
    except (ValueError, TypeError, AttributeError):
        return None


def token_claims(user_id: str, username: str, is_verified: bool) -> Dict[str, Any]:
    return {"sub": user_id, "username": username, "isVerified": bool(is_verified)}


def create_access_token(claims: Dict[str, Any]) -> str:
    return encode_token(claims, settings.jwt_secret, settings.access_token_expire_seconds)


def create_refresh_token(claims: Dict[str, Any]) -> str:
    return encode_token(claims, settings.refresh_secret, settings.refresh_token_expire_seconds)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    return decode_token(token, settings.jwt_secret)


def decode_refresh_token(token: str) -> Optional[Dict[str, Any]]:
    return decode_token(token, settings.refresh_secret)


security = HTTPBearer(auto_error=False)


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Dict[str, Any]:
    """Dependency that returns the claims of a valid access token.

    A missing ``Authorization`` header or an invalid/expired token
    results in HTTP 401.  The claims are also stored on
    ``request.state.user`` so that later dependencies (the rate
    limiter) can key on the subject.
    """
    if credentials is None:
        raise ApiError(
            status.HTTP_401_UNAUTHORIZED,
            translate(request, "missing_token"),
            ErrorCode.UNAUTHORIZED,
            headers={"WWW-Authenticate": "Bearer"},
        )
    payload = decode_access_token(credentials.credentials)
    if not payload or not payload.get("sub"):
        logger.info("Authentication failed for %s %s", request.method, request.url.path)
        raise ApiError(
            status.HTTP_401_UNAUTHORIZED,
            translate(request, "invalid_token"),
            ErrorCode.UNAUTHORIZED,
            headers={"WWW-Authenticate": "Bearer"},
        )
    logger.debug("User %s authenticated", payload.get("username"))
    request.state.user = payload
    return payload


def hash_password(password: str) -> str:
    """Hash a password using PBKDF2-HMAC with SHA-256.

    A 16-byte random salt is generated for each password.  The result
    is ``"<salt hex>$<hash hex>"``.
    """
    salt = os.urandom(16)
    dk = hashlib.pbkdf2_hmac('sha256', password.encode('utf-8'), salt, PBKDF2_ITERATIONS)
    return f"{salt.hex()}${dk.hex()}"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a stored salt+hash string."""
    try:
        salt_hex, hash_hex = hashed_password.split('$', 1)
        salt = bytes.fromhex(salt_hex)
        stored_hash = bytes.fromhex(hash_hex)
    except (ValueError, AttributeError):
        return False
    dk = hashlib.pbkdf2_hmac('sha256', plain_password.encode('utf-8'), salt, PBKDF2_ITERATIONS)
    return hmac.compare_digest(dk, stored_hash)
