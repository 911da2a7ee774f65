import time
from typing import Mapping

import jwt

from faststart_api.errors import UnauthorizedError

TOKEN_ISSUER = "faststart-access"
_ALGORITHM = "HS256"


def get_bearer_token(headers: Mapping[str, str]) -> str:
    auth = headers.get("authorization") or headers.get("Authorization") or ""
    scheme, _, token = auth.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise UnauthorizedError("Couldn't find JWT")
    return token.strip()


def make_jwt(user_id: str, secret: str, expires_in: int = 3600) -> str:
    now = int(time.time())
    claims = {"iss": TOKEN_ISSUER, "sub": str(user_id), "iat": now, "exp": now + expires_in}
    return jwt.encode(claims, secret, algorithm=_ALGORITHM)


def validate_jwt(token: str, secret: str) -> str:
    """Return the user id (sub claim) of a valid access token."""
    try:
        claims = jwt.decode(
            token,
            secret,
            algorithms=[_ALGORITHM],
            issuer=TOKEN_ISSUER,
            options={"require": ["exp", "iss", "sub"]},
        )
    except jwt.PyJWTError as e:
        raise UnauthorizedError(f"Couldn't validate JWT: {e}")
    return str(claims["sub"])
