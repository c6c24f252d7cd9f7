"""JWT verification for tokens issued by the external auth provider.

The provider signs HS256 access tokens with a shared JWT_SECRET and puts
the caller's privileges in custom claims:

    {"sub": "<uid>", "type": "access", "admin": true, "roles": ["admin"],
     "name": "<display name>", "iat": ..., "exp": ...}

``create_access_token`` exists for local tooling and tests; production
tokens never originate here.
"""

from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from config.settings import settings
from src.sc_common.errors import InvalidTokenError
from src.sc_gateway.auth.caller import Caller

_ALGORITHM = settings.JWT_ALGORITHM  # "HS256"
_ACCESS_EXPIRE = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)


def create_access_token(
    uid: str,
    admin: bool = False,
    roles: Sequence[str] = (),
    display_name: str | None = None,
) -> str:
    now = datetime.now(UTC)
    payload: dict[str, Any] = {
        "sub": uid,
        "type": "access",
        "admin": admin,
        "roles": list(roles),
        "iat": now,
        "exp": now + _ACCESS_EXPIRE,
    }
    if display_name:
        payload["name"] = display_name
    return str(jwt.encode(payload, settings.JWT_SECRET, algorithm=_ALGORITHM))


def decode_token(token: str) -> dict[str, Any]:
    """Decode and validate an access token.

    Raises:
        InvalidTokenError: bad signature, expired, or not an access token.
    """
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError:
        raise InvalidTokenError() from None

    if payload.get("type") != "access":
        raise InvalidTokenError()
    return payload


def caller_from_claims(payload: dict[str, Any]) -> Caller:
    roles = payload.get("roles") or []
    if not isinstance(roles, list):
        roles = []
    return Caller(
        uid=str(payload["sub"]) if payload.get("sub") else None,
        admin=payload.get("admin") is True,
        roles=tuple(str(r) for r in roles),
        display_name=payload.get("name"),
    )
