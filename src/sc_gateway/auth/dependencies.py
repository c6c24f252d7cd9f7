"""FastAPI dependencies: get_current_caller / get_optional_caller.

Usage in any router:
    from src.sc_gateway.auth.dependencies import get_current_caller

    @router.post("/things")
    async def create(caller: Caller = Depends(get_current_caller)):
        ...
"""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.sc_common.errors import AuthRequiredError
from src.sc_gateway.auth.caller import ANONYMOUS, Caller
from src.sc_gateway.auth.jwt_handler import caller_from_claims, decode_token

# auto_error=False: a missing header becomes our own localized 401
_bearer = HTTPBearer(auto_error=False)


async def get_optional_caller(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> Caller:
    """Anonymous caller when no token is sent; invalid tokens still fail."""
    if credentials is None:
        return ANONYMOUS
    payload = decode_token(credentials.credentials)
    return caller_from_claims(payload)


async def get_current_caller(
    caller: Caller = Depends(get_optional_caller),
) -> Caller:
    """Require an authenticated caller (HTTP 401 otherwise)."""
    if not caller.uid:
        raise AuthRequiredError()
    return caller
