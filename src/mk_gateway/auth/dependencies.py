"""FastAPI dependencies: get_current_party, require_operator.

Usage in any protected router:
    from src.mk_gateway.auth.dependencies import get_current_party

    @router.get("/protected")
    async def protected(party: str = Depends(get_current_party)):
        ...
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from config.settings import settings
from src.mk_common.errors import InvalidCredentialsError, OperatorPermissionError
from src.mk_gateway.auth.jwt_handler import decode_token

# Tokens come from the external identity service; tokenUrl is informational only
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token")

# Reusable 401 exception with WWW-Authenticate header (OAuth2 standard)
_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_current_party(token: str = Depends(oauth2_scheme)) -> str:
    """Validate the Bearer token and return the caller's party id (``sub``).

    Raises HTTP 401 if the token is missing, invalid, expired, or has no subject.
    """
    try:
        payload = decode_token(token)
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None

    party_id = payload.get("sub")
    if not party_id:
        raise _CREDENTIALS_EXCEPTION
    return str(party_id)


async def require_operator(party_id: str = Depends(get_current_party)) -> str:
    """Verify the caller is the marketplace operator (admin endpoints)."""
    if party_id != settings.OPERATOR_PARTY_ID:
        raise OperatorPermissionError(party_id)
    return party_id
