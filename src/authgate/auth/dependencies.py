"""FastAPI auth dependencies — the request gate.

Learn: These are used as Depends() in route handlers (or at the
include_router level) to extract and verify the bearer token.

Per request:
  no token            → 401 {"error": "Access token required"}
  token, verify fails → 403 {"error": "Invalid or expired token"}
  token, verify ok    → Principal attached to request.state.principal

Invalid and expired tokens get the same response so a client can't
tell which tokens still carry a valid signature. The distinction
is logged server-side.
"""

from typing import Optional

import structlog
from fastapi import Depends, Header, Request

from authgate.auth.tokens import (
    ExpiredTokenError,
    Principal,
    TokenAuthority,
    TokenError,
)

logger = structlog.get_logger()

MISSING_TOKEN_MESSAGE = "Access token required"
REJECTED_TOKEN_MESSAGE = "Invalid or expired token"


class AuthenticationError(Exception):
    """Raised by the gate to short-circuit the request.

    Rendered as {"error": message} by the app-level exception handler.
    """

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def extract_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token part of an `<scheme> <token>` header, or None."""
    if not authorization:
        return None
    parts = authorization.split(" ")
    if len(parts) < 2 or not parts[1]:
        return None
    return parts[1]


def get_token_authority(request: Request) -> TokenAuthority:
    """The authority built at app startup (see main.create_app)."""
    return request.app.state.token_authority


async def require_principal(
    request: Request,
    authorization: Optional[str] = Header(None),
    authority: TokenAuthority = Depends(get_token_authority),
) -> Principal:
    """Verify the bearer token and attach the Principal (401/403 otherwise)."""
    token = extract_token(authorization)
    if token is None:
        logger.info("auth.rejected", reason="missing", path=request.url.path)
        raise AuthenticationError(401, MISSING_TOKEN_MESSAGE)

    try:
        principal = authority.verify(token)
    except TokenError as e:
        reason = "expired" if isinstance(e, ExpiredTokenError) else "invalid"
        logger.info("auth.rejected", reason=reason, path=request.url.path)
        raise AuthenticationError(403, REJECTED_TOKEN_MESSAGE)

    request.state.principal = principal
    return principal


def optional_principal(request: Request) -> Optional[Principal]:
    """Principal attached earlier in the request, or None on open routes.

    Never rejects. The audit recorder reads the actor through this, and it
    works as Depends(optional_principal) on open routes.
    """
    return getattr(request.state, "principal", None)
