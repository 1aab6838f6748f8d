"""Auth API — registration, login, current principal.

Learn: Routes for the session lifecycle:
- POST /auth/register → create an account, returns {id, user, token} (audited)
- POST /auth/login → email/password → {user, token}
- GET /auth/me → the principal carried by the bearer token

Register is an open route, so its audit rows have a null user_id and
take their resource id from the response payload.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from authgate.audit.recorder import AuditedRoute, audited
from authgate.auth.dependencies import get_token_authority, require_principal
from authgate.auth.password import verify_password
from authgate.auth.tokens import Principal, TokenAuthority
from authgate.db.engine import get_db
from authgate.schemas.auth import (
    LoginRequest,
    PrincipalRead,
    RegisterRequest,
    SessionResponse,
    UserRead,
)
from authgate.services.user_service import UserService

router = APIRouter(prefix="/auth", route_class=AuditedRoute)


def _session(user, authority: TokenAuthority) -> SessionResponse:
    return SessionResponse(
        id=user.id,
        user=UserRead.model_validate(user),
        token=authority.issue(user.id, user.role),
    )


# ─── Register ────────────────────────────────────────────


@router.post("/register", response_model=SessionResponse, status_code=201)
@audited("register", "user")
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db),
    authority: TokenAuthority = Depends(get_token_authority),
):
    """Create a new user account and start a session.

    The response repeats user.id as a top-level `id`: there is no `{id}`
    path param on this open route, so the audit row takes its resource
    id from the payload.
    """
    svc = UserService(db)
    if await svc.get_by_email(body.email):
        raise HTTPException(status_code=409, detail="Email already registered")

    user = await svc.create_user(
        email=body.email, full_name=body.full_name, password=body.password
    )
    return _session(user, authority)


# ─── Login ───────────────────────────────────────────────


@router.post("/login", response_model=SessionResponse)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
    authority: TokenAuthority = Depends(get_token_authority),
):
    """Login with email and password → session token."""
    user = await UserService(db).get_by_email(body.email)
    if not user or not verify_password(body.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return _session(user, authority)


# ─── Current principal ──────────────────────────────────


@router.get("/me", response_model=PrincipalRead)
async def me(principal: Principal = Depends(require_principal)):
    """Return the principal carried by the bearer token."""
    return PrincipalRead(user_id=principal.user_id, role=principal.role)
