"""Session token issuance and verification.

Learn: JWT (JSON Web Token) provides stateless authentication.
A session token is valid for 7 days from issuance. There is no
revocation list: a token is either correctly signed and unexpired,
or useless.

Claims carried: userId, role, iat, exp. Nothing else.

The secret is handed to TokenAuthority at construction instead of being
read from globals, so tests can build authorities with their own secrets.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt


class TokenError(Exception):
    """Raised when token verification fails."""


class InvalidTokenError(TokenError):
    """Signature mismatch, malformed token, or missing claims."""


class ExpiredTokenError(TokenError):
    """Signature is valid but the token is past its expiry."""


@dataclass(frozen=True)
class Principal:
    """The authenticated identity attached to a request."""

    user_id: str
    role: str


class TokenAuthority:
    """Symmetric-key signing and verification of session tokens."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expires: timedelta = timedelta(days=7),
    ):
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self.algorithm = algorithm
        self.expires = expires

    @classmethod
    def from_settings(cls, settings) -> "TokenAuthority":
        return cls(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            expires=timedelta(days=settings.token_expire_days),
        )

    def issue(
        self,
        user_id: str,
        role: str,
        *,
        issued_at: Optional[datetime] = None,
    ) -> str:
        """Create a signed session token.

        Learn: iat/exp are stored as whole seconds, so two calls with the
        same inputs, issued_at and secret produce the same token bit for bit.
        """
        now = issued_at or datetime.now(timezone.utc)
        iat = int(now.timestamp())
        payload = {
            "userId": str(user_id),
            "role": role,
            "iat": iat,
            "exp": iat + int(self.expires.total_seconds()),
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Principal:
        """Verify a session token and return its Principal.

        Raises ExpiredTokenError or InvalidTokenError on failure.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            raise ExpiredTokenError("Token has expired")
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(f"Invalid token: {e}")

        user_id = payload.get("userId")
        role = payload.get("role")
        if not isinstance(user_id, str) or not isinstance(role, str):
            raise InvalidTokenError("Invalid token: missing userId or role claim")
        return Principal(user_id=user_id, role=role)
