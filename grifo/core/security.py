"""Credential helpers: password hashing, signed user tokens, opaque client session tokens.

Signed tokens are self-contained: verifying one never touches the database.
Opaque session tokens are random strings whose meaning lives entirely in the
``client_sessions`` table.
"""


import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from werkzeug.security import check_password_hash, generate_password_hash

from grifo.core.config import Settings
from grifo.core.exceptions import AppException, AuthenticationError

logger = logging.getLogger(__name__)

TOKEN_TYPE_USER = "user"


@dataclass(frozen=True)
class Principal:
    """The authenticated identity attached to a request."""

    id: str
    kind: str  # "user" | "client"
    role: str | None = None
    company_id: str | None = None
    email: str | None = None
    name: str | None = None

    @property
    def is_super_admin(self) -> bool:
        return self.kind == TOKEN_TYPE_USER and self.role == "super_admin"


# ---------------------------------------------------------------------------
# Passwords
# ---------------------------------------------------------------------------

def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    return check_password_hash(password_hash, password)


# ---------------------------------------------------------------------------
# Signed tokens (JWT)
# ---------------------------------------------------------------------------

def _secret(settings: Settings) -> str:
    if not settings.jwt_secret:
        logger.error("JWT_SECRET is not configured")
        raise AppException("Autenticação indisponível", code="AUTH_NOT_CONFIGURED")
    return settings.jwt_secret


def create_access_token(
    settings: Settings,
    *,
    user_id: str,
    role: str,
    company_id: str,
    email: str | None = None,
    name: str | None = None,
    now: datetime | None = None,
) -> str:
    issued = now or datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "type": TOKEN_TYPE_USER,
        "role": role,
        "company_id": company_id,
        "email": email,
        "name": name,
        "iat": issued,
        "exp": issued + timedelta(minutes=settings.jwt_expire_minutes),
    }
    return jwt.encode(payload, _secret(settings), algorithm=settings.jwt_algorithm)


def decode_access_token(settings: Settings, token: str) -> Principal:
    """Verify signature and expiry; return the embedded claims as a Principal."""
    try:
        claims = jwt.decode(
            token,
            _secret(settings),
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp", "iat"]},
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token inválido ou expirado")
    except jwt.InvalidTokenError as exc:
        logger.info("Rejected signed token %s...: %s", token[:10], exc)
        raise AuthenticationError("Token inválido ou expirado")

    if claims.get("type") != TOKEN_TYPE_USER or not claims.get("company_id"):
        raise AuthenticationError("Token inválido ou expirado")

    return Principal(
        id=claims["sub"],
        kind=TOKEN_TYPE_USER,
        role=claims.get("role"),
        company_id=claims["company_id"],
        email=claims.get("email"),
        name=claims.get("name"),
    )


# ---------------------------------------------------------------------------
# Opaque session tokens (client portal)
# ---------------------------------------------------------------------------

def new_session_token() -> str:
    return secrets.token_urlsafe(48)


def bearer_token(authorization: str | None) -> str | None:
    """Extract ``<token>`` from ``Authorization: Bearer <token>``."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
