"""FastAPI dependencies: database session, cookie authentication, role and CSRF checks."""

from typing import Generator, Iterable

import jwt
from fastapi import Depends, HTTPException, Request
from pydantic import ValidationError
from sqlalchemy.orm import Session

from casework.core.security import decode_session_token
from casework.db.enums import Role
from casework.db.models import Profile
from casework.db.session import SessionLocal
from casework.schemas.auth import TokenPayload, UserSession


COOKIE_NAME = "casework_session"
CSRF_HEADER = "X-Requested-With"
CSRF_HEADER_VALUE = "XMLHttpRequest"


def get_db() -> Generator[Session, None, None]:
    """Yield a request-scoped session; closed when the request ends."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _read_token(request: Request) -> TokenPayload:
    token = request.cookies.get(COOKIE_NAME)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")
    try:
        return TokenPayload.model_validate(decode_session_token(token))
    except (jwt.InvalidTokenError, ValidationError):
        raise HTTPException(status_code=401, detail="Invalid session")


def get_current_user(request: Request, db: Session = Depends(get_db)) -> Profile:
    """
    Resolve the profile behind the session cookie.

    The token must verify, the profile must exist and be active, and the
    token_version claim must match (bumping it revokes every session).

    Raises:
        HTTPException 401: Authentication failed
    """
    claims = _read_token(request)

    profile = db.query(Profile).filter(Profile.id == claims.sub).first()
    if not profile:
        raise HTTPException(status_code=401, detail="User not found")
    if not profile.is_active:
        raise HTTPException(status_code=401, detail="Account disabled")
    if profile.token_version != claims.token_version:
        raise HTTPException(status_code=401, detail="Session revoked")
    return profile


def get_current_session(request: Request, db: Session = Depends(get_db)) -> UserSession:
    """
    Acting identity for service calls. Primary auth dependency.

    Raises:
        HTTPException 401: Not authenticated
        HTTPException 403: Profile carries a role this API does not know
    """
    profile = get_current_user(request, db)

    if not Role.has_value(profile.role):
        raise HTTPException(
            status_code=403,
            detail=f"Unknown role '{profile.role}'. Contact administrator.",
        )

    return UserSession(
        user_id=profile.id,
        role=Role(profile.role),
        email=profile.email,
        display_name=profile.full_name,
    )


def require_roles(allowed_roles: Iterable[Role]):
    """
    Dependency factory: authenticated session whose role is in allowed_roles.

    Usage:
        session: UserSession = Depends(require_roles(STAFF_ROLES))
    """
    allowed = frozenset(allowed_roles)

    def dependency(request: Request, db: Session = Depends(get_db)) -> UserSession:
        session = get_current_session(request, db)
        if session.role not in allowed:
            raise HTTPException(
                status_code=403,
                detail=f"Role '{session.role.value}' not authorized for this action",
            )
        return session

    return dependency


def require_csrf_header(request: Request) -> None:
    """
    Reject state-changing requests without the XHR header.

    Browsers do not attach custom headers to cross-site form posts, so the
    header proves the request came from our own frontend.

    Raises:
        HTTPException 403: Missing or wrong header
    """
    if request.headers.get(CSRF_HEADER) != CSRF_HEADER_VALUE:
        raise HTTPException(
            status_code=403,
            detail=f"Missing CSRF header. Include '{CSRF_HEADER}: {CSRF_HEADER_VALUE}'",
        )
