"""
Reusable FastAPI dependencies for authentication, authorization, and the
rate catalog.

Dependencies:
  - get_current_user  — extracts the user from the JWT (401 if invalid)
  - require_customer  — rejects admin accounts on user endpoints (403)
  - require_admin     — rejects non-admin accounts on admin endpoints (403)
  - get_rate_cache    — the application's RateCatalogCache
"""

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from novapay.core.security import verify_token
from novapay.database import get_db
from novapay.models.user import User, UserStatus
from novapay.services.rate_catalog import RateCatalogCache


# ---------------------------------------------------------------------------
# Core: extract user from JWT
# ---------------------------------------------------------------------------


async def get_current_user(
    authorization: str = Header(..., description="Bearer <access_token>"),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Parse the ``Authorization: Bearer <token>`` header, verify the JWT,
    look up the User in the database, and return it.

    Raises 401 if the token is missing, malformed, expired, or the user
    is not found / suspended.
    """
    if not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header",
        )

    token = authorization[len("Bearer "):]
    payload = verify_token(token, expected_type="access")
    user_id = payload.get("sub")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    if user.status == UserStatus.SUSPENDED:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account is suspended",
        )

    return user


# ---------------------------------------------------------------------------
# Role guards
# ---------------------------------------------------------------------------


async def require_customer(user: User = Depends(get_current_user)) -> User:
    """Admin accounts may not act as customers."""
    if user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. Admin users cannot access user APIs.",
        )
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user


# ---------------------------------------------------------------------------
# Rate catalog
# ---------------------------------------------------------------------------


def get_rate_cache(request: Request) -> RateCatalogCache:
    """Return the RateCatalogCache owned by the running application."""
    return request.app.state.rate_cache
