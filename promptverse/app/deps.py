# promptverse/app/deps.py (singletons exposed as FastAPI dependencies)

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from supabase import Client, create_client

from promptverse.app.config import settings
from promptverse.app.context import AdminSession, AppContext
from promptverse.app.domain.errors import NotAuthenticatedError, PinNotVerifiedError
from promptverse.services.errors import IdentityProviderError

_client: Client | None = None
_context: AppContext | None = None


def get_supabase() -> Client:
    global _client
    if _client is None:
        if settings.SUPABASE_URL is None or not settings.SUPABASE_SERVICE_ROLE_KEY:
            raise IdentityProviderError("Supabase is not configured")
        _client = create_client(str(settings.SUPABASE_URL),
                                settings.SUPABASE_SERVICE_ROLE_KEY)
    return _client


def get_context() -> AppContext:
    global _context
    if _context is None:
        _context = AppContext(settings)
    return _context


async def get_admin_session(
    x_admin_session: Optional[str] = Header(default=None, alias="X-Admin-Session"),
    ctx: AppContext = Depends(get_context),
) -> AdminSession:
    """Identity check passed; the PIN may still be pending."""
    try:
        return ctx.session(x_admin_session)
    except NotAuthenticatedError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc))


async def require_admin(
    x_admin_session: Optional[str] = Header(default=None, alias="X-Admin-Session"),
    ctx: AppContext = Depends(get_context),
) -> AdminSession:
    """Both gates passed: identity and PIN."""
    try:
        return ctx.admin_session(x_admin_session)
    except NotAuthenticatedError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc))
    except PinNotVerifiedError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
