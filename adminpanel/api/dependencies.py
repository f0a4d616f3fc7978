"""
FastAPI dependency functions.

Provides the session gate for privileged admin routes.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from adminpanel.core.config import settings
from adminpanel.services.session_store import SessionStore, session_store


def get_session_store() -> SessionStore:
    """
    Dependency returning the process-wide session store.

    Override in tests with ``app.dependency_overrides[get_session_store]``.
    """
    return session_store


async def get_current_admin(
    request: Request,
    store: Annotated[SessionStore, Depends(get_session_store)],
) -> str:
    """
    Dependency resolving the session cookie to the logged-in username.

    Args:
        request: Incoming request carrying the session cookie
        store: Session store to validate the token against

    Returns:
        Username bound to the session

    Raises:
        HTTPException 401: If the cookie is missing, unknown or expired

    Example:
        @router.get("/admin/users")
        async def list_users(admin: CurrentAdmin):
            ...
    """
    token = request.cookies.get(settings.session_cookie_name)
    username = store.get(token) if token else None

    if username is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return username


CurrentAdmin = Annotated[str, Depends(get_current_admin)]
