"""
Administrator authentication.

Provisions the admin credentials store and ties credential checks to the
session store. Works with any DataAccessObject over an admin users entity.
"""

import logging
import uuid
from typing import Optional

from adminpanel.core.config import Settings, settings as default_settings
from adminpanel.core.logging_config import mask_token
from adminpanel.core.security import get_password_hash, verify_password
from adminpanel.database.interfaces import DataAccessObject
from adminpanel.services.session_store import SessionStore

logger = logging.getLogger(__name__)


async def ensure_admin_user(
    dao: DataAccessObject,
    settings: Optional[Settings] = None,
) -> bool:
    """
    Provision the admin users store and its bootstrap administrator.

    Does nothing when authentication is disabled. Otherwise creates the
    backing table/collection if missing and saves the configured admin
    (with a hashed password) unless that username already exists.

    Args:
        dao: DAO over the admin users entity
        settings: Panel settings (defaults to the global settings)

    Returns:
        True if a new administrator was created
    """
    settings = settings or default_settings
    if not settings.set_authentication:
        return False

    await dao.create_table()

    if await dao.find(settings.admin_username) is not None:
        return False

    await dao.save({
        "username": settings.admin_username,
        "password": get_password_hash(settings.admin_password),
    })
    logger.info("Bootstrap administrator created", extra={"username": settings.admin_username})
    return True


async def authenticate(dao: DataAccessObject, username: str, password: str) -> bool:
    """
    Check a username/password pair against the stored hash.

    Returns:
        True if the user exists and the password matches
    """
    credentials = await dao.find(username)
    if credentials is None:
        return False
    return verify_password(password, credentials.password)


async def login(
    dao: DataAccessObject,
    store: SessionStore,
    username: str,
    password: str,
    max_age: Optional[int] = None,
) -> Optional[str]:
    """
    Authenticate and open a session.

    Args:
        dao: DAO over the admin users entity
        store: Session store to register the session in
        username: Submitted username
        password: Submitted plain text password
        max_age: Session lifetime in seconds (defaults to settings)

    Returns:
        The new session token, or None if authentication failed
    """
    if not await authenticate(dao, username, password):
        logger.warning("Login failed", extra={"username": username})
        return None

    token = str(uuid.uuid4())
    if max_age is None:
        max_age = default_settings.session_max_age_seconds
    store.set(token, username, max_age)
    logger.info("Login succeeded", extra={"username": username, "session": mask_token(token)})
    return token


def logout(store: SessionStore, token: Optional[str]) -> None:
    """End a session; unknown or missing tokens are ignored."""
    if token:
        store.remove(token)
