"""
Password hashing for the admin credentials store.

Uses bcrypt directly; hashes are stored as UTF-8 strings.
"""

import bcrypt


# bcrypt only considers the first 72 bytes of a password
_BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    password_bytes = password.encode('utf-8')
    if len(password_bytes) > _BCRYPT_MAX_BYTES:
        password_bytes = password_bytes[:_BCRYPT_MAX_BYTES]
    return password_bytes


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a hashed password.

    Args:
        plain_password: The plain text password to verify
        hashed_password: The hashed password to compare against

    Returns:
        True if password matches, False otherwise (including when the
        stored value is not a bcrypt hash)
    """
    if isinstance(hashed_password, str):
        hashed_bytes = hashed_password.encode('utf-8')
    else:
        hashed_bytes = hashed_password

    try:
        return bcrypt.checkpw(_password_bytes(plain_password), hashed_bytes)
    except ValueError:
        # Stored value is not a valid bcrypt hash
        return False


def get_password_hash(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password to hash

    Returns:
        Hashed password string
    """
    salt = bcrypt.gensalt(rounds=12)
    hashed = bcrypt.hashpw(_password_bytes(password), salt)
    return hashed.decode('utf-8')
