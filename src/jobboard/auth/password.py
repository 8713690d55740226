"""Password hashing utilities.

Uses bcrypt for password hashing. bcrypt handles salting itself and
produces hashes starting with "$2b$". Passwords are truncated to 72 bytes
(bcrypt's limit).
"""

import bcrypt


def hash_password(password: str) -> str:
    """Hash a password with bcrypt (work factor 12, ~100ms per hash)."""
    pw_bytes = password.encode("utf-8")[:72]
    salt = bcrypt.gensalt(rounds=12)
    return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its bcrypt hash."""
    try:
        pw_bytes = password.encode("utf-8")[:72]
        return bcrypt.checkpw(pw_bytes, password_hash.encode("utf-8"))
    except (ValueError, TypeError):
        return False
