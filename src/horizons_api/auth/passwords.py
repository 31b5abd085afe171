from __future__ import annotations

import hashlib
import secrets


def hash_password(password: str, *, iterations: int) -> str:
    """
    PBKDF2-SHA256; stored as `iterations$salt$hash` so the cost can change later.
    """

    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), iterations)
    return f"{iterations}${salt}${digest.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    try:
        iterations_raw, salt, stored = password_hash.split("$")
        iterations = int(iterations_raw)
    except (ValueError, AttributeError):
        return False
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), iterations)
    return secrets.compare_digest(digest.hex(), stored)
