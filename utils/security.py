from __future__ import annotations

from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

_HASH_PREFIXES = ("pbkdf2:", "scrypt:")


def hash_password(plain: str, method: str = "pbkdf2:sha256", salt_length: int = 16) -> str:
    return generate_password_hash((plain or "").strip(), method=method, salt_length=salt_length)


def is_hashed(value: Optional[str]) -> bool:
    return bool(value) and str(value).startswith(_HASH_PREFIXES)


def verify_password(stored_hash: str, candidate: str) -> bool:
    """Check ``candidate`` against a werkzeug hash.

    Only hashed values are accepted; a plain-text stored value never matches.
    """
    if not is_hashed(stored_hash):
        return False
    return check_password_hash(stored_hash, (candidate or "").strip())
