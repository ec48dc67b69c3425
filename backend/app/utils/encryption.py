"""
Symmetric encryption for credentials stored on business settings.

Secrets are Fernet tokens keyed by ENCRYPTION_KEY, so rotating the key makes
previously stored secrets unreadable until they are saved again.
"""
from functools import lru_cache

from cryptography.fernet import Fernet, InvalidToken

from app.config import settings

__all__ = ["InvalidToken", "encrypt_secret", "decrypt_secret"]


@lru_cache(maxsize=4)
def _fernet_for(key: str) -> Fernet:
    return Fernet(key.encode("ascii"))


def _current_fernet() -> Fernet:
    key = (settings.ENCRYPTION_KEY or "").strip()
    if not key:
        raise ValueError("ENCRYPTION_KEY must be set to store or read integration secrets")
    return _fernet_for(key)


def encrypt_secret(secret: str) -> str:
    return _current_fernet().encrypt(secret.encode("utf-8")).decode("ascii")


def decrypt_secret(token: str) -> str:
    """
    Recover a secret saved with encrypt_secret.

    Raises InvalidToken when the value was written under another key or is
    not a Fernet token at all.
    """
    return _current_fernet().decrypt(token.encode("utf-8")).decode("utf-8")
