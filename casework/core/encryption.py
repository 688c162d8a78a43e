"""Field-level encryption for PII at rest (Fernet, keyed by DATA_ENCRYPTION_KEY)."""

from functools import lru_cache

from cryptography.fernet import Fernet, InvalidToken

from casework.core.config import settings


# Marks stored ciphertext; values already carrying it are never re-encrypted
CIPHERTEXT_PREFIX = "enc:"


@lru_cache(maxsize=1)
def _fernet() -> Fernet:
    key = settings.DATA_ENCRYPTION_KEY
    if not key:
        raise RuntimeError(
            "DATA_ENCRYPTION_KEY is not set. Generate one with "
            "cryptography.fernet.Fernet.generate_key()."
        )
    return Fernet(key.encode())


def is_encrypted(value: str) -> bool:
    return value.startswith(CIPHERTEXT_PREFIX)


def encrypt_value(plaintext: str) -> str:
    """Encrypt a string. Empty and already-encrypted values pass through."""
    if not plaintext or is_encrypted(plaintext):
        return plaintext
    return CIPHERTEXT_PREFIX + _fernet().encrypt(plaintext.encode()).decode()


def decrypt_value(stored: str) -> str:
    """
    Decrypt a value written by encrypt_value.

    Raises:
        ValueError: Value is not ciphertext, or was encrypted with another key
    """
    if not stored:
        return stored
    if not is_encrypted(stored):
        raise ValueError("Encrypted data is missing prefix")
    try:
        return _fernet().decrypt(stored[len(CIPHERTEXT_PREFIX):].encode()).decode()
    except InvalidToken as exc:
        raise ValueError("Invalid or corrupted encrypted data") from exc
