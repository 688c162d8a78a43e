"""Portable column types shared by the models."""

from __future__ import annotations

from sqlalchemy import JSON
from sqlalchemy.ext.mutable import MutableList
from sqlalchemy.types import Text, TypeDecorator

from casework.core.encryption import decrypt_value, encrypt_value


class EncryptedString(TypeDecorator):
    """
    Text column stored Fernet-encrypted.

    Holds full SSNs; only ``ssn_last_four`` is kept in clear. Empty values
    pass through unencrypted.
    """

    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if not value:
            return value
        return encrypt_value(str(value))

    def process_result_value(self, value, dialect):
        if not value:
            return value
        return decrypt_value(value)


# JSON array whose in-place changes (append, remove) mark the row dirty
JSONList = MutableList.as_mutable(JSON)
