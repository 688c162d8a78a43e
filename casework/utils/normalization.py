"""Data normalization utilities for consistent data quality."""

import re
from decimal import Decimal, InvalidOperation
from typing import Optional


ZIP_CODE_PATTERN = re.compile(r"^\d{5}(-\d{4})?$")
SSN_LAST_FOUR_PATTERN = re.compile(r"^\d{4}$")
MIN_PHONE_DIGITS = 10


def blank_to_none(value: Optional[str]) -> Optional[str]:
    """Strip a string and return None when nothing is left."""
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def normalize_email(email: Optional[str]) -> Optional[str]:
    """
    Normalize email to lowercase.

    Returns:
        Lowercased email or None if empty
    """
    if not email:
        return None
    return email.strip().lower() or None


def normalize_name(name: Optional[str]) -> Optional[str]:
    """
    Normalize name by stripping whitespace and collapsing multiple spaces.

    Returns:
        Cleaned name or None if empty
    """
    if not name:
        return None
    return " ".join(name.split()) or None


def validate_phone(phone: Optional[str]) -> Optional[str]:
    """
    Check that a phone number carries at least 10 digits.

    The value is stored as entered (stripped); formatting is left to the UI.

    Raises:
        ValueError: If the phone has fewer than 10 digits
    """
    if phone is None or phone.strip() == "":
        return None
    digits = re.sub(r"\D", "", phone)
    if len(digits) < MIN_PHONE_DIGITS:
        raise ValueError("Please enter a valid phone number")
    return phone.strip()


def split_full_name(full_name: str) -> tuple[str, str]:
    """Split "First Middle Last" into ("First", "Middle Last")."""
    parts = full_name.split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


def parse_currency(value: Optional[str]) -> Optional[Decimal]:
    """
    Parse a free-text currency amount ("$1,250.50") into a Decimal.

    Raises:
        ValueError: If the text is not a non-negative number
    """
    cleaned = blank_to_none(value)
    if cleaned is None:
        return None
    cleaned = cleaned.replace("$", "").replace(",", "").strip()
    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"Invalid amount '{value}'")
    if not amount.is_finite() or amount < 0:
        raise ValueError(f"Invalid amount '{value}'")
    return amount.quantize(Decimal("0.01"))


def extract_ssn_last_four(ssn: Optional[str]) -> Optional[str]:
    """Return the last 4 digits of an SSN, or None when there are fewer than 4."""
    if not ssn:
        return None
    digits = re.sub(r"\D", "", ssn)
    if len(digits) < 4:
        return None
    return digits[-4:]
