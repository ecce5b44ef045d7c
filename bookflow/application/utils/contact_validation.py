from __future__ import annotations

import re

EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
_NON_DIGITS = re.compile(r"\D+")


def normalize_phone(phone: str) -> str | None:
    """
    Reduce a North American phone number to its 10 digits.
    Accepts separators, parentheses and a leading +1/1. Returns None if invalid.
    """
    digits = _NON_DIGITS.sub("", phone or "")
    if len(digits) == 11 and digits.startswith("1"):
        digits = digits[1:]
    if len(digits) != 10:
        return None
    # Area and exchange codes never start with 0 or 1
    if digits[0] in "01" or digits[3] in "01":
        return None
    return digits


def is_valid_email(email: str | None) -> bool:
    if not email:
        return False
    return bool(EMAIL_RE.match(email.strip()))


def is_valid_phone(phone: str | None) -> bool:
    return normalize_phone(phone or "") is not None


def validate_contact_info(name: str | None, email: str | None, phone: str | None) -> dict[str, str]:
    """Return a field -> message map; empty when everything is valid."""
    errors: dict[str, str] = {}
    if not name or not name.strip():
        errors["client_name"] = "Name is required."
    elif len(name.strip()) > 100:
        errors["client_name"] = "Name must be 100 characters or fewer."

    if not email or not email.strip():
        errors["client_email"] = "Email is required."
    elif not is_valid_email(email):
        errors["client_email"] = "Enter a valid email address."

    if not phone or not phone.strip():
        errors["client_phone"] = "Phone number is required."
    elif not is_valid_phone(phone):
        errors["client_phone"] = "Enter a valid 10-digit phone number."

    return errors
