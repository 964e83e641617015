"""
Phone number validation for guest order intake.

Phone numbers are accepted in the loose format shoppers actually type
("555-1234", "+1 (732) 555-0101") and stored exactly as entered after
trimming. No further normalization is applied to the stored value; only the
guest email/username builder reduces a phone to its digits.
"""

import re

PHONE_MIN_LENGTH = 5
PHONE_MAX_LENGTH = 20

# Digits, plus sign, ASCII whitespace, parentheses and hyphens
PHONE_PATTERN = re.compile(r"^[0-9+\s()-]{5,20}$", re.ASCII)

# Characters trimmed from both ends; Unicode spaces are not stripped
TRIM_CHARS = " \t\n\r\0\x0b"

_NON_DIGITS = re.compile(r"[^0-9]")


def clean_phone(raw: str) -> str:
    """Trim surrounding ASCII whitespace; None becomes an empty string."""
    return (raw or "").strip(TRIM_CHARS)


def validate_phone(raw: str) -> bool:
    """
    Return True if ``raw`` is an acceptable phone number.

    The string is trimmed first, then must be 5-20 characters long and
    contain only digits, ``+``, whitespace, parentheses and hyphens.
    """
    phone = clean_phone(raw)
    if not phone:
        return False

    if not PHONE_MIN_LENGTH <= len(phone) <= PHONE_MAX_LENGTH:
        return False

    return PHONE_PATTERN.fullmatch(phone) is not None


def digits_only(phone: str) -> str:
    """Strip every non-digit character: "(555) 123-4567" -> "5551234567"."""
    return _NON_DIGITS.sub("", phone or "")
