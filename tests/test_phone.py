import pytest

from phone_order.phone import clean_phone, digits_only, validate_phone


@pytest.mark.parametrize("phone", [
    "555-1234",
    "+1 (732) 555-0101",
    "  12345  ",
    "(555)123-4567",
    "+44 20 7946 0958",
])
def test_validate_phone_accepts_typed_formats(phone):
    assert validate_phone(phone) is True


@pytest.mark.parametrize("phone", [
    "",
    "   ",
    "1234",                       # too short
    "123456789012345678901",      # 21 characters
    "555-CALL-NOW",
    "555.123.4567",
    "555-1234 ext 2",
    "555\u00a01234",             # no-break space
    "555\u30001234",             # ideographic space
    None,
])
def test_validate_phone_rejects(phone):
    assert validate_phone(phone) is False


def test_length_is_checked_after_trimming():
    # 20 characters of content surrounded by whitespace
    assert validate_phone("   " + "1" * 20 + "   ") is True
    assert validate_phone("  1234  ") is False


def test_clean_phone_trims_only():
    assert clean_phone("  (555) 123-4567 ") == "(555) 123-4567"
    assert clean_phone(None) == ""


def test_digits_only():
    assert digits_only("+1 (555) 123-4567") == "15551234567"
    assert digits_only("") == ""


def test_unicode_spaces_are_not_trimmed():
    assert clean_phone("\u00a0555-1234\u00a0") == "\u00a0555-1234\u00a0"
    assert validate_phone("\u00a0555-1234") is False
