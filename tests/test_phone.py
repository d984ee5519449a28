from __future__ import annotations

import pytest

from sms_gateway.phone import format_phone_number, is_valid_phone_number


@pytest.mark.parametrize(
    "phone",
    [
        "5551234567",
        "+15551234567",
        "(555) 123-4567",
        "+27 12 345 6789",
        "1-555-123-4567",
    ],
)
def test_valid_phone_numbers(phone: str) -> None:
    assert is_valid_phone_number(phone)


@pytest.mark.parametrize(
    "phone",
    [
        "abc",
        "",
        "12345",
        "555.123.4567",
        "+1555123456x",
        "٥٥٥١٢٣٤٥٦٧",
        "５５５1234567",
    ],
)
def test_invalid_phone_numbers(phone: str) -> None:
    assert not is_valid_phone_number(phone)


def test_format_ten_digits_gets_us_country_code() -> None:
    assert format_phone_number("5551234567") == "+15551234567"


def test_format_eleven_digits_starting_with_one() -> None:
    assert format_phone_number("15551234567") == "+15551234567"


def test_format_already_prefixed_is_unchanged() -> None:
    assert format_phone_number("+15551234567") == "+15551234567"


def test_format_strips_punctuation_and_spaces() -> None:
    assert format_phone_number("(555) 123-4567") == "+15551234567"
    assert format_phone_number("+27 12 345 6789") == "+27123456789"


def test_format_other_lengths_just_get_plus() -> None:
    # 12 digits, no leading "+": treated as already carrying a country code
    assert format_phone_number("277123456789") == "+277123456789"
    # 11 digits not starting with 1
    assert format_phone_number("44123456789") == "+44123456789"


@pytest.mark.parametrize("phone", ["5551234567", "1 (555) 123-4567", "+44 20 7946 0958"])
def test_format_is_idempotent(phone: str) -> None:
    once = format_phone_number(phone)
    assert is_valid_phone_number(once)
    assert format_phone_number(once) == once
