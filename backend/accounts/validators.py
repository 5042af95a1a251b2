"""
Field validators for registration data.

South African ID numbers are 13 digits whose last digit is a Luhn check
digit: starting from the left, every second digit (index 1, 3, ...) is
doubled, 9 is subtracted from doubles above 9, and the sum of all
digits must be divisible by 10.
"""

from __future__ import annotations

import re

PHONE_PATTERN = re.compile(r"^0\d{9}$")
SA_ID_LENGTH = 13


def is_valid_sa_id(value: str) -> bool:
    if not value or len(value) != SA_ID_LENGTH or not value.isdigit():
        return False

    total = 0
    for index, char in enumerate(value):
        digit = int(char)
        if index % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


def is_valid_phone(value: str) -> bool:
    """South African number in national format: ``0`` followed by nine digits."""
    return bool(value) and PHONE_PATTERN.match(value) is not None
