from __future__ import annotations

import pytest

from accounts.validators import is_valid_phone, is_valid_sa_id


class TestSouthAfricanId:

    @pytest.mark.parametrize("value", ["8001015009087", "9202204720083", "7506125800085"])
    def test_valid_checksums(self, value):
        assert is_valid_sa_id(value)

    @pytest.mark.parametrize(
        "value",
        [
            "8001015009088",   # wrong check digit
            "800101500908",    # too short
            "80010150090871",  # too long
            "80010150090A7",   # not numeric
            "",
            None,
        ],
    )
    def test_invalid(self, value):
        assert not is_valid_sa_id(value)


class TestPhone:

    @pytest.mark.parametrize("value", ["0821234567", "0110001111"])
    def test_valid(self, value):
        assert is_valid_phone(value)

    @pytest.mark.parametrize("value", ["821234567", "+27821234567", "08212345678", "08212a4567", ""])
    def test_invalid(self, value):
        assert not is_valid_phone(value)
