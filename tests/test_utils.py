"""Tests for amount and rate parsing used by the command line."""

from __future__ import annotations

import pytest

from offset_calc.utils import parse_amount, parse_rate


class TestParseAmount:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("650k", 650_000.0),
            ("1.2m", 1_200_000.0),
            ("$1,000", 1_000.0),
            (" 7192.14 ", 7_192.14),
        ],
    )
    def test_suffixes_and_separators(self, text, expected):
        assert parse_amount(text) == pytest.approx(expected)

    def test_garbage(self):
        with pytest.raises(ValueError, match="Invalid amount"):
            parse_amount("lots")


class TestParseRate:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("6.5", 0.065),
            ("6.5%", 0.065),
            ("0.065", 0.065),
            ("8.201", 0.08201),
            ("1", 0.01),
        ],
    )
    def test_fraction_or_percent(self, text, expected):
        assert parse_rate(text) == pytest.approx(expected)

    @pytest.mark.parametrize("text, expected", [("0.5%", 0.005), ("0.08201%", 0.0008201), ("0%", 0.0)])
    def test_percent_sign_always_divides(self, text, expected):
        assert parse_rate(text) == pytest.approx(expected)

    def test_garbage(self):
        with pytest.raises(ValueError, match="Invalid rate"):
            parse_rate("abc%")
