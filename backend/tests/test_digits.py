from __future__ import annotations

from text.digits import to_english_digits, to_persian_digits


def test_to_persian_digits():
    assert to_persian_digits(1404) == "۱۴۰۴"
    assert to_persian_digits("court 7") == "court ۷"


def test_to_english_digits():
    assert to_english_digits("۰۹۱۲") == "0912"
    assert to_english_digits("") == ""
