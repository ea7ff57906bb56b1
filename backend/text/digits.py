from __future__ import annotations

PERSIAN_DIGITS = "۰۱۲۳۴۵۶۷۸۹"

_TO_PERSIAN = str.maketrans("0123456789", PERSIAN_DIGITS)
_TO_ENGLISH = str.maketrans(PERSIAN_DIGITS, "0123456789")


def to_persian_digits(value: str | int | float) -> str:
    """
    Replace ASCII digits with Extended Arabic-Indic (Persian) digits.
    """
    return str(value).translate(_TO_PERSIAN)


def to_english_digits(text: str) -> str:
    return (text or "").translate(_TO_ENGLISH)
