from __future__ import annotations

from datetime import date

LOCALES: list[tuple[str, str]] = [
    ("en-US", "English US"),
    ("en-UK", "English UK"),
    ("de-DE", "German"),
]

LOCALE_CODES: set[str] = {code for code, _ in LOCALES}

DEFAULT_LOCALE = LOCALES[0][0]

_EN_MONTHS = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]
_EN_MONTHS_SHORT = [name[:3] for name in _EN_MONTHS]

_DE_MONTHS = [
    "Januar",
    "Februar",
    "März",
    "April",
    "Mai",
    "Juni",
    "Juli",
    "August",
    "September",
    "Oktober",
    "November",
    "Dezember",
]
_DE_MONTHS_SHORT = [
    "Jan.",
    "Feb.",
    "März",
    "Apr.",
    "Mai",
    "Juni",
    "Juli",
    "Aug.",
    "Sept.",
    "Okt.",
    "Nov.",
    "Dez.",
]


def normalize_locale(locale: str | None) -> str:
    value = (locale or "").strip().replace("_", "-")
    for code in LOCALE_CODES:
        if code.lower() == value.lower():
            return code
    return DEFAULT_LOCALE


def format_date(value: date, locale: str | None, style: str = "short") -> str:
    """Format ``value`` as ``short`` (day, abbreviated month, year),
    ``long`` (full month name), ``numeric`` or ``month`` (month and year).
    """
    code = normalize_locale(locale)
    day, month, year = value.day, value.month, value.year
    if style == "numeric":
        if code == "en-US":
            return f"{month}/{day}/{year}"
        if code == "en-UK":
            return f"{day:02d}/{month:02d}/{year}"
        return f"{day}.{month}.{year}"
    if code == "de-DE":
        months = _DE_MONTHS_SHORT if style == "short" else _DE_MONTHS
        if style == "month":
            return f"{months[month - 1]} {year}"
        return f"{day}. {months[month - 1]} {year}"
    months = _EN_MONTHS_SHORT if style == "short" else _EN_MONTHS
    if style == "month":
        return f"{months[month - 1]} {year}"
    if code == "en-UK":
        return f"{day} {months[month - 1]} {year}"
    return f"{months[month - 1]} {day}, {year}"
