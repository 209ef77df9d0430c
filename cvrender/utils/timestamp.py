"""Timestamp formatting utilities."""

from datetime import date, datetime
from typing import Optional

# Month names for the locales templates are written in
MONTH_NAMES = {
    "en": [
        "January", "February", "March", "April", "May", "June",
        "July", "August", "September", "October", "November", "December",
    ],
    "es": [
        "enero", "febrero", "marzo", "abril", "mayo", "junio",
        "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
    ],
}


def now() -> str:
    """Current local time as a compact sortable string (e.g. 20251114_123456)."""
    return datetime.now().strftime("%Y%m%d_%H%M%S")


def now_exact() -> str:
    """Current local time in ISO 8601 with microseconds."""
    return datetime.now().isoformat()


def format_month_year(locale_code: str, when: Optional[date] = None) -> str:
    """
    Format a month and year for the given locale.

    Examples:
        format_month_year("en", date(2025, 11, 1))  # "November 2025"
        format_month_year("es", date(2025, 11, 1))  # "noviembre de 2025"
    """
    when = when or date.today()
    names = MONTH_NAMES.get(locale_code, MONTH_NAMES["en"])
    month = names[when.month - 1]
    if locale_code == "es":
        return f"{month} de {when.year}"
    return f"{month} {when.year}"
