"""
Locale decoders for German bank exports.

Amounts and dates are decoded leniently: a token that cannot be understood
becomes 0 (amounts) or is passed through verbatim (dates). Callers that need
to tell a failed decode from a real value use the try_* variants.
"""
import re
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional

# Two-digit years above the pivot belong to the 1900s, the rest to the 2000s
TWO_DIGIT_YEAR_PIVOT = 50

_DECIMAL_PREFIX = re.compile(r"\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+))")
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_SINGLE_DECIMAL_COMMA = re.compile(r"^[^,]*,\d{1,2}(?!\d)[^,]*$")


def expand_two_digit_year(year: int) -> int:
    """Map a YY year onto a full year using the 50-year pivot."""
    return 1900 + year if year > TWO_DIGIT_YEAR_PIVOT else 2000 + year


def parse_german_date(value: Optional[str]) -> str:
    """
    Parse German date format DD.MM.YYYY or DD.MM.YY to YYYY-MM-DD.

    Tokens that already contain a dash are treated as ISO and returned
    unchanged. Anything else that does not look like a German date is
    returned as-is.
    """
    if not value:
        return ""

    value = value.strip()

    # Already in ISO format
    if "-" in value:
        return value

    parts = value.split(".")
    if len(parts) != 3 or not all(part.isdigit() for part in parts):
        return value

    day, month, year = parts
    if len(year) == 2:
        year = str(expand_two_digit_year(int(year)))

    return f"{year}-{month.zfill(2)}-{day.zfill(2)}"


def is_iso_date(value: Optional[str]) -> bool:
    """Check that a decoded date is a real YYYY-MM-DD calendar date."""
    if not value or not _ISO_DATE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def _parse_decimal_prefix(value: str) -> Optional[Decimal]:
    """Read the leading number of a dot-decimal string, ignoring any trailing text."""
    match = _DECIMAL_PREFIX.match(value)
    if not match:
        return None
    try:
        number = Decimal(match.group(1))
    except InvalidOperation:
        return None
    return number if number.is_finite() else None


def try_parse_german_number(value: Optional[str]) -> Optional[Decimal]:
    """Parse German number format (1.234,56 -> 1234.56), None if unparsable."""
    if not value:
        return None
    # Remove thousand separators and replace comma with dot
    cleaned = value.replace(".", "").replace(",", ".", 1)
    return _parse_decimal_prefix(cleaned)


def parse_german_number(value: Optional[str]) -> Decimal:
    """Parse German number format, 0 for empty or unparsable input."""
    number = try_parse_german_number(value)
    return number if number is not None else Decimal("0")


def try_parse_flexible_number(value: Optional[str]) -> Optional[Decimal]:
    """
    Parse an amount that may use either dot or comma as decimal separator.

    - both present: the rightmost one is the decimal separator
    - a single comma followed by one or two digits: decimal comma (12,50)
    - otherwise commas are thousands separators (1,234)
    """
    if not value:
        return None

    value = value.strip()

    if "," in value and "." in value:
        if value.rfind(",") > value.rfind("."):
            # European: 1.234,56
            value = value.replace(".", "").replace(",", ".")
        else:
            # US: 1,234.56
            value = value.replace(",", "")
    elif "," in value:
        if _SINGLE_DECIMAL_COMMA.match(value):
            value = value.replace(",", ".")
        else:
            value = value.replace(",", "")

    return _parse_decimal_prefix(value)


def parse_flexible_number(value: Optional[str]) -> Decimal:
    """Lenient variant of try_parse_flexible_number, 0 on failure."""
    number = try_parse_flexible_number(value)
    return number if number is not None else Decimal("0")
