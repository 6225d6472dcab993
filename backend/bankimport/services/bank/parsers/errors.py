"""Exceptions raised inside the row and entry loops of the statement parsers."""
from typing import Optional


class StatementParseError(ValueError):
    """A single row or entry could not be turned into a transaction."""

    def __init__(self, message: str, line: Optional[int] = None, raw: Optional[str] = None):
        super().__init__(message)
        self.line = line
        self.raw = raw


class RowTooShortError(StatementParseError):
    """Delimited row has fewer columns than its dialect needs."""

    def __init__(self, expected: int, actual: int, line: Optional[int] = None, raw: Optional[str] = None):
        super().__init__(
            f"Zeile hat {actual} Spalten, erwartet mindestens {expected}",
            line=line,
            raw=raw,
        )
        self.expected = expected
        self.actual = actual


class MissingDateError(StatementParseError):
    """Row or entry has no booking date."""


class MalformedEntryError(StatementParseError):
    """CAMT.053 entry lacks a field every transaction needs."""
