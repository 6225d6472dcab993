"""Bank statement parsers."""
from .base_parser import (
    BANK_FORMAT_LABELS,
    BankFormat,
    BaseStatementParser,
    CanonicalTransaction,
    FileKind,
    ParseResult,
    ParseWarning,
    WarningCode,
)
from .camt_parser import CAMT053Parser
from .csv_parser import CSVStatementParser
from .detector import detect_bank_format, detect_header, resolve_format
from .dialects import DIALECTS, get_dialect
from .errors import MalformedEntryError, MissingDateError, RowTooShortError, StatementParseError
from .file_kind import detect_file_kind
from .mt940_parser import MT940Parser

__all__ = [
    "BANK_FORMAT_LABELS",
    "BankFormat",
    "BaseStatementParser",
    "CanonicalTransaction",
    "FileKind",
    "ParseResult",
    "ParseWarning",
    "WarningCode",
    "CAMT053Parser",
    "CSVStatementParser",
    "MT940Parser",
    "DIALECTS",
    "get_dialect",
    "detect_bank_format",
    "detect_header",
    "resolve_format",
    "detect_file_kind",
    "StatementParseError",
    "RowTooShortError",
    "MissingDateError",
    "MalformedEntryError",
]
