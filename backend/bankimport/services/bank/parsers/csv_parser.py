"""
CSV Parser - Delimited bank exports

Detects the bank dialect from the header row and maps every data row
through that dialect's column table. Rows that cannot be mapped are
skipped and reported; they never abort the import.
"""
import logging
from typing import Optional, Set

from .base_parser import (
    BankFormat,
    BaseStatementParser,
    FileKind,
    ParseResult,
    ParseWarning,
    WarningCode,
)
from .detector import DEFAULT_HEADER_SCAN_LINES, detect_header, resolve_format
from .dialects import get_dialect
from .errors import MissingDateError, RowTooShortError, StatementParseError
from .file_kind import detect_file_kind
from .tokenizer import tokenize

logger = logging.getLogger(__name__)


class CSVStatementParser(BaseStatementParser):
    """
    Parser for delimited bank exports in any of the supported dialects.

    The detected dialect always wins; format_hint is only used when the
    header matches no known dialect.
    """

    def __init__(
        self,
        format_hint: Optional[BankFormat] = None,
        max_scan_lines: int = DEFAULT_HEADER_SCAN_LINES,
    ):
        self.format_hint = format_hint
        self.max_scan_lines = max_scan_lines

    def can_parse(self, content: str, filename: Optional[str] = None) -> bool:
        return detect_file_kind(content, filename) == FileKind.CSV

    def get_format_name(self) -> str:
        return "CSV"

    def parse_text(self, content: str) -> ParseResult:
        """Parse delimited text into transactions, one per data row."""
        text = content.lstrip("\ufeff").replace("\r\n", "\n").replace("\r", "\n")

        detected, header_index = detect_header(text, self.max_scan_lines)
        bank_format = resolve_format(detected, self.format_hint)
        dialect = get_dialect(bank_format)

        if detected == BankFormat.UNRECOGNIZED:
            logger.info("No dialect matched the header, using %s", bank_format.value)

        lines = text.split("\n")
        header_line = lines[header_index].strip() if header_index < len(lines) else ""
        delimiter = dialect.delimiter or (";" if ";" in header_line else ",")

        result = ParseResult(file_kind=FileKind.CSV, bank_format=bank_format)
        account_ibans: Set[str] = set()

        for index in range(header_index + 1, len(lines)):
            line = lines[index].strip()
            if not line:
                continue

            line_number = index + 1
            cols = tokenize(line, delimiter)

            try:
                transaction, row_warnings = dialect.map_row(cols, delimiter)
            except StatementParseError as e:
                if isinstance(e, RowTooShortError):
                    code = WarningCode.ROW_TOO_SHORT
                elif isinstance(e, MissingDateError):
                    code = WarningCode.DATE_MISSING
                else:
                    code = WarningCode.ROW_FAILED
                logger.warning("Skipping line %d (%s): %s", line_number, bank_format.value, e)
                result.warnings.append(ParseWarning(code=code, message=str(e), line=line_number, raw=line))
                continue
            except Exception as e:
                logger.warning("Failed to parse line %d (%s): %s", line_number, bank_format.value, e)
                result.warnings.append(ParseWarning(
                    code=WarningCode.ROW_FAILED,
                    message=str(e),
                    line=line_number,
                    raw=line,
                ))
                continue

            for warning in row_warnings:
                warning.line = line_number
                result.warnings.append(warning)
            result.transactions.append(transaction)

            account_iban = dialect.account_iban(cols)
            if account_iban:
                account_ibans.add(account_iban)

        # Only trust the account column when every row agrees
        result.account_iban = account_ibans.pop() if len(account_ibans) == 1 else None
        return result
