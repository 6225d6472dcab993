"""
Bank Statement Ingestion Service

Entry point for turning an uploaded statement file into canonical
transactions:
- Decode bytes (UTF-8, then Windows-1252, then Latin-1)
- Classify the file kind (CAMT.053, MT940, CSV)
- Dispatch to the matching parser
- Emit structured import events

Nothing is persisted here; callers decide what to do with the result.
"""
import logging
from typing import Dict, Optional, Tuple

from bankimport.core.config import Settings, get_settings
from bankimport.services.bank.parsers import (
    BankFormat,
    BaseStatementParser,
    CAMT053Parser,
    CSVStatementParser,
    FileKind,
    MT940Parser,
    ParseResult,
    ParseWarning,
    WarningCode,
    detect_file_kind,
)
from bankimport.services.logging import ImportLogger, LogEntityType, import_logger

logger = logging.getLogger(__name__)

# Tried in order; latin-1 accepts any byte sequence
ENCODINGS = ("utf-8-sig", "cp1252", "latin-1")


def decode_statement(file_bytes: bytes) -> Tuple[str, str]:
    """Decode raw file bytes, returning the text and the encoding that worked."""
    for encoding in ENCODINGS:
        try:
            return file_bytes.decode(encoding), encoding
        except UnicodeDecodeError:
            continue
    # Unreachable in practice, latin-1 never fails
    return file_bytes.decode("latin-1", errors="replace"), "latin-1"


class BankStatementIngestionService:
    """
    Parses statement files of any supported kind.

    The service never raises for file content: every problem ends up in
    ParseResult.warnings.
    """

    def __init__(self, settings: Optional[Settings] = None, event_logger: Optional[ImportLogger] = None):
        self.settings = settings or get_settings()
        self.events = event_logger or import_logger

    def parse_file(
        self,
        file_bytes: bytes,
        filename: Optional[str] = None,
        format_hint: Optional[BankFormat] = None,
    ) -> ParseResult:
        """Decode and parse a statement file."""
        text, encoding = decode_statement(file_bytes)
        return self._parse(text, filename, format_hint, file_size=len(file_bytes), encoding=encoding)

    def parse_text(
        self,
        text: str,
        filename: Optional[str] = None,
        format_hint: Optional[BankFormat] = None,
    ) -> ParseResult:
        """Parse statement text the caller has already decoded."""
        return self._parse(text, filename, format_hint, file_size=len(text), encoding=None)

    def _build_parser(self, file_kind: FileKind, format_hint: Optional[BankFormat]) -> BaseStatementParser:
        parsers: Dict[FileKind, BaseStatementParser] = {
            FileKind.CAMT053: CAMT053Parser(),
            FileKind.MT940: MT940Parser(),
            FileKind.CSV: CSVStatementParser(
                format_hint=format_hint,
                max_scan_lines=self.settings.HEADER_SCAN_LINES,
            ),
        }
        return parsers[file_kind]

    def _parse(
        self,
        text: str,
        filename: Optional[str],
        format_hint: Optional[BankFormat],
        file_size: int,
        encoding: Optional[str],
    ) -> ParseResult:
        text = text.lstrip("\ufeff")
        file_kind = detect_file_kind(text, filename)
        self.events.statement_classified(filename, file_kind.value, file_size, encoding)

        parser = self._build_parser(file_kind, format_hint)
        try:
            result = parser.parse_text(text)
        except Exception as e:
            # Parsers handle malformed rows themselves; this is a last resort
            logger.exception(f"Parser {parser.get_format_name()} failed: {e}")
            self.events.statement_failed(filename, str(e))
            result = ParseResult(file_kind=file_kind)
            result.warnings.append(ParseWarning(
                code=WarningCode.FILE_UNREADABLE,
                message=f"Datei konnte nicht gelesen werden: {e}",
            ))
            return result

        self._log_skipped(filename, result)
        self.events.statement_parsed(
            filename,
            file_kind.value,
            result.bank_format.value if result.bank_format else None,
            transaction_count=len(result.transactions),
            skipped_count=result.skipped_count,
            warning_count=len(result.warnings),
        )
        return result

    def _log_skipped(self, filename: Optional[str], result: ParseResult):
        """One event per skipped row, capped by MAX_LOGGED_ROW_WARNINGS."""
        entity_type = LogEntityType.ENTRY if result.file_kind == FileKind.CAMT053 else LogEntityType.ROW
        skipped = [warning for warning in result.warnings if warning.skipped]
        for warning in skipped[: self.settings.MAX_LOGGED_ROW_WARNINGS]:
            self.events.row_skipped(filename, warning.code.value, warning.message, warning.line, entity_type)
        if len(skipped) > self.settings.MAX_LOGGED_ROW_WARNINGS:
            logger.info(
                "%d further skipped rows in %s not logged",
                len(skipped) - self.settings.MAX_LOGGED_ROW_WARNINGS,
                filename,
            )
