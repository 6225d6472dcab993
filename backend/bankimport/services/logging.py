"""
Structured Logging Service

Provides import-aware structured logging for key events:
- Statement file classified / parsed / rejected
- Row or entry skipped

Each log entry includes:
- entity_type (statement_file, row, entry, system)
- filename (if applicable)
- severity (INFO/WARN/ERROR)
"""
import json
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from bankimport.core.config import settings


class LogSeverity(str, Enum):
    """Log severity levels."""
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"


class LogEntityType(str, Enum):
    """Entity types for structured logging."""
    STATEMENT_FILE = "statement_file"
    ROW = "row"
    ENTRY = "entry"
    SYSTEM = "system"


class ImportLogger:
    """
    Structured logging service for statement import events.
    
    Logs are emitted in JSON format, one object per event, suitable for
    application logs and later metrics integration.
    """
    
    def __init__(self, logger_name: str = "bankimport.events", level: str = "INFO"):
        self.logger = logging.getLogger(logger_name)
        self._ensure_handler(level)
    
    def _ensure_handler(self, level: str):
        """Ensure logger has a proper handler configured."""
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter('%(message)s'))
            self.logger.addHandler(handler)
            self.logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    
    def _serialize(self, value: Any) -> Any:
        """Serialize enum values for JSON."""
        if isinstance(value, Enum):
            return value.value
        return value
    
    def _create_log_entry(
        self,
        event: str,
        severity: LogSeverity,
        entity_type: LogEntityType,
        filename: Optional[str] = None,
        message: Optional[str] = None,
        **extra
    ) -> dict:
        """Create a structured log entry."""
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event": event,
            "severity": severity.value,
            "entity_type": entity_type.value,
        }
        
        if filename:
            entry["filename"] = filename
        if message:
            entry["message"] = message
        
        for key, value in extra.items():
            entry[key] = self._serialize(value)
        
        return entry
    
    def _log(self, entry: dict, severity: LogSeverity):
        """Emit the log entry at the appropriate level."""
        log_str = json.dumps(entry)
        if severity == LogSeverity.ERROR:
            self.logger.error(log_str)
        elif severity == LogSeverity.WARN:
            self.logger.warning(log_str)
        else:
            self.logger.info(log_str)
    
    # Statement events
    def statement_classified(
        self,
        filename: Optional[str],
        file_kind: str,
        file_size: int,
        encoding: Optional[str] = None,
    ):
        """Log file-kind classification."""
        entry = self._create_log_entry(
            event="statement.classified",
            severity=LogSeverity.INFO,
            entity_type=LogEntityType.STATEMENT_FILE,
            filename=filename,
            message=f"Statement classified as {file_kind}",
            file_kind=file_kind,
            file_size=file_size,
            encoding=encoding,
        )
        self._log(entry, LogSeverity.INFO)
    
    def statement_parsed(
        self,
        filename: Optional[str],
        file_kind: str,
        bank_format: Optional[str],
        transaction_count: int,
        skipped_count: int,
        warning_count: int,
    ):
        """Log the outcome of a parse. Skipped rows raise the severity to WARN."""
        severity = LogSeverity.WARN if skipped_count else LogSeverity.INFO
        entry = self._create_log_entry(
            event="statement.parsed",
            severity=severity,
            entity_type=LogEntityType.STATEMENT_FILE,
            filename=filename,
            message=f"Parsed {transaction_count} transactions" + (f", skipped {skipped_count}" if skipped_count else ""),
            file_kind=file_kind,
            bank_format=bank_format,
            transaction_count=transaction_count,
            skipped_count=skipped_count,
            warning_count=warning_count,
        )
        self._log(entry, severity)
    
    def row_skipped(
        self,
        filename: Optional[str],
        code: str,
        reason: str,
        line: Optional[int] = None,
        entity_type: LogEntityType = LogEntityType.ROW,
    ):
        """Log a row or CAMT entry that produced no transaction."""
        entry = self._create_log_entry(
            event="statement.row_skipped",
            severity=LogSeverity.WARN,
            entity_type=entity_type,
            filename=filename,
            message=f"Skipped line {line}: {reason}" if line else f"Skipped: {reason}",
            code=code,
            line=line,
        )
        self._log(entry, LogSeverity.WARN)
    
    def statement_failed(
        self,
        filename: Optional[str],
        error: str,
    ):
        """Log a statement that could not be processed at all."""
        entry = self._create_log_entry(
            event="statement.failed",
            severity=LogSeverity.ERROR,
            entity_type=LogEntityType.STATEMENT_FILE,
            filename=filename,
            message=f"Statement processing failed: {error}",
            error=error,
        )
        self._log(entry, LogSeverity.ERROR)


# Global logger instance
import_logger = ImportLogger(level=settings.LOG_LEVEL)
