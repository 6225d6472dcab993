"""
Base Parser Interface for Bank Statement Files

Provides the canonical transaction record shared by every statement format
(delimited text, CAMT.053, MT940) together with the warning channel and
result container the parsers return.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import List, Optional


class FileKind(str, Enum):
    """Top-level kind of a statement file."""
    CSV = "csv"
    MT940 = "mt940"
    CAMT053 = "camt053"


class BankFormat(str, Enum):
    """Delimited-text dialect of a bank or payment service provider export."""
    OUTBANK = "outbank"
    C24 = "c24"
    SPARKASSE = "sparkasse"
    DEUTSCHEBANK = "deutschebank"
    COMMERZBANK = "commerzbank"
    N26 = "n26"
    REVOLUT = "revolut"
    ING = "ing"
    DKB = "dkb"
    DKB_LEGACY = "dkb_legacy"
    COMDIRECT = "comdirect"
    VOLKSBANK = "volksbank"
    CONSORSBANK = "consorsbank"
    TARGOBANK = "targobank"
    HYPOVEREINSBANK = "hypovereinsbank"
    POSTBANK = "postbank"
    TOMORROW = "tomorrow"
    KONTIST = "kontist"
    FINOM = "finom"
    GENERAL = "general"
    # Detection result only, never dispatched
    UNRECOGNIZED = "unrecognized"


BANK_FORMAT_LABELS = {
    BankFormat.OUTBANK: "Outbank",
    BankFormat.C24: "C24 Bank",
    BankFormat.SPARKASSE: "Sparkasse",
    BankFormat.DEUTSCHEBANK: "Deutsche Bank",
    BankFormat.COMMERZBANK: "Commerzbank",
    BankFormat.N26: "N26",
    BankFormat.REVOLUT: "Revolut",
    BankFormat.ING: "ING",
    BankFormat.DKB: "DKB",
    BankFormat.DKB_LEGACY: "DKB (altes Format)",
    BankFormat.COMDIRECT: "comdirect",
    BankFormat.VOLKSBANK: "Volksbank / Raiffeisenbank",
    BankFormat.CONSORSBANK: "Consorsbank",
    BankFormat.TARGOBANK: "TARGOBANK",
    BankFormat.HYPOVEREINSBANK: "HypoVereinsbank",
    BankFormat.POSTBANK: "Postbank",
    BankFormat.TOMORROW: "Tomorrow",
    BankFormat.KONTIST: "Kontist",
    BankFormat.FINOM: "Finom",
    BankFormat.GENERAL: "Allgemein CSV",
}

FILE_KIND_LABELS = {
    FileKind.CSV: "CSV",
    FileKind.MT940: "MT940 (SWIFT)",
    FileKind.CAMT053: "CAMT.053 (ISO 20022)",
}


class WarningCode(str, Enum):
    """Reasons a row or entry was skipped or only partially decoded."""
    ROW_TOO_SHORT = "row_too_short"
    ROW_FAILED = "row_failed"
    DATE_MISSING = "date_missing"
    DATE_UNPARSABLE = "date_unparsable"
    AMOUNT_MISSING = "amount_missing"
    AMOUNT_UNPARSABLE = "amount_unparsable"
    ENTRY_FAILED = "entry_failed"
    FILE_UNREADABLE = "file_unreadable"


# Warnings that mean no record was produced for the row/entry
SKIPPING_WARNING_CODES = frozenset({
    WarningCode.ROW_TOO_SHORT,
    WarningCode.ROW_FAILED,
    WarningCode.DATE_MISSING,
    WarningCode.ENTRY_FAILED,
})


@dataclass
class CanonicalTransaction:
    """
    Normalized transaction data from any bank statement format.

    Dates are ISO-8601 strings. A date token the decoders could not
    understand is kept verbatim and reported through a ParseWarning.
    """
    date: str
    amount: Decimal
    description: str
    value_date: str = ""
    reference: str = ""
    counterpart_name: Optional[str] = None
    counterpart_iban: Optional[str] = None
    category: Optional[str] = None

    def __post_init__(self):
        """Validate and normalize fields."""
        if not self.value_date:
            self.value_date = self.date
        if self.reference is None:
            self.reference = ""
        if self.description is None:
            self.description = ""
        if not self.counterpart_name:
            self.counterpart_name = None
        if not self.category:
            self.category = None
        if self.counterpart_iban:
            # Normalize IBAN: remove spaces, uppercase
            self.counterpart_iban = self.counterpart_iban.replace(" ", "").upper()
        if not self.counterpart_iban:
            self.counterpart_iban = None


@dataclass
class ParseWarning:
    """A row or entry that was skipped or decoded on a best-effort basis."""
    code: WarningCode
    message: str
    line: Optional[int] = None
    raw: Optional[str] = None

    @property
    def skipped(self) -> bool:
        return self.code in SKIPPING_WARNING_CODES


@dataclass
class ParseResult:
    """Ordered transactions of one file plus everything worth reviewing."""
    file_kind: FileKind
    transactions: List[CanonicalTransaction] = field(default_factory=list)
    warnings: List[ParseWarning] = field(default_factory=list)
    bank_format: Optional[BankFormat] = None
    account_iban: Optional[str] = None

    @property
    def skipped_count(self) -> int:
        return sum(1 for warning in self.warnings if warning.skipped)

    @property
    def format_label(self) -> str:
        if self.file_kind == FileKind.CSV and self.bank_format is not None:
            return BANK_FORMAT_LABELS.get(self.bank_format, self.bank_format.value)
        return FILE_KIND_LABELS[self.file_kind]


class BaseStatementParser(ABC):
    """
    Abstract base class for bank statement parsers.

    Each file kind implements this interface. Parsers work on already
    decoded text and never raise for malformed input: problems end up in
    ParseResult.warnings.
    """

    @abstractmethod
    def can_parse(self, content: str, filename: Optional[str] = None) -> bool:
        """
        Check if this parser can handle the given file.

        Args:
            content: Decoded file content
            filename: Optional filename for extension-based detection

        Returns:
            True if parser can handle this file format
        """
        pass

    @abstractmethod
    def parse_text(self, content: str) -> ParseResult:
        """
        Parse decoded statement text into canonical transactions.

        Returns:
            ParseResult with transactions in file order and any warnings
        """
        pass

    @abstractmethod
    def get_format_name(self) -> str:
        """Return human-readable format name (e.g., 'CAMT.053', 'MT940')."""
        pass
