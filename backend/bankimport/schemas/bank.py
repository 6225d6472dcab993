"""
Bank Statement Import Schemas

Pydantic schemas for:
- Statement parse preview
- Supported bank format vocabulary
"""
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from bankimport.services.bank.parsers import (
    BANK_FORMAT_LABELS,
    BankFormat,
    CanonicalTransaction,
    FileKind,
    ParseResult,
    ParseWarning,
    WarningCode,
)


# ============ Parse Schemas ============

class CanonicalTransactionResponse(BaseModel):
    """A single parsed transaction."""
    date: str = Field(..., description="Buchungsdatum (ISO-8601)")
    value_date: str = Field(..., description="Wertstellung (ISO-8601)")
    amount: Decimal = Field(..., description="Betrag, positiv = Eingang, negativ = Ausgang")
    description: str = Field(default="", description="Verwendungszweck")
    reference: str = Field(default="", description="Referenz oder Mandat")
    counterpart_name: Optional[str] = Field(None, description="Name der Gegenpartei")
    counterpart_iban: Optional[str] = Field(None, description="IBAN der Gegenpartei")
    category: Optional[str] = Field(None, description="Kategorie laut Bank")

    @classmethod
    def from_transaction(cls, tx: CanonicalTransaction) -> "CanonicalTransactionResponse":
        return cls(
            date=tx.date,
            value_date=tx.value_date,
            amount=tx.amount,
            description=tx.description,
            reference=tx.reference,
            counterpart_name=tx.counterpart_name,
            counterpart_iban=tx.counterpart_iban,
            category=tx.category,
        )


class ParseWarningResponse(BaseModel):
    """A skipped or partially decoded row."""
    code: WarningCode
    message: str
    line: Optional[int] = Field(None, description="Zeilennummer bzw. Buchungsnummer bei CAMT.053")
    raw: Optional[str] = None
    skipped: bool = Field(..., description="True wenn keine Buchung erzeugt wurde")

    @classmethod
    def from_warning(cls, warning: ParseWarning) -> "ParseWarningResponse":
        return cls(
            code=warning.code,
            message=warning.message,
            line=warning.line,
            raw=warning.raw,
            skipped=warning.skipped,
        )


class BankParseResponse(BaseModel):
    """Response after parsing a bank statement file."""
    file_kind: FileKind
    bank_format: Optional[BankFormat] = None
    format_label: str
    account_iban: Optional[str] = None
    transactions: List[CanonicalTransactionResponse] = Field(default_factory=list)
    warnings: List[ParseWarningResponse] = Field(default_factory=list)
    total_transactions: int = Field(..., description="Anzahl erkannter Buchungen")
    skipped_rows: int = Field(..., description="Anzahl übersprungener Zeilen")
    message: str = Field(..., description="Zusammenfassung (Deutsch)")

    @classmethod
    def from_result(cls, result: ParseResult, max_warnings: int) -> "BankParseResponse":
        total = len(result.transactions)
        skipped = result.skipped_count
        message = f"{total} Buchungen erkannt ({result.format_label})."
        if skipped:
            message += f" {skipped} Zeilen übersprungen."
        return cls(
            file_kind=result.file_kind,
            bank_format=result.bank_format,
            format_label=result.format_label,
            account_iban=result.account_iban,
            transactions=[CanonicalTransactionResponse.from_transaction(tx) for tx in result.transactions],
            warnings=[ParseWarningResponse.from_warning(w) for w in result.warnings[:max_warnings]],
            total_transactions=total,
            skipped_rows=skipped,
            message=message,
        )


# ============ Format Schemas ============

class BankFormatResponse(BaseModel):
    """A supported delimited-text dialect."""
    value: BankFormat
    label: str


class BankFormatListResponse(BaseModel):
    """All dialects a format hint may name."""
    formats: List[BankFormatResponse]
    total: int

    @classmethod
    def build(cls) -> "BankFormatListResponse":
        formats = [
            BankFormatResponse(value=bank_format, label=label)
            for bank_format, label in BANK_FORMAT_LABELS.items()
        ]
        return cls(formats=formats, total=len(formats))
