"""
CAMT.053 Parser - ISO 20022 Bank Statement Format

Parses CAMT.053 XML files (Bank-to-Customer Account Statement).
This is the standard format used by European banks for PSD2 compliance.

Namespace: urn:iso:std:iso:20022:tech:xsd:camt.053.001.0X (X = version)
"""
import logging
import xml.etree.ElementTree as ET
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from .base_parser import (
    BaseStatementParser,
    CanonicalTransaction,
    FileKind,
    ParseResult,
    ParseWarning,
    WarningCode,
)
from .errors import MalformedEntryError
from .file_kind import detect_file_kind
from .locale import try_parse_flexible_number

logger = logging.getLogger(__name__)


def _path(*steps: str) -> str:
    """Namespace-agnostic ElementTree path relative to the current element."""
    return "/".join("{*}" + step for step in steps)


class CamtPath:
    """
    Field paths inside one Ntry element.

    Each field lists its alternatives in priority order; the first one with
    text wins. Versions .02 to .08 differ in where party names live (Cdtr/Nm
    vs Cdtr/Pty/Nm), hence the pairs.
    """
    ENTRIES = ".//" + _path("Ntry")
    ACCOUNT_IBAN = (".//" + _path("Stmt", "Acct", "Id", "IBAN"),)

    BOOKING_DATE = (_path("BookgDt", "Dt"), _path("BookgDt", "DtTm"))
    VALUE_DATE = (_path("ValDt", "Dt"), _path("ValDt", "DtTm"))
    AMOUNT = (_path("Amt"),)
    CREDIT_DEBIT = (_path("CdtDbtInd"),)
    REMITTANCE = _path("NtryDtls", "TxDtls", "RmtInf", "Ustrd")
    ADDITIONAL_INFO = (_path("AddtlNtryInf"),)
    COUNTERPART_NAME = (
        _path("NtryDtls", "TxDtls", "RltdPties", "Cdtr", "Nm"),
        _path("NtryDtls", "TxDtls", "RltdPties", "Cdtr", "Pty", "Nm"),
        _path("NtryDtls", "TxDtls", "RltdPties", "Dbtr", "Nm"),
        _path("NtryDtls", "TxDtls", "RltdPties", "Dbtr", "Pty", "Nm"),
    )
    COUNTERPART_IBAN = (
        _path("NtryDtls", "TxDtls", "RltdPties", "CdtrAcct", "Id", "IBAN"),
        _path("NtryDtls", "TxDtls", "RltdPties", "DbtrAcct", "Id", "IBAN"),
    )
    REFERENCE = (
        _path("NtryDtls", "TxDtls", "Refs", "EndToEndId"),
        _path("NtryDtls", "TxDtls", "Refs", "MndtId"),
        _path("AcctSvcrRef"),
    )


def find_text(element: ET.Element, paths: Iterable[str], skip: Tuple[str, ...] = ()) -> Optional[str]:
    """Stripped text of the first path that has non-empty text."""
    for path in paths:
        found = element.find(path)
        if found is not None and found.text:
            text = found.text.strip()
            if text and text not in skip:
                return text
    return None


class CAMT053Parser(BaseStatementParser):
    """
    Parser for CAMT.053 XML bank statements.

    Supports multiple versions (camt.053.001.02, .04, .06, .08, etc.)
    """

    def can_parse(self, content: str, filename: Optional[str] = None) -> bool:
        """Check if file is CAMT.053 XML format."""
        return detect_file_kind(content, filename) == FileKind.CAMT053

    def get_format_name(self) -> str:
        return "CAMT.053 (ISO 20022)"

    def parse_text(self, content: str) -> ParseResult:
        """Parse CAMT.053 XML content."""
        result = ParseResult(file_kind=FileKind.CAMT053)

        try:
            root = ET.fromstring(content.strip())
        except ET.ParseError as e:
            logger.warning(f"Invalid CAMT.053 XML: {e}")
            result.warnings.append(ParseWarning(
                code=WarningCode.FILE_UNREADABLE,
                message=f"Ungültiges XML: {e}",
            ))
            return result

        result.account_iban = find_text(root, CamtPath.ACCOUNT_IBAN)

        for index, entry in enumerate(root.iterfind(CamtPath.ENTRIES), start=1):
            try:
                transaction, entry_warnings = self._parse_entry(entry)
            except Exception as e:
                logger.warning(f"Failed to parse CAMT entry {index}: {e}")
                result.warnings.append(ParseWarning(
                    code=WarningCode.ENTRY_FAILED,
                    message=str(e),
                    line=index,
                ))
                continue

            for warning in entry_warnings:
                warning.line = index
                result.warnings.append(warning)
            result.transactions.append(transaction)

        return result

    def _parse_entry(self, entry: ET.Element) -> Tuple[CanonicalTransaction, List[ParseWarning]]:
        """Parse a single transaction entry."""
        warnings: List[ParseWarning] = []

        booking_date = self._parse_date(find_text(entry, CamtPath.BOOKING_DATE))
        if not booking_date:
            raise MalformedEntryError("Ntry ohne Buchungsdatum (BookgDt)")

        value_date = self._parse_date(find_text(entry, CamtPath.VALUE_DATE)) or booking_date

        amount_text = find_text(entry, CamtPath.AMOUNT)
        amount = try_parse_flexible_number(amount_text)
        if amount is None:
            amount = Decimal("0")
            warnings.append(ParseWarning(
                code=WarningCode.AMOUNT_UNPARSABLE if amount_text else WarningCode.AMOUNT_MISSING,
                message=f"Betrag nicht erkannt: {amount_text}" if amount_text else "Betrag fehlt",
                raw=amount_text,
            ))

        # Credit/Debit indicator
        if find_text(entry, CamtPath.CREDIT_DEBIT) == "DBIT":
            amount = -amount

        transaction = CanonicalTransaction(
            date=booking_date,
            value_date=value_date,
            amount=amount,
            description=self._build_description(entry),
            reference=find_text(entry, CamtPath.REFERENCE, skip=("NOTPROVIDED",)) or "",
            counterpart_name=find_text(entry, CamtPath.COUNTERPART_NAME),
            counterpart_iban=find_text(entry, CamtPath.COUNTERPART_IBAN),
        )
        return transaction, warnings

    def _build_description(self, entry: ET.Element) -> str:
        """Unstructured remittance lines, else the entry's additional info."""
        lines: List[str] = [
            elem.text.strip()
            for elem in entry.iterfind(CamtPath.REMITTANCE)
            if elem.text and elem.text.strip()
        ]
        if lines:
            return " ".join(lines)
        return find_text(entry, CamtPath.ADDITIONAL_INFO) or ""

    def _parse_date(self, date_str: Optional[str]) -> str:
        """Date part of an ISO date or datetime (2024-01-15T00:00:00)."""
        if not date_str:
            return ""
        return date_str.split("T")[0]
