"""
MT940 Parser - SWIFT Bank Statement Format

Parses MT940 text files (Statement Message).
This is a legacy but widely-used format for bank statements.

Format: Plain text with tags like :20:, :25:, :60F:, :61:, :86:, :62F:
"""
import logging
import re
from decimal import Decimal
from typing import Dict, List, Optional

from .base_parser import (
    BaseStatementParser,
    CanonicalTransaction,
    FileKind,
    ParseResult,
)
from .file_kind import detect_file_kind
from .locale import expand_two_digit_year

logger = logging.getLogger(__name__)

# :61: statement line immediately followed (after optional supplementary
# detail lines) by its :86: narrative, which runs until the next tag line,
# a message trailer or the end of the text.
STATEMENT_PAIR = re.compile(
    r":61:(?P<date>\d{6})(?P<entry_date>\d{4})?"
    r"(?P<mark>RC|RD|C|D)(?P<funds_code>[A-Z]?)"
    r"(?P<amount>\d+,\d{0,2})(?P<rest>[^\n]*)"
    r"(?:\n(?!:)[^\n]*)*?"
    r"\n:86:(?P<narrative>.*?)"
    r"(?=^:\d{2}[A-Z]?:|^-(?:\}|[ \t]*$)|\Z)",
    re.DOTALL | re.MULTILINE,
)

_SUBFIELD_MARKER = re.compile(r"\?..")
_SUBFIELD_SPLIT = re.compile(r"\?(\d{2})")
_WHITESPACE = re.compile(r"\s+")
_IBAN = re.compile(r"^[A-Z]{2}\d{2}[A-Z0-9]{10,30}$")
_TRANSACTION_TYPE = re.compile(r"^[A-Z][A-Z0-9]{3}")


class MT940Parser(BaseStatementParser):
    """
    Parser for MT940 SWIFT bank statements.

    MT940 is a plain text format with specific tags for transaction data.
    Each statement contains:
    - :20: Transaction Reference Number
    - :25: Account Identification
    - :60F: Opening Balance
    - :61: Statement Line (transaction)
    - :86: Information to Account Owner (description)
    - :62F: Closing Balance

    Only :61:/:86: pairs matched by STATEMENT_PAIR become transactions;
    any other text is ignored.
    """

    def can_parse(self, content: str, filename: Optional[str] = None) -> bool:
        """Check if file is MT940 format."""
        return detect_file_kind(content, filename) == FileKind.MT940

    def get_format_name(self) -> str:
        return "MT940 (SWIFT)"

    def parse_text(self, content: str) -> ParseResult:
        """Parse MT940 content."""
        text = content.replace("\r\n", "\n").replace("\r", "\n")

        result = ParseResult(file_kind=FileKind.MT940)
        result.account_iban = self._extract_account_iban(text)

        for match in STATEMENT_PAIR.finditer(text):
            result.transactions.append(self._create_transaction(match))

        logger.debug("MT940: %d statement lines matched", len(result.transactions))
        return result

    def _create_transaction(self, match: "re.Match") -> CanonicalTransaction:
        booking_date = self._parse_mt940_date(match.group("date"))

        amount = Decimal(match.group("amount").replace(",", "."))
        if match.group("mark") in ("D", "RD"):
            amount = -amount

        narrative = match.group("narrative")
        subfields = self._parse_subfields(narrative)

        return CanonicalTransaction(
            date=booking_date,
            value_date=booking_date,
            amount=amount,
            description=self._build_description(narrative),
            reference=self._extract_reference(match.group("rest")),
            counterpart_name=self._extract_counterparty_name(narrative, subfields),
            counterpart_iban=self._extract_counterparty_iban(narrative, subfields),
        )

    def _parse_mt940_date(self, date_str: str) -> str:
        """Parse MT940 date format (YYMMDD) to YYYY-MM-DD."""
        year = expand_two_digit_year(int(date_str[:2]))
        return f"{year}-{date_str[2:4]}-{date_str[4:6]}"

    def _build_description(self, narrative: str) -> str:
        """Flatten the :86: block: ?XX sub-field markers and line breaks become spaces."""
        flat = _SUBFIELD_MARKER.sub(" ", narrative).replace("\n", " ")
        return _WHITESPACE.sub(" ", flat).strip()

    def _parse_subfields(self, narrative: str) -> Dict[str, str]:
        """
        Split a structured German :86: block into its ?NN sub-fields.

        Lines are wrapped at a fixed width, so they are joined without a
        separator before splitting.
        """
        parts = _SUBFIELD_SPLIT.split(narrative.replace("\n", ""))
        subfields: Dict[str, str] = {}
        for code, value in zip(parts[1::2], parts[2::2]):
            subfields[code] = subfields.get(code, "") + value
        return subfields

    def _extract_reference(self, rest: str) -> str:
        """
        Reference from the tail of the :61: line.

        Layout after the amount: 4-char transaction type, customer reference,
        then optionally //bank reference.
        """
        rest = rest.strip()
        type_match = _TRANSACTION_TYPE.match(rest)
        if type_match:
            rest = rest[type_match.end():]

        customer_ref, _, bank_ref = rest.partition("//")
        bank_ref = bank_ref.strip()
        if bank_ref:
            return bank_ref
        customer_ref = customer_ref.strip()
        if customer_ref and customer_ref != "NONREF":
            return customer_ref
        return ""

    def _extract_counterparty_name(self, narrative: str, subfields: Dict[str, str]) -> Optional[str]:
        """Extract counterparty name from description."""
        name = (subfields.get("32", "") + subfields.get("33", "")).strip()
        if name:
            return name

        flat = narrative.replace("\n", "")
        # Look for /NAME/ tag
        match = re.search(r"/NAME/([^/]+)", flat)
        if match:
            return match.group(1).strip()

        # Look for /BENM/ tag (beneficiary)
        match = re.search(r"/BENM/([^/]+)", flat)
        if match:
            return match.group(1).strip()

        return None

    def _extract_counterparty_iban(self, narrative: str, subfields: Dict[str, str]) -> Optional[str]:
        """Extract counterparty IBAN from description."""
        account = subfields.get("31", "").replace(" ", "").upper()
        if _IBAN.match(account):
            return account

        match = re.search(r"/IBAN/([A-Z]{2}[0-9A-Z]+)", narrative.replace("\n", ""))
        if match:
            return match.group(1).strip()

        return None

    def _extract_account_iban(self, content: str) -> Optional[str]:
        """Extract account IBAN from :25: tag."""
        # :25: tag contains account identification
        match = re.search(r":25:([^\n]+)", content)
        if match:
            account_info = match.group(1).strip()
            # Format can be: :25:NL91ABNA0417164300 or :25:12345/NL91ABNA0417164300
            for part in re.split(r"[/\s]", account_info):
                # Check if this looks like an IBAN (starts with 2 letters)
                if len(part) > 10 and part[:2].isalpha() and part[2:].isalnum():
                    return part.upper()

        return None
