"""
Format detection for delimited bank exports.

Most German banks share generic column names such as "Buchungstag", so only
the presence of a uniquely named column tells dialects apart. The rules
below therefore run from most to least specific and the first hit wins.
The order is part of the contract: reordering silently reclassifies files
that used to import correctly.
"""
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from .base_parser import BankFormat

OUTBANK_SIGNATURE = "#;konto;datum"
DEFAULT_HEADER_SCAN_LINES = 20

_DIGIT = re.compile(r"\d")


@dataclass(frozen=True)
class Header:
    """Lower-cased, quote-stripped view of a candidate header line."""
    text: str
    columns: Tuple[str, ...]
    delimiter: Optional[str]

    @classmethod
    def from_line(cls, line: str) -> "Header":
        text = line.replace('"', "").strip().lower()
        if "," in text and ";" not in text:
            delimiter = ","
        elif ";" in text:
            delimiter = ";"
        else:
            delimiter = None
        columns = tuple(col.strip() for col in text.split(delimiter)) if delimiter else (text,)
        return cls(text=text, columns=columns, delimiter=delimiter)

    def contains(self, token: str) -> bool:
        return token in self.text

    def has_column(self, name: str) -> bool:
        return name in self.columns


HeaderPredicate = Callable[[Header], bool]


@dataclass(frozen=True)
class DetectionRule:
    """One (predicate, format) pair; delimiter None means the rule ignores it."""
    bank_format: BankFormat
    predicate: HeaderPredicate
    delimiter: Optional[str] = None

    def matches(self, header: Header) -> bool:
        if self.delimiter is not None and header.delimiter != self.delimiter:
            return False
        return self.predicate(header)


def any_of(*tokens: str) -> HeaderPredicate:
    return lambda header: any(header.contains(token) for token in tokens)


def all_of(*tokens: str) -> HeaderPredicate:
    return lambda header: all(header.contains(token) for token in tokens)


def any_column(*names: str) -> HeaderPredicate:
    return lambda header: any(header.has_column(name) for name in names)


DETECTION_RULES: Tuple[DetectionRule, ...] = (
    DetectionRule(BankFormat.OUTBANK, lambda h: h.text.startswith(OUTBANK_SIGNATURE)),

    # Comma delimited PSP exports
    DetectionRule(BankFormat.C24, any_of("buchungsdatum", "buchungstyp"), ","),
    DetectionRule(BankFormat.REVOLUT, any_of("started date", "completed date"), ","),
    DetectionRule(BankFormat.N26, any_column("payee", "account number"), ","),
    DetectionRule(BankFormat.TOMORROW, any_of("empfänger", "betrag"), ","),
    DetectionRule(BankFormat.KONTIST, any_of("booking date", "amount (eur)"), ","),
    DetectionRule(BankFormat.FINOM, any_of("counterparty", "payment reference"), ","),

    # Semicolon delimited bank exports
    DetectionRule(BankFormat.COMMERZBANK, any_of("umsatzart"), ";"),
    DetectionRule(BankFormat.DEUTSCHEBANK, any_of("buchungsart"), ";"),
    DetectionRule(BankFormat.ING, any_of("auftraggeber/empfänger"), ";"),
    DetectionRule(BankFormat.DKB, any_of("umsatztyp"), ";"),
    DetectionRule(BankFormat.DKB_LEGACY, all_of("wertstellung", "kontonummer"), ";"),
    DetectionRule(BankFormat.HYPOVEREINSBANK, any_of("empfänger/auftraggeber"), ";"),
    DetectionRule(
        BankFormat.COMDIRECT,
        lambda h: h.contains("wertstellung (valuta)") or h.has_column("valuta"),
        ";",
    ),
    DetectionRule(BankFormat.POSTBANK, any_of("empfänger/zahlungspflichtiger"), ";"),
    DetectionRule(BankFormat.TARGOBANK, any_of("transaktionsart"), ";"),
    DetectionRule(
        BankFormat.CONSORSBANK,
        lambda h: h.contains("buchungstext") and not h.contains("auftragskonto"),
        ";",
    ),
    DetectionRule(BankFormat.VOLKSBANK, any_of("kundenreferenz"), ";"),
    DetectionRule(BankFormat.SPARKASSE, any_of("auftragskonto"), ";"),
    DetectionRule(BankFormat.SPARKASSE, all_of("buchungstag", "valutadatum"), ";"),
)


def detect_line_format(line: str, rules: Tuple[DetectionRule, ...] = DETECTION_RULES) -> BankFormat:
    """Apply the ordered rules to a single header line."""
    header = Header.from_line(line)
    for rule in rules:
        if rule.matches(header):
            return rule.bank_format
    return BankFormat.UNRECOGNIZED


def _strip_bom(text: str) -> str:
    return text[1:] if text.startswith("\ufeff") else text


def detect_header(
    text: str,
    max_scan_lines: int = DEFAULT_HEADER_SCAN_LINES,
) -> Tuple[BankFormat, int]:
    """
    Find the dialect and the index of its header line.

    The first non-empty line always gets the first chance. Only when it is
    unrecognized are the following lines tried, which covers exports that
    put account metadata above the column header (ING, DKB, comdirect).
    Later candidates must be free of digits so data rows are never taken
    for a header.

    Returns:
        (bank_format, header_index); header_index is the first non-empty
        line when nothing matched
    """
    lines: List[str] = _strip_bom(text).split("\n")
    first_index: Optional[int] = None

    for index, raw_line in enumerate(lines[:max_scan_lines]):
        line = raw_line.strip()
        if not line:
            continue
        if first_index is None:
            first_index = index
        elif _DIGIT.search(line):
            continue

        bank_format = detect_line_format(line)
        if bank_format != BankFormat.UNRECOGNIZED:
            return bank_format, index

    return BankFormat.UNRECOGNIZED, first_index or 0


def detect_bank_format(text: str, max_scan_lines: int = DEFAULT_HEADER_SCAN_LINES) -> BankFormat:
    """Best-guess dialect of a delimited export, or UNRECOGNIZED."""
    bank_format, _ = detect_header(text, max_scan_lines)
    return bank_format


def resolve_format(detected: BankFormat, hint: Optional[BankFormat] = None) -> BankFormat:
    """
    Pick the dialect to dispatch on.

    A detected format always wins over the caller's hint so that a stale
    selection from an earlier import cannot mis-map a recognizable file.
    """
    if detected != BankFormat.UNRECOGNIZED:
        return detected
    if hint is not None and hint != BankFormat.UNRECOGNIZED:
        return hint
    return BankFormat.GENERAL
