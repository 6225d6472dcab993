"""
Column tables for the supported delimited bank exports.

Each DialectSpec records the export layout of one bank or payment service
provider: which column holds which field, the delimiter, and how amounts
and dates are encoded. The header lines in the comments are the column
layouts the tables were written against.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .base_parser import BankFormat, CanonicalTransaction, ParseWarning, WarningCode
from .errors import MissingDateError, RowTooShortError
from .locale import (
    is_iso_date,
    parse_german_date,
    try_parse_flexible_number,
    try_parse_german_number,
)

NumberParser = Callable[[Optional[str]], Optional[Decimal]]
DateParser = Callable[[Optional[str]], str]


@dataclass(frozen=True)
class ColumnMap:
    """
    0-based column positions of one dialect.

    Tuples list alternatives: the first non-empty cell wins. amount_fallback
    is read only when the chosen amount cell is zero or undecodable.
    """
    date: int
    amount: Tuple[int, ...]
    description: Tuple[int, ...]
    value_date: Optional[int] = None
    reference: Tuple[int, ...] = ()
    counterpart_name: Tuple[int, ...] = ()
    # Used instead of counterpart_name for outgoing payments
    counterpart_name_debit: Tuple[int, ...] = ()
    counterpart_iban: Optional[int] = None
    category: Tuple[int, ...] = ()
    amount_fallback: Optional[int] = None


def _cell(cols: Sequence[str], index: Optional[int]) -> str:
    if index is None or index >= len(cols):
        return ""
    return cols[index]


def _first(cols: Sequence[str], indexes: Tuple[int, ...]) -> str:
    for index in indexes:
        value = _cell(cols, index)
        if value:
            return value
    return ""


def _date_part(value: Optional[str]) -> str:
    """Date of a 'YYYY-MM-DD HH:MM:SS' timestamp."""
    if not value:
        return ""
    return parse_german_date(value.strip().split(" ")[0])


def _parse_euro_amount(value: Optional[str]) -> Optional[Decimal]:
    if not value:
        return None
    return try_parse_german_number(value.replace("€", "").strip())


@dataclass(frozen=True)
class DialectSpec:
    """Everything needed to turn a tokenized row of one dialect into a transaction."""
    bank_format: BankFormat
    columns: ColumnMap
    # None: use the delimiter of the file's header line
    delimiter: Optional[str] = ";"
    # None: German for semicolon files, flexible for comma files
    parse_number: Optional[NumberParser] = try_parse_german_number
    parse_date: DateParser = parse_german_date
    min_columns: Optional[int] = None
    # Column holding the statement's own account, if the export repeats it per row
    account_iban_column: Optional[int] = None

    @property
    def required_columns(self) -> int:
        if self.min_columns is not None:
            return self.min_columns
        return max(self.columns.date, min(self.columns.amount)) + 1

    def number_parser_for(self, delimiter: str) -> NumberParser:
        if self.parse_number is not None:
            return self.parse_number
        return try_parse_german_number if delimiter == ";" else try_parse_flexible_number

    def map_row(
        self,
        cols: Sequence[str],
        delimiter: str = ";",
    ) -> Tuple[CanonicalTransaction, List[ParseWarning]]:
        """
        Map one tokenized row onto the canonical record.

        Raises:
            RowTooShortError: row has fewer columns than the dialect needs
            MissingDateError: the date column is empty

        Returns:
            (transaction, warnings) where warnings flag best-effort decodes
        """
        required = self.required_columns
        if len(cols) < required:
            raise RowTooShortError(required, len(cols))

        columns = self.columns
        warnings: List[ParseWarning] = []

        raw_date = _cell(cols, columns.date)
        booking_date = self.parse_date(raw_date)
        if not booking_date:
            raise MissingDateError("Buchungsdatum fehlt")
        if not is_iso_date(booking_date):
            warnings.append(ParseWarning(
                code=WarningCode.DATE_UNPARSABLE,
                message=f"Datum nicht erkannt: {raw_date}",
                raw=raw_date,
            ))

        value_date = ""
        if columns.value_date is not None:
            value_date = self.parse_date(_cell(cols, columns.value_date))

        amount, amount_warning = self._decode_amount(cols, delimiter)
        if amount_warning is not None:
            warnings.append(amount_warning)

        counterpart_name = _first(cols, columns.counterpart_name)
        if amount < 0 and columns.counterpart_name_debit:
            counterpart_name = _first(cols, columns.counterpart_name_debit) or counterpart_name

        transaction = CanonicalTransaction(
            date=booking_date,
            value_date=value_date,
            amount=amount,
            description=_first(cols, columns.description),
            reference=_first(cols, columns.reference),
            counterpart_name=counterpart_name,
            counterpart_iban=_cell(cols, columns.counterpart_iban),
            category=_first(cols, columns.category),
        )
        return transaction, warnings

    def _decode_amount(
        self,
        cols: Sequence[str],
        delimiter: str,
    ) -> Tuple[Decimal, Optional[ParseWarning]]:
        parse = self.number_parser_for(delimiter)
        token = _first(cols, self.columns.amount)
        fallback = _cell(cols, self.columns.amount_fallback)

        if not token and not fallback:
            return Decimal("0"), ParseWarning(
                code=WarningCode.AMOUNT_MISSING,
                message="Betrag fehlt",
            )

        number = parse(token) if token else None
        if not number and fallback:
            fallback_number = parse(fallback)
            if fallback_number is not None:
                return fallback_number, None

        if number is not None:
            return number, None

        raw = token or fallback
        return Decimal("0"), ParseWarning(
            code=WarningCode.AMOUNT_UNPARSABLE,
            message=f"Betrag nicht erkannt: {raw}",
            raw=raw,
        )

    def account_iban(self, cols: Sequence[str]) -> Optional[str]:
        value = _cell(cols, self.account_iban_column)
        return value.replace(" ", "").upper() if value else None


_DIALECT_LIST = (
    # #;Konto;Datum;Valuta;Betrag;Währung;Name;Nummer;Bank;Zweck;Hauptkategorie;Kategorie;
    # Kategoriepfad;Tags;Notiz;Buchungstext
    DialectSpec(
        BankFormat.OUTBANK,
        ColumnMap(
            date=2, value_date=3, amount=(4,), description=(15, 9, 6),
            reference=(9,), counterpart_name=(6,), counterpart_iban=7, category=(12, 11),
        ),
        account_iban_column=1,
    ),
    # Auftragskonto;Buchungstag;Valutadatum;Buchungstext;Verwendungszweck;
    # Beguenstigter/Zahlungspflichtiger;Kontonummer;BLZ;Betrag;Waehrung;Info
    DialectSpec(
        BankFormat.SPARKASSE,
        ColumnMap(
            date=1, value_date=2, amount=(8,), description=(4, 3),
            reference=(4,), counterpart_name=(5,),
        ),
        account_iban_column=0,
    ),
    # Buchungstag;Wert;Buchungsart;Begünstigter / Auftraggeber;Verwendungszweck;IBAN;BIC;
    # Kundenreferenz;Mandatsreferenz;Gläubiger ID;Fremde Gebühren;Betrag;Abweichender Empfänger;
    # Anzahl der Aufträge;Anzahl der Schecks;Soll;Haben;Währung
    DialectSpec(
        BankFormat.DEUTSCHEBANK,
        ColumnMap(
            date=0, value_date=1, amount=(15, 16), amount_fallback=11, description=(4,),
            reference=(7,), counterpart_name=(3,), counterpart_iban=5,
        ),
        min_columns=12,
    ),
    # Buchungstag;Wertstellung;Umsatzart;Buchungstext;Betrag;Währung;IBAN Kontoinhaber;Kategorie
    DialectSpec(
        BankFormat.COMMERZBANK,
        ColumnMap(date=0, value_date=1, amount=(4,), description=(3, 2), category=(7,)),
    ),
    # Buchung;Valuta;Auftraggeber/Empfänger;Buchungstext;Verwendungszweck;Saldo;Währung;Betrag;Währung
    DialectSpec(
        BankFormat.ING,
        ColumnMap(date=0, value_date=1, amount=(7,), description=(4, 3), counterpart_name=(2,)),
    ),
    # Buchungsdatum;Wertstellung;Status;Zahlungspflichtige*r;Zahlungsempfänger*in;Verwendungszweck;
    # Umsatztyp;IBAN;Betrag (€);Gläubiger-ID;Mandatsreferenz;Kundenreferenz
    DialectSpec(
        BankFormat.DKB,
        ColumnMap(
            date=0, value_date=1, amount=(8,), description=(5,), reference=(10, 11),
            counterpart_name=(3,), counterpart_name_debit=(4,), counterpart_iban=7,
        ),
        parse_number=_parse_euro_amount,
    ),
    # Buchungstag;Wertstellung;Buchungstext;Auftraggeber / Begünstigter;Verwendungszweck;
    # Kontonummer;BLZ;Betrag (EUR);Gläubiger-ID;Mandatsreferenz;Kundenreferenz
    DialectSpec(
        BankFormat.DKB_LEGACY,
        ColumnMap(
            date=0, value_date=1, amount=(7,), description=(4, 2), reference=(9, 10),
            counterpart_name=(3,), counterpart_iban=5,
        ),
    ),
    # Kontonummer;Buchungsdatum;Valuta;Empfänger/Auftraggeber;Verwendungszweck;Betrag;Währung
    DialectSpec(
        BankFormat.HYPOVEREINSBANK,
        ColumnMap(date=1, value_date=2, amount=(5,), description=(4,), counterpart_name=(3,)),
    ),
    # Buchungstag;Wertstellung (Valuta);Vorgang;Buchungstext;Umsatz in EUR
    DialectSpec(
        BankFormat.COMDIRECT,
        ColumnMap(date=0, value_date=1, amount=(4,), description=(3, 2)),
    ),
    # Buchungstag;Wert;Buchungstext;Empfänger/Zahlungspflichtiger;IBAN;Verwendungszweck;Betrag;Währung
    DialectSpec(
        BankFormat.POSTBANK,
        ColumnMap(
            date=0, value_date=1, amount=(6,), description=(5, 2),
            counterpart_name=(3,), counterpart_iban=4,
        ),
    ),
    # Buchungsdatum;Wertstellung;Transaktionsart;Beschreibung;Betrag;Währung
    DialectSpec(
        BankFormat.TARGOBANK,
        ColumnMap(date=0, value_date=1, amount=(4,), description=(3, 2)),
    ),
    # Buchungstag;Wertstellung;Buchungstext;Sender / Empfänger;IBAN;Verwendungszweck;Betrag;Währung
    DialectSpec(
        BankFormat.CONSORSBANK,
        ColumnMap(
            date=0, value_date=1, amount=(6,), description=(5, 2),
            counterpart_name=(3,), counterpart_iban=4,
        ),
    ),
    # Buchungstag;Valutadatum;Name Zahlungsbeteiligter;IBAN Zahlungsbeteiligter;Verwendungszweck;
    # Kundenreferenz;Betrag;Währung
    DialectSpec(
        BankFormat.VOLKSBANK,
        ColumnMap(
            date=0, value_date=1, amount=(6,), description=(4,), reference=(5,),
            counterpart_name=(2,), counterpart_iban=3,
        ),
    ),
    # Transaktionstyp,Buchungsdatum,Karteneinsatz,Betrag,Zahlungsempfänger,IBAN,BIC,Verwendungszweck,
    # Beschreibung,Kontonummer,Kontoname,Kategorie,Unterkategorie,Bargeldabhebung
    DialectSpec(
        BankFormat.C24,
        ColumnMap(
            date=1, amount=(3,), description=(8, 7, 0), reference=(7,),
            counterpart_name=(4,), counterpart_iban=5, category=(11,),
        ),
        delimiter=",",
        parse_number=_parse_euro_amount,
        min_columns=5,
    ),
    # Type,Product,Started Date,Completed Date,Description,Amount,Fee,Currency,State,Balance
    DialectSpec(
        BankFormat.REVOLUT,
        ColumnMap(date=2, value_date=3, amount=(5,), description=(4,)),
        delimiter=",",
        parse_number=try_parse_flexible_number,
        parse_date=_date_part,
    ),
    # Date,Payee,Account number,Transaction type,Payment reference,Amount (EUR),
    # Amount (Foreign Currency),Type Foreign Currency,Exchange Rate
    DialectSpec(
        BankFormat.N26,
        ColumnMap(
            date=0, amount=(5,), description=(4, 3),
            counterpart_name=(1,), counterpart_iban=2,
        ),
        delimiter=",",
        parse_number=try_parse_flexible_number,
    ),
    # Datum,Empfänger,IBAN,Verwendungszweck,Betrag,Kategorie,Währung
    DialectSpec(
        BankFormat.TOMORROW,
        ColumnMap(
            date=0, amount=(4,), description=(3,),
            counterpart_name=(1,), counterpart_iban=2, category=(5,),
        ),
        delimiter=",",
        parse_number=try_parse_flexible_number,
    ),
    # Booking Date,Value Date,Amount (EUR),Sender/Receiver,IBAN,Description,Category
    DialectSpec(
        BankFormat.KONTIST,
        ColumnMap(
            date=0, value_date=1, amount=(2,), description=(5,),
            counterpart_name=(3,), counterpart_iban=4, category=(6,),
        ),
        delimiter=",",
        parse_number=try_parse_flexible_number,
    ),
    # Date,Counterparty,IBAN,Payment reference,Amount,Currency,Category
    DialectSpec(
        BankFormat.FINOM,
        ColumnMap(
            date=0, amount=(4,), description=(3,),
            counterpart_name=(1,), counterpart_iban=2, category=(6,),
        ),
        delimiter=",",
        parse_number=try_parse_flexible_number,
    ),
    # Datum;Beschreibung;Betrag (or the same with commas)
    DialectSpec(
        BankFormat.GENERAL,
        ColumnMap(date=0, amount=(2,), description=(1,)),
        delimiter=None,
        parse_number=None,
        min_columns=3,
    ),
)

DIALECTS: Dict[BankFormat, DialectSpec] = {spec.bank_format: spec for spec in _DIALECT_LIST}


def get_dialect(bank_format: BankFormat) -> DialectSpec:
    """Look up the column table of a dialect."""
    try:
        return DIALECTS[bank_format]
    except KeyError:
        raise ValueError(f"No column table for format: {bank_format.value}") from None
