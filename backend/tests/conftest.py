"""
Pytest configuration and fixtures for backend tests.

Provides the async API client, a settings override, and statement
fixtures shared by the parser and service tests.
"""
import pytest
import pytest_asyncio
from typing import AsyncGenerator

from httpx import ASGITransport, AsyncClient

from bankimport.main import app
from bankimport.core.config import Settings, get_settings


OUTBANK_CSV = """#;Konto;Datum;Valuta;Betrag;Währung;Name;Nummer;Bank;Zweck;Hauptkategorie;Kategorie;Kategoriepfad;Tags;Notiz;Buchungstext
1;DE58500240245625741701;04.02.2026;;-9,99;EUR;"Apple";;;;"Familie";"Cloud/Netz Abos";"Familie / Cloud/Netz Abos";;;"Apple.Com/Bill"
2;DE58500240245625741701;03.02.2026;;-300,00;EUR;"Lovable";;;;"Fintutto";"Fintutto";"Fintutto";;;
3;DE58500240245625741701;03.02.2026;;-63,00;EUR;"DB Vertrieb GmbH";"DE02100100100152517108";"PBNKDEFFXXX";"Abo 992886480 zum 01.02.2026";"Familie";"Fahrkarten/Monatskarten";"Familie / Kinder / Fahrkarten/Monatskarten";;;
9;DE58500240245625741701;02.02.2026;;-3.000,00;EUR;"Coinbase UK";"DE78202208000027105416";"SXPYDEHHXXX";"alexander deibel";"Anlage";"Coins";"Anlage / Coins";;;"Coinbase Ireland Limited"
10;DE58500240245625741701;01.02.2026;;4.200,00;EUR;"Gehalt";"DE12345678901234567890";"COBADEFF";"Gehalt Februar 2026";"Einnahmen";"Gehalt";"Einnahmen / Gehalt";;;"""

SPARKASSE_CSV = """Auftragskonto;Buchungstag;Valutadatum;Buchungstext;Verwendungszweck;Beguenstigter/Zahlungspflichtiger;Kontonummer;BLZ;Betrag;Waehrung;Info
DE12500105170648489890;15.01.24;15.01.24;GUTSCHRIFT;Rechnung 2024-001;Muster GmbH;DE89370400440532013000;37040044;1.234,56;EUR;Umsatz gebucht
DE12500105170648489890;16.01.24;17.01.24;LASTSCHRIFT;Miete Januar;Hausverwaltung Schmidt;DE02120300000000202051;12030000;-850,00;EUR;Umsatz gebucht
DE12500105170648489890;17.01.24
DE12500105170648489890;18.01.24;18.01.24;KARTENZAHLUNG;;REWE Markt;;;-42,17;EUR;Umsatz gebucht
DE12500105170648489890;19.01.24;19.01.24;ENTGELT;Kontofuehrung;;;;-4,95;EUR;Umsatz gebucht
"""

CAMT053_XML = """<?xml version="1.0" encoding="UTF-8"?>
<Document xmlns="urn:iso:std:iso:20022:tech:xsd:camt.053.001.08">
    <BkToCstmrStmt>
        <Stmt>
            <Acct>
                <Id>
                    <IBAN>DE89370400440532013000</IBAN>
                </Id>
            </Acct>
            <Ntry>
                <Amt Ccy="EUR">1500.00</Amt>
                <CdtDbtInd>CRDT</CdtDbtInd>
                <BookgDt>
                    <Dt>2024-01-15</Dt>
                </BookgDt>
                <ValDt>
                    <Dt>2024-01-16</Dt>
                </ValDt>
                <NtryDtls>
                    <TxDtls>
                        <Refs>
                            <EndToEndId>RE-2024-001</EndToEndId>
                        </Refs>
                        <RltdPties>
                            <Dbtr>
                                <Pty>
                                    <Nm>Muster GmbH</Nm>
                                </Pty>
                            </Dbtr>
                            <DbtrAcct>
                                <Id>
                                    <IBAN>DE02120300000000202051</IBAN>
                                </Id>
                            </DbtrAcct>
                        </RltdPties>
                        <RmtInf>
                            <Ustrd>Rechnung 2024-001</Ustrd>
                        </RmtInf>
                    </TxDtls>
                </NtryDtls>
            </Ntry>
            <Ntry>
                <Amt Ccy="EUR">50.00</Amt>
                <CdtDbtInd>DBIT</CdtDbtInd>
                <BookgDt>
                    <DtTm>2024-01-20T08:15:00</DtTm>
                </BookgDt>
                <AddtlNtryInf>Kontofuehrungsgebuehr</AddtlNtryInf>
            </Ntry>
        </Stmt>
    </BkToCstmrStmt>
</Document>"""

MT940_TEXT = """:20:STARTUMSE
:25:10020030/DE89370400440532013000
:28C:00001/001
:60F:C240112EUR1000,00
:61:2401150115C1500,00NTRFNONREF//BANKREF-1
:86:166?00GUTSCHRIFT?20Rechnung 2024-001?21Vielen Dank?30COBADEFFXXX
?31DE02120300000000202051?32Muster GmbH
:61:2401200120D50,00NMSCNONREF
:86:805?00ENTGELT?20Kontofuehrung
:62F:C240120EUR2450,00
-"""


@pytest.fixture
def test_settings() -> Settings:
    """Settings with small caps so capping behaviour is easy to observe."""
    return Settings(
        MAX_UPLOAD_SIZE=1024 * 1024,
        MAX_WARNINGS_IN_RESPONSE=2,
        MAX_LOGGED_ROW_WARNINGS=1,
    )


@pytest_asyncio.fixture(scope="function")
async def async_client(test_settings: Settings) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client with settings override."""
    app.dependency_overrides[get_settings] = lambda: test_settings
    
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client
    
    app.dependency_overrides.clear()


@pytest.fixture
def outbank_csv() -> str:
    """Outbank export with a thousands-separated amount and a positive booking."""
    return OUTBANK_CSV


@pytest.fixture
def sparkasse_csv() -> str:
    """Sparkasse export of five rows where the third row is truncated."""
    return SPARKASSE_CSV


@pytest.fixture
def camt053_xml() -> str:
    """CAMT.053 statement with one credit and one debit entry."""
    return CAMT053_XML


@pytest.fixture
def mt940_text() -> str:
    """MT940 statement with structured German ?NN narrative sub-fields."""
    return MT940_TEXT
