"""
Unit Tests for the MT940 Parser

Tests cover:
- Credit/debit marks and amounts
- Structured German ?NN narrative sub-fields
- SWIFT style /NAME/ and /IBAN/ tags
- Reference extraction from the :61: line
"""
from decimal import Decimal

from bankimport.services.bank.parsers import FileKind, MT940Parser


class TestMT940Detection:
    """Tests for MT940 identification."""
    
    def test_can_parse_mt940(self, mt940_text):
        """Test that parser correctly identifies MT940 files."""
        parser = MT940Parser()
        assert parser.can_parse(mt940_text, "umsaetze.sta") is True
        assert parser.get_format_name() == "MT940 (SWIFT)"
    
    def test_cannot_parse_non_mt940(self):
        """Test that parser rejects non-MT940 files."""
        parser = MT940Parser()
        assert parser.can_parse("date,amount,description\n2024-01-15,123.45,Test", "statement.csv") is False


class TestMT940Parsing:
    """Tests for :61:/:86: extraction."""
    
    def test_parse_statement(self, mt940_text):
        """Test a German statement with two lines."""
        result = MT940Parser().parse_text(mt940_text)
        
        assert result.file_kind == FileKind.MT940
        assert result.account_iban == "DE89370400440532013000"
        assert len(result.transactions) == 2
        
        credit, debit = result.transactions
        assert credit.date == "2024-01-15"
        assert credit.value_date == "2024-01-15"
        assert credit.amount == Decimal("1500.00")
        assert "Rechnung 2024-001" in credit.description
        assert "?" not in credit.description
        assert credit.counterpart_name == "Muster GmbH"
        assert credit.counterpart_iban == "DE02120300000000202051"
        assert credit.reference == "BANKREF-1"
        
        assert debit.date == "2024-01-20"
        assert debit.amount == Decimal("-50.00")
        assert debit.reference == ""
        assert debit.counterpart_name is None
    
    def test_debit_is_negative_credit_is_positive(self):
        """Test D gives a negative and C a positive amount."""
        text = """:20:STATEMENT-002
:25:DE89370400440532013000
:61:2401200120D123,45NMSCNONREF
:86:/REMI/Bank fee
:61:2401210121C10,NMSCNONREF
:86:/REMI/Refund
:62F:C240121EUR886,55"""
        transactions = MT940Parser().parse_text(text).transactions
        
        assert transactions[0].amount == Decimal("-123.45")
        assert transactions[1].amount == Decimal("10")
    
    def test_reversal_marks(self):
        """Test RD and RC reversal marks keep their direction."""
        text = """:20:STMT
:61:240120RD5,00NMSCNONREF
:86:Storno
:61:240121RC7,50NMSCNONREF
:86:Storno"""
        transactions = MT940Parser().parse_text(text).transactions
        assert [tx.amount for tx in transactions] == [Decimal("-5.00"), Decimal("7.50")]
    
    def test_swift_tags(self):
        """Test /NAME/ and /IBAN/ narratives."""
        text = """:20:STATEMENT-001
:25:NL91ABNA0417164300
:60F:C240115EUR1000,00
:61:2401150115C123,45NMSCNONREF//REF-123
:86:/IBAN/NL12BANK0123456789/NAME/John Doe/REMI/Invoice payment 2024-001
:62F:C240115EUR1123,45"""
        result = MT940Parser().parse_text(text)
        tx = result.transactions[0]
        
        assert result.account_iban == "NL91ABNA0417164300"
        assert tx.counterpart_name == "John Doe"
        assert tx.counterpart_iban == "NL12BANK0123456789"
        assert tx.reference == "REF-123"
        assert "Invoice payment 2024-001" in tx.description
    
    def test_customer_reference(self):
        """Test the customer reference is used when there is no bank reference."""
        text = """:20:STMT
:61:2401150115D20,00NTRFKREF-77
:86:Lastschrift"""
        assert MT940Parser().parse_text(text).transactions[0].reference == "KREF-77"
    
    def test_multiline_narrative_is_flattened(self):
        """Test continuation lines collapse into one description."""
        text = """:20:STMT
:61:2401150115D20,00NMSCNONREF
:86:105?00BASISLASTSCHRIFT?20Stromabschlag
?21Januar 2024?32Stadtwerke
:62F:C240115EUR980,00"""
        tx = MT940Parser().parse_text(text).transactions[0]
        assert tx.description == "105 BASISLASTSCHRIFT Stromabschlag Januar 2024 Stadtwerke"
        assert tx.counterpart_name == "Stadtwerke"

    def test_narrative_stops_at_block_trailer(self):
        """Test a trailer with checksum block ends the narrative before the next message."""
        text = """{1:F01BANKDEFFXXXX}{4:
:20:STMT
:61:2401150115D850,00NMSCNONREF
:86:Miete
-}{5:{CHK:123}}
{1:F01BANKDEFFXXXX}{4:
:20:STMT2
:61:2401160116C100,00NMSCNONREF
:86:Gutschrift
-}"""
        first, second = MT940Parser().parse_text(text).transactions
        assert first.description == "Miete"
        assert second.description == "Gutschrift"

    def test_two_digit_year_pivot(self):
        """Test booking dates use the 50-year pivot."""
        text = """:20:STMT
:61:9912311231C1,00NMSCNONREF
:86:Alt"""
        assert MT940Parser().parse_text(text).transactions[0].date == "1999-12-31"
    
    def test_line_without_narrative_is_ignored(self):
        """Test a :61: line without :86: produces nothing."""
        text = """:20:STMT
:61:2401150115D20,00NMSCNONREF
:62F:C240115EUR980,00"""
        assert MT940Parser().parse_text(text).transactions == []
    
    def test_garbage_input(self):
        """Test arbitrary text yields an empty result."""
        result = MT940Parser().parse_text("not a statement")
        assert result.transactions == []
        assert result.account_iban is None
