"""
Unit Tests for the Delimited-Line Tokenizer
"""
from bankimport.services.bank.parsers.tokenizer import (
    header_columns,
    parse_csv_line,
    split_semicolon_line,
    tokenize,
)


class TestParseCSVLine:
    """Tests for the quote-aware comma tokenizer."""
    
    def test_quoted_comma_is_kept(self):
        """Test a comma inside quotes does not split the field."""
        assert parse_csv_line('a,"b,c",d') == ["a", "b,c", "d"]
    
    def test_fields_are_trimmed(self):
        """Test whitespace around fields is removed."""
        assert parse_csv_line(" a , b ,c") == ["a", "b", "c"]
    
    def test_empty_fields(self):
        """Test consecutive commas yield empty fields."""
        assert parse_csv_line("a,,c,") == ["a", "", "c", ""]
    
    def test_quoted_amount_with_decimal_comma(self):
        """Test a German amount quoted inside a comma file."""
        assert parse_csv_line('2024-01-15,"-1.234,56",Miete') == ["2024-01-15", "-1.234,56", "Miete"]


class TestSplitSemicolonLine:
    """Tests for the semicolon tokenizer."""
    
    def test_strips_one_layer_of_quotes(self):
        """Test surrounding quotes are removed per field."""
        assert split_semicolon_line('"15.01.2024";"Miete";"-850,00"') == ["15.01.2024", "Miete", "-850,00"]
    
    def test_trailing_delimiter(self):
        """Test a trailing semicolon yields an empty last field."""
        assert split_semicolon_line("a;b;") == ["a", "b", ""]


class TestTokenize:
    """Tests for delimiter dispatch."""
    
    def test_semicolon(self):
        """Test semicolon dispatch."""
        assert tokenize("a;b", ";") == ["a", "b"]
    
    def test_comma(self):
        """Test comma dispatch."""
        assert tokenize('a,"b;c"', ",") == ["a", "b;c"]
    
    def test_header_columns_are_lowercased(self):
        """Test header columns are normalized for matching."""
        assert header_columns('"Buchungstag";"Betrag"') == ["buchungstag", "betrag"]
