"""
Tests for quote-aware CSV line parsing.
"""

from intake.csv_parser import parse_csv_line, split_csv_lines


def test_quoted_commas_and_escaped_quotes():
    assert parse_csv_line('a,"b,c","d""e",f') == ["a", "b,c", 'd"e', "f"]


def test_plain_fields_are_trimmed():
    assert parse_csv_line("  Jane Doe , jane@example.com ,1") == ["Jane Doe", "jane@example.com", "1"]


def test_trailing_comma_yields_empty_last_field():
    assert parse_csv_line("a,b,") == ["a", "b", ""]


def test_empty_line_is_one_empty_field():
    assert parse_csv_line("") == [""]


def test_consecutive_commas_yield_empty_fields():
    assert parse_csv_line("a,,c") == ["a", "", "c"]


def test_unterminated_quote_consumes_rest_of_line():
    assert parse_csv_line('a,"b,c,d') == ["a", "b,c,d"]


def test_quoted_empty_field():
    assert parse_csv_line('"",x') == ["", "x"]


def test_split_lines_keeps_line_numbers_and_skips_blanks():
    text = "\ufeffh1,h2\r\n\r\nv1,v2\nv3,v4\r"
    assert split_csv_lines(text) == [(1, "h1,h2"), (3, "v1,v2"), (4, "v3,v4")]
