"""
Unit tests for the CSV header parser.

Run: pytest tests/unit/test_csv_header_parser.py -v
"""

import pytest

from parsers.csv_header_parser import (
    parse_csv_header,
    split_header_row,
    decode_csv_content,
)
from exceptions import EmptyFileError
from tests.factories import CsvFactory


class TestSplitHeaderRow:
    """Tests for split_header_row()"""

    def test_trims_whitespace(self):
        """Should trim spaces around each token."""
        assert split_header_row(" Email , First Name ,Notes") == ("Email", "First Name", "Notes")

    def test_strips_quotes(self):
        """Should remove double quotes from tokens."""
        assert split_header_row('"Email","First Name"') == ("Email", "First Name")

    def test_quotes_inside_whitespace(self):
        """Should trim before unquoting so padded quoted tokens come out clean."""
        assert split_header_row(' "Email" ') == ("Email",)

    def test_keeps_empty_tokens(self):
        """Should keep empty tokens in position."""
        assert split_header_row("Email,,Notes") == ("Email", "", "Notes")


class TestDecodeCsvContent:
    """Tests for decode_csv_content()"""

    def test_decodes_bytes(self):
        assert decode_csv_content(b"Email\n") == "Email\n"

    def test_drops_bom(self):
        """Should drop the UTF-8 byte order mark Excel adds."""
        assert decode_csv_content("\ufeffEmail".encode("utf-8")) == "Email"

    def test_passes_str_through(self):
        assert decode_csv_content("Email") == "Email"


class TestParseCsvHeader:
    """Tests for parse_csv_header()"""

    def test_header_and_row_count(self, scenario_a_csv):
        """Should return headers in order and count data rows."""
        result = parse_csv_header(scenario_a_csv, "contacts.csv")

        assert result.headers == ("Email", "First Name", "Last Name", "Notes")
        assert result.total_rows == 3
        assert result.file_name == "contacts.csv"

    def test_blank_lines_ignored(self):
        """Should not count blank or whitespace-only lines."""
        content = "Email,Notes\n\n  \nann@example.com,x\n\n\nbo@example.com,y\n"

        result = parse_csv_header(content)

        assert result.total_rows == 2

    def test_leading_blank_lines_skipped_for_header(self):
        """Should use the first non-blank line as the header."""
        result = parse_csv_header("\n\nEmail,Notes\nann@example.com,x\n")

        assert result.headers == ("Email", "Notes")
        assert result.total_rows == 1

    def test_crlf_line_endings(self):
        """Should handle Windows line endings."""
        result = parse_csv_header(b"Email,Notes\r\nann@example.com,x\r\n")

        assert result.headers == ("Email", "Notes")
        assert result.total_rows == 1

    def test_header_only(self):
        """Should allow a file with no data rows."""
        result = parse_csv_header(CsvFactory.create(["Email"], rows=0))

        assert result.headers == ("Email",)
        assert result.total_rows == 0

    def test_all_empty_header_tokens_not_an_error(self):
        """Should treat a header row of empty tokens as present."""
        result = parse_csv_header(',"",\nx,y,z\n')

        assert result.headers == ("", "", "")
        assert result.total_rows == 1

    def test_empty_file_raises(self):
        """Should raise EmptyFileError with zero non-blank lines."""
        with pytest.raises(EmptyFileError) as exc_info:
            parse_csv_header(b"", "empty.csv")

        assert exc_info.value.code == "EMPTY_FILE"
        assert exc_info.value.details["file_name"] == "empty.csv"

    def test_whitespace_only_file_raises(self):
        """Should raise EmptyFileError when every line is blank."""
        with pytest.raises(EmptyFileError):
            parse_csv_header("\n   \n\t\n")
