"""
File parsers module.
"""

from parsers.csv_header_parser import (
    parse_csv_header,
    split_header_row,
    decode_csv_content,
)

__all__ = [
    "parse_csv_header",
    "split_header_row",
    "decode_csv_content",
]
