"""
Quote-aware CSV line splitting for administrator bulk uploads.
"""

import re
from typing import List, Tuple

QUOTE = '"'
DELIMITER = ","
LINE_BREAK = re.compile(r"\r\n|\n|\r")


def parse_csv_line(line: str) -> List[str]:
    """
    Split one CSV line into trimmed fields.

    - A field may be wrapped in double quotes; ``""`` inside quotes is a literal quote.
    - Commas inside quotes do not split the field.
    - A trailing comma produces an empty last field.
    - An unterminated quote consumes the rest of the line.
    """
    fields: List[str] = []
    current: List[str] = []
    in_quotes = False
    i = 0
    length = len(line)

    while i < length:
        ch = line[i]
        if in_quotes:
            if ch == QUOTE:
                if i + 1 < length and line[i + 1] == QUOTE:
                    current.append(QUOTE)
                    i += 1
                else:
                    in_quotes = False
            else:
                current.append(ch)
        elif ch == QUOTE:
            in_quotes = True
        elif ch == DELIMITER:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
        i += 1

    fields.append("".join(current).strip())
    return fields


def split_csv_lines(text: str) -> List[Tuple[int, str]]:
    """
    Split an upload body into (line_number, line) pairs, 1-based, skipping blank
    lines. BOM and CR/LF tolerant.
    """
    if text.startswith("\ufeff"):
        text = text[1:]
    return [
        (number, line)
        for number, line in enumerate(LINE_BREAK.split(text), start=1)
        if line.strip()
    ]
