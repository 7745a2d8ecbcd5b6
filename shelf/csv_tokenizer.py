# shelf/csv_tokenizer.py
import re
from typing import List, Optional

_LINE_SPLIT_RE = re.compile(r"\r?\n")


class RowShapeError(ValueError):
    """Tokenized field count does not match the header's column count."""

    def __init__(self, expected: int, actual: int):
        super().__init__(f"expected {expected} columns, got {actual}")
        self.expected = expected
        self.actual = actual


def split_lines(text: str) -> List[str]:
    """Split feed text into logical rows, dropping blank lines."""
    return [line for line in _LINE_SPLIT_RE.split(text) if line.strip()]


def tokenize_line(line: str, expected: Optional[int] = None) -> List[str]:
    """
    Split one CSV row into trimmed field values.

    Quoted fields may contain commas, and a doubled quote inside them stands
    for one literal quote. When `expected` is given, trailing empty fields
    beyond it are dropped and any remaining mismatch raises RowShapeError.
    """
    fields: List[str] = []
    buf: List[str] = []
    i = 0
    n = len(line)
    at_field_start = True
    in_quotes = False

    while i < n:
        ch = line[i]
        if in_quotes:
            if ch == '"':
                if i + 1 < n and line[i + 1] == '"':
                    buf.append('"')
                    i += 2
                    continue
                in_quotes = False
            else:
                buf.append(ch)
        elif ch == ",":
            fields.append("".join(buf).strip())
            buf = []
            at_field_start = True
        elif at_field_start and ch == '"':
            # leading whitespace before the opening quote is not content
            buf = []
            in_quotes = True
            at_field_start = False
        else:
            buf.append(ch)
            if not ch.isspace():
                at_field_start = False
        i += 1

    fields.append("".join(buf).strip())

    if expected is not None:
        while len(fields) > expected and fields[-1] == "":
            fields.pop()
        if len(fields) != expected:
            raise RowShapeError(expected, len(fields))

    return fields


def parse_header(line: str) -> List[str]:
    # a UTF-8 byte order mark may precede the first header name
    return [name.strip().lower() for name in tokenize_line(line.lstrip("\ufeff"))]
