"""
CSV tokenizer for bulk product uploads.

Hand-rolled single-pass scanner so that quoting behaves the same way the
admin template generator writes it:

- Outside quotes: "," ends a field, LF or CRLF ends a row
- Inside quotes: "" is a literal quote, everything else is literal
- Whitespace outside quotes is trimmed, quoted text is kept as-is
- Rows with only empty fields are dropped
- Rows whose first field starts with "#" are comments (template reference data)

Malformed quoting never raises; an unterminated quote runs to end of input.
"""

from dataclasses import dataclass, field
from typing import Optional
import structlog

from exceptions import CSVParseError

logger = structlog.get_logger(__name__)

COMMENT_PREFIX = "#"


@dataclass
class RawRow:
    """One tokenized row."""
    line: int
    fields: list[str] = field(default_factory=list)

    def get(self, index: int) -> str:
        """Field at index, or "" when the row is shorter."""
        if 0 <= index < len(self.fields):
            return self.fields[index]
        return ""

    @property
    def is_blank(self) -> bool:
        return all(f == "" for f in self.fields)

    @property
    def is_comment(self) -> bool:
        return bool(self.fields) and self.fields[0].startswith(COMMENT_PREFIX)


class _FieldBuffer:
    """Accumulates one field, remembering which span came from inside quotes."""

    def __init__(self):
        self.chars: list[str] = []
        self.quote_start: Optional[int] = None
        self.quote_end: Optional[int] = None

    def append(self, char: str) -> None:
        self.chars.append(char)

    def open_quote(self) -> None:
        if self.quote_start is None:
            self.quote_start = len(self.chars)

    def close_quote(self) -> None:
        self.quote_end = len(self.chars)

    def __bool__(self) -> bool:
        return bool(self.chars) or self.quote_start is not None

    def value(self) -> str:
        text = "".join(self.chars)
        if self.quote_start is None:
            return text.strip()
        end = self.quote_end if self.quote_end is not None else len(text)
        return (
            text[:self.quote_start].lstrip()
            + text[self.quote_start:end]
            + text[end:].rstrip()
        )


def read_csv_text(content: bytes) -> str:
    """
    Decode uploaded CSV bytes as UTF-8.

    A leading byte-order mark is dropped.

    Raises:
        CSVParseError: If content is not valid UTF-8
    """
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        logger.warning("csv_decode_failed", error=str(e), position=e.start)
        raise CSVParseError(
            message="Failed to read CSV file as UTF-8 text",
            details={"original_error": str(e)}
        )


def tokenize_csv(text: str, skip_comments: bool = True) -> list[RawRow]:
    """
    Split CSV text into rows of fields.

    Args:
        text: Full file content
        skip_comments: Drop rows whose first field starts with "#"

    Returns:
        Rows in file order, each tagged with its starting line number
    """
    rows: list[RawRow] = []
    current = RawRow(line=1)
    buffer = _FieldBuffer()
    in_quotes = False
    line = 1

    def finish_row() -> None:
        nonlocal current
        if current.is_blank:
            pass
        elif skip_comments and current.is_comment:
            logger.debug("csv_comment_skipped", line=current.line)
        else:
            rows.append(current)
        current = RawRow(line=line)

    i = 0
    length = len(text)
    while i < length:
        char = text[i]
        next_char = text[i + 1] if i + 1 < length else ""

        if in_quotes:
            if char == '"' and next_char == '"':
                buffer.append('"')
                i += 1
            elif char == '"':
                in_quotes = False
                buffer.close_quote()
            else:
                if char == "\n":
                    line += 1
                buffer.append(char)
        elif char == '"':
            in_quotes = True
            buffer.open_quote()
        elif char == ",":
            current.fields.append(buffer.value())
            buffer = _FieldBuffer()
        elif char == "\n" or (char == "\r" and next_char == "\n"):
            if char == "\r":
                i += 1
            current.fields.append(buffer.value())
            buffer = _FieldBuffer()
            line += 1
            finish_row()
        else:
            buffer.append(char)
        i += 1

    # Last row without trailing newline
    if buffer or current.fields:
        current.fields.append(buffer.value())
        finish_row()

    logger.debug("csv_tokenized", rows=len(rows), lines=line)
    return rows


def quote_field(value: str) -> str:
    """Quote a value for CSV output, doubling embedded quotes."""
    return '"' + value.replace('"', '""') + '"'
