"""
CSV codec for bulk record import/export.

Responsibilities:
- tokenize one physical line into fields (quote aware)
- split a document into header + rows
- escape a single field for output
- serialize header + records back to text the tokenizer can read
"""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Mapping

from .errors import InsufficientDataError
from .rules import (
    DELIMITER,
    ESCAPED_QUOTE,
    MIN_DOCUMENT_LINES,
    QUOTE,
    ROW_SEPARATOR,
    SEQUENCE_JOINER,
    SPECIAL_CHARACTERS,
)

logger = logging.getLogger(__name__)


class ScanState(Enum):
    UNQUOTED = "unquoted"
    QUOTED = "quoted"


@dataclass
class Document:
    headers: List[str]
    rows: List[List[str]] = field(default_factory=list)

    def records(self) -> Iterator[Dict[str, str]]:
        """Positional header -> cell dicts; ragged rows truncate to the shorter side."""
        for row in self.rows:
            yield dict(zip(self.headers, row))

    def ragged_rows(self) -> List[int]:
        """1-based numbers of data rows whose width differs from the header."""
        width = len(self.headers)
        return [i + 1 for i, row in enumerate(self.rows) if len(row) != width]


# --- Decode path ---


def tokenize_line(line: str) -> List[str]:
    """
    Split one physical line into fields.

    Rules:
    - `""` inside a quoted region is a literal quote.
    - any other quote toggles the quoted state.
    - a delimiter only separates fields outside quotes.
    - every field is stripped, quoted or not.
    - an unterminated quote is not an error: the rest of the line is one field.
    """
    fields: List[str] = []
    buf: List[str] = []
    state = ScanState.UNQUOTED
    i = 0
    n = len(line)

    while i < n:
        ch = line[i]
        if ch == QUOTE:
            if state is ScanState.QUOTED and line[i + 1 : i + 2] == QUOTE:
                buf.append(QUOTE)
                i += 2
                continue
            state = ScanState.UNQUOTED if state is ScanState.QUOTED else ScanState.QUOTED
        elif ch == DELIMITER and state is ScanState.UNQUOTED:
            fields.append("".join(buf).strip())
            buf = []
        else:
            buf.append(ch)
        i += 1

    fields.append("".join(buf).strip())
    return fields


def split_lines(text: str) -> List[str]:
    """Physical lines of `text`, with empty and whitespace-only lines removed."""
    lines = text.split(ROW_SEPARATOR)
    kept = [line for line in lines if line.strip()]
    if len(kept) != len(lines):
        logger.debug("dropped %d blank line(s)", len(lines) - len(kept))
    return kept


def decode(text: str) -> Document:
    """
    Parse a whole document into headers and rows.

    Lines are split before tokenizing, so a quoted value holding a newline
    comes back as two broken rows. Row width is not checked against the header.
    """
    lines = split_lines(text)
    if len(lines) < MIN_DOCUMENT_LINES:
        raise InsufficientDataError(len(lines))

    headers = tokenize_line(lines[0])
    rows = [tokenize_line(line) for line in lines[1:]]
    logger.debug("decoded %d column(s), %d row(s)", len(headers), len(rows))
    return Document(headers=headers, rows=rows)


# --- Encode path ---


def escape_field(value: str) -> str:
    if any(ch in value for ch in SPECIAL_CHARACTERS):
        return QUOTE + value.replace(QUOTE, ESCAPED_QUOTE) + QUOTE
    return value


def normalize_value(value: Any) -> str:
    """
    Text form of a record value, before escaping.

    None -> "", bool -> true/false, dates -> ISO-8601, sequences -> elements
    joined with ", ", everything else -> str().
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dt.datetime, dt.date, dt.time)):
        return value.isoformat()
    if isinstance(value, (str, bytes, bytearray)):
        return value if isinstance(value, str) else value.decode("utf-8", errors="replace")
    if isinstance(value, (list, tuple, set, frozenset)):
        return SEQUENCE_JOINER.join(normalize_value(item) for item in value)
    return str(value)


def encode_row(values: Iterable[str]) -> str:
    return DELIMITER.join(escape_field(v) for v in values)


def encode(headers: Iterable[str], records: Iterable[Mapping[str, Any]]) -> str:
    """
    Serialize records under `headers`.

    Output: escaped header line, one line per record, LF separated,
    no trailing newline. Missing keys render as empty fields.
    """
    headers = list(headers)
    lines = [encode_row(headers)]
    for record in records:
        lines.append(encode_row(normalize_value(record.get(h)) for h in headers))
    logger.debug("encoded %d column(s), %d row(s)", len(headers), len(lines) - 1)
    return ROW_SEPARATOR.join(lines)
