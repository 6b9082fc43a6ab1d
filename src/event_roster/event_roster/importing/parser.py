from __future__ import annotations

import logging
import re
from typing import List, Optional, Sequence

from ..core.constants import IDENTIFIER_HEADER, MAX_IDENTIFIER_LENGTH
from ..core.exceptions import FormatError
from .entity import EntityConfig
from .model import ParsedRow, ParseResult

logger = logging.getLogger(__name__)

_LINE_SPLIT = re.compile(r"\r\n|\n")

# One field followed by a comma or end of line: either a double-quoted span
# ("" escapes a quote) or a run of characters without commas or quotes.
_FIELD = re.compile(r'[ \t]*(?:"((?:[^"]|"")*)"[ \t]*|([^,"]*))(,|\Z)')


def normalize_header(name: str) -> str:
    return re.sub(r"\s+", "", name).lower()


def tokenize_line(line: str) -> Optional[List[str]]:
    """Split one CSV line into trimmed values.

    Returns None when the line does not match the field grammar, e.g. an
    unterminated quote or a stray quote inside a bare field.
    """
    values: List[str] = []
    pos = 0
    while True:
        m = _FIELD.match(line, pos)
        if m is None:
            return None
        quoted, bare, sep = m.groups()
        if quoted is not None:
            values.append(quoted.replace('""', '"').strip())
        else:
            values.append(bare.strip())
        if not sep:
            return values
        pos = m.end()


def _identifier(headers: Sequence[str], values: Sequence[str]) -> str:
    for header, value in zip(headers, values):
        if header == IDENTIFIER_HEADER:
            return value
    return ""


def _required_missing(headers: Sequence[str], entity: EntityConfig) -> List[str]:
    present = set(headers)
    return [h for h in entity.required_fields if h not in present]


def parse_rows(text: str, entity: EntityConfig) -> ParseResult:
    lines = _LINE_SPLIT.split(text)
    numbered = [(i + 1, line) for i, line in enumerate(lines) if line.strip()]
    if len(numbered) < 2:
        raise FormatError(
            "The CSV file appears to be empty or contains only a header row."
        )

    header_line_no, header_line = numbered[0]
    raw_headers = tokenize_line(header_line)
    if raw_headers is None:
        raise FormatError(f"Could not read the header row (line {header_line_no}).")
    headers = tuple(normalize_header(h) for h in raw_headers)

    missing = _required_missing(headers, entity)
    if missing:
        raise FormatError(
            f"Missing required column(s): {', '.join(sorted(missing))}.",
            missing_headers=sorted(missing),
        )

    rows: List[ParsedRow] = []
    malformed = 0
    width = len(headers)
    for line_no, line in numbered[1:]:
        values = tokenize_line(line)
        if values is not None and len(values) > width and any(values[width:]):
            values = None
        elif values is not None and len(_identifier(headers, values)) > MAX_IDENTIFIER_LENGTH:
            values = None
        if values is None:
            malformed += 1
            logger.warning("Skipping malformed CSV line %d for %s", line_no, entity.label)
            continue
        rows.append(ParsedRow(values=dict(zip(headers, values)), line_number=line_no))

    if not rows:
        raise FormatError(
            f"No valid data found: all {malformed} data line(s) were incorrectly formatted."
        )

    logger.info(
        "Parsed %d %s row(s) (%d malformed line(s) skipped)", len(rows), entity.label, malformed
    )
    return ParseResult(headers=headers, rows=tuple(rows), skipped_malformed=malformed)
