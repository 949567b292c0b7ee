"""Character classifiers and literal scanners.

Everything here is stateless: functions look at `text` at a cursor and
either answer a yes/no question or return what was scanned together
with the advanced cursor. The parser owns the cursor.
"""

from __future__ import annotations

import re
from typing import Optional, Tuple

from .values import Value, int_from_digits

SPACE_CHARS = ' \t\r\n'
OPERATOR_CHARS = '+-*/'
QUOTE = '"'
GROUP_OPEN = '('
GROUP_CLOSE = ')'
COMMA = ','

NUMBER_RE = re.compile(r'(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?')


def _at(text: str, pos: int) -> str:
    return text[pos] if 0 <= pos < len(text) else ''


def is_space(text: str, pos: int) -> bool:
    c = _at(text, pos)
    return c != '' and c in SPACE_CHARS


def is_digit(text: str, pos: int) -> bool:
    c = _at(text, pos)
    return '0' <= c <= '9'


def is_letter(text: str, pos: int) -> bool:
    c = _at(text, pos)
    return c.isalpha() or c == '_'


def is_quote(text: str, pos: int) -> bool:
    return _at(text, pos) == QUOTE


def is_group_open(text: str, pos: int) -> bool:
    return _at(text, pos) == GROUP_OPEN


def is_group_close(text: str, pos: int) -> bool:
    return _at(text, pos) == GROUP_CLOSE


def is_comma(text: str, pos: int) -> bool:
    return _at(text, pos) == COMMA


def is_operator(text: str, pos: int) -> bool:
    c = _at(text, pos)
    return c != '' and c in OPERATOR_CHARS


def skip_space(text: str, pos: int) -> int:
    while is_space(text, pos):
        pos += 1
    return pos


def scan_number(text: str, pos: int) -> Optional[Tuple[Value, int]]:
    """Scan the longest decimal literal at `pos`.

    Returns None if no literal starts here. Literals without a decimal
    point or exponent become Integer values, the rest Double values.
    """
    match = NUMBER_RE.match(text, pos)
    if match is None:
        return None
    raw = match.group(0)
    if '.' in raw or 'e' in raw or 'E' in raw:
        return Value.double(float(raw)), match.end()
    return Value.integer(int_from_digits(raw)), match.end()


def scan_text(text: str, pos: int) -> Optional[Tuple[Value, int]]:
    """Scan a quoted literal whose opening quote is at `pos`.

    Returns None when the closing quote is missing.
    """
    end = text.find(QUOTE, pos + 1)
    if end < 0:
        return None
    return Value.text(text[pos + 1:end]), end + 1


def scan_identifier(text: str, pos: int) -> Tuple[str, int]:
    """Scan letters/underscore followed by letters, digits or underscores."""
    end = pos
    while is_letter(text, end) or is_digit(text, end):
        end += 1
    return text[pos:end], end
