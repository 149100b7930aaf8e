"""Append a line tag to a single line of a node body."""

import re

from yarntag.errors import LineIndexOutOfRangeError

LINE_BREAK_RE = re.compile(r"\r\n|\n")


def _split_checked(body: str, line_number: int):
    lines = LINE_BREAK_RE.split(body)
    if not 1 <= line_number <= len(lines):
        raise LineIndexOutOfRangeError(
            f"line {line_number} out of range (body has {len(lines)} lines)"
        )
    return lines


def get_line(body: str, line_number: int) -> str:
    """Return line ``line_number`` (1-based) of ``body`` exactly as written."""
    return _split_checked(body, line_number)[line_number - 1]


def add_tag_to_line(body: str, line_number: int, tag: str) -> str:
    """Return ``body`` with `` #<tag>`` appended to line ``line_number``.

    Lines are 1-based. Accepts CRLF or LF breaks and always joins with LF.

    Raises:
        LineIndexOutOfRangeError: the body has no such line.
    """
    lines = _split_checked(body, line_number)
    lines[line_number - 1] = f"{lines[line_number - 1]} #{tag}"
    return "\n".join(lines)
