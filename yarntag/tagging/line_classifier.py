"""Decide which strings in a compiled script still need a line tag."""

from typing import Dict, Optional, Tuple

from yarntag.compiler.compiler import LineInfo
from yarntag.loader.node_info import NodeInfo

DEFAULT_RAW_TEXT_TAG = "rawText"


def find_untagged_lines(string_table: Dict[str, LineInfo],
                        tag_prefix: str = "line:") -> Dict[str, LineInfo]:
    """Filter the string info table to lines without a line id.

    Keeps the table's order. An empty result means the file has nothing
    to tag.
    """
    return {
        key: info for key, info in string_table.items()
        if not key.startswith(tag_prefix)
    }


def is_line_eligible(node: NodeInfo, only_use_tag: Optional[str] = None,
                     raw_text_tag: str = DEFAULT_RAW_TEXT_TAG) -> Tuple[bool, str]:
    """Check whether lines in ``node`` may be tagged. Returns (ok, reason)."""
    # rawText nodes are exported whole, so their lines never get ids
    if node.has_tag(raw_text_tag):
        return False, "raw_text"
    if only_use_tag is not None and not node.has_tag(only_use_tag):
        return False, "filtered"
    return True, ""
