"""Split raw script file text into NodeInfo records.

Works on the text alone and never compiles anything, so its view of a
node body is exactly what is on disk.

Text format:

    title: Start
    tags: intro
    ---
    Hello there
    ===

JSON format: a list of objects with ``title``, ``body`` and an optional
space-separated ``tags`` string; any other fields are kept as-is.
"""

import json
import re
from pathlib import Path
from typing import List

from yarntag.errors import NodeParseError
from yarntag.loader.node_format import NodeFormat
from yarntag.loader.node_info import NodeInfo

HEADER_RE = re.compile(r"^([^:]+):(.*)$")
HEADER_END = "---"
NODE_END = "==="


def _split_tags(value) -> List[str]:
    if isinstance(value, list):
        return [str(t) for t in value if t is not None and str(t)]
    return str(value or "").split()


def _node_from_headers(headers, body_lines, line_no) -> NodeInfo:
    title = str(headers.get("title", "")).strip()
    if not title:
        raise NodeParseError(f"line {line_no}: node has no title")
    return NodeInfo(
        title=title,
        body="\n".join(body_lines),
        tags=_split_tags(headers.get("tags", "")),
        headers=headers,
    )


def _parse_text(text: str) -> List[NodeInfo]:
    nodes = []
    headers = {}
    body_lines = None
    header_start = 0

    for line_no, raw in enumerate(text.replace("\r\n", "\n").split("\n"), start=1):
        stripped = raw.strip()

        if body_lines is None:
            if stripped == HEADER_END:
                body_lines = []
            elif not stripped:
                continue
            elif stripped == NODE_END:
                raise NodeParseError(f"line {line_no}: '{NODE_END}' before '{HEADER_END}'")
            else:
                m = HEADER_RE.match(raw)
                if not m:
                    raise NodeParseError(f"line {line_no}: expected 'key: value' header, got {raw!r}")
                if not headers:
                    header_start = line_no
                # Raw value kept so untouched headers are written back byte for byte
                headers[m.group(1).strip()] = m.group(2)
            continue

        if stripped == NODE_END:
            nodes.append(_node_from_headers(headers, body_lines, header_start))
            headers = {}
            body_lines = None
        else:
            body_lines.append(raw)

    if body_lines is not None:
        # Last node is allowed to omit its closing '==='
        nodes.append(_node_from_headers(headers, body_lines, header_start))
    elif headers:
        raise NodeParseError(f"line {header_start}: node header without '{HEADER_END}'")

    return nodes


def _parse_json(text: str) -> List[NodeInfo]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise NodeParseError(f"invalid JSON: {e}") from e
    if not isinstance(data, list):
        raise NodeParseError("JSON node file must contain a list of nodes")

    nodes = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise NodeParseError(f"node {index}: expected an object")
        title = item.get("title")
        if title is not None and not isinstance(title, str):
            raise NodeParseError(f"node {index}: title must be a string")
        title = (title or "").strip()
        if not title:
            raise NodeParseError(f"node {index}: node has no title")
        body = item.get("body")
        if body is not None and not isinstance(body, str):
            raise NodeParseError(f"node '{title}': body must be a string")
        nodes.append(NodeInfo(
            title=title,
            body=body or "",
            tags=_split_tags(item.get("tags")),
            headers=dict(item),
        ))
    return nodes


def get_nodes_from_text(text: str, fmt: NodeFormat, file_name: str = "") -> List[NodeInfo]:
    """Extract the node list from raw file text in the given format."""
    if fmt == NodeFormat.TEXT:
        return _parse_text(text)
    if fmt == NodeFormat.JSON:
        return _parse_json(text)
    if fmt == NodeFormat.SINGLE_NODE:
        name = Path(file_name).name if file_name else "Start"
        title = name[:-len(".node")] if name.lower().endswith(".node") else Path(name).stem
        return [NodeInfo(title=title, body=text.replace("\r\n", "\n"))]
    raise NodeParseError(f"cannot extract nodes from {fmt.value} data")
