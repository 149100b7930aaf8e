"""Serialize a node collection back into its on-disk format."""

import json
from typing import Iterable

from yarntag.errors import UnsupportedFormatError
from yarntag.loader.node_format import NodeFormat
from yarntag.loader.node_info import NodeInfo


def _text_headers(node: NodeInfo) -> dict:
    if node.headers:
        return node.headers
    return {"title": f" {node.title}", "tags": f" {' '.join(node.tags)}"}


def convert_to_text(nodes: Iterable[NodeInfo]) -> str:
    lines = []
    for node in nodes:
        for key, value in _text_headers(node).items():
            lines.append(f"{key}:{value}")
        lines.append("---")
        if node.body:
            lines.append(node.body)
        lines.append("===")
    return "\n".join(lines) + "\n"


def convert_to_json(nodes: Iterable[NodeInfo]) -> str:
    records = []
    for node in nodes:
        record = dict(node.headers) if node.headers else {
            "title": node.title,
            "tags": " ".join(node.tags),
        }
        # A null body that gained no lines stays null
        if node.body or record.get("body", "") is not None:
            record["body"] = node.body
        records.append(record)
    return json.dumps(records, indent=2, ensure_ascii=False)


def convert_nodes(nodes: Iterable[NodeInfo], fmt: NodeFormat) -> str:
    """Render ``nodes`` in ``fmt``; only JSON and text can be written."""
    if fmt == NodeFormat.TEXT:
        return convert_to_text(nodes)
    if fmt == NodeFormat.JSON:
        return convert_to_json(nodes)
    raise UnsupportedFormatError(f"cannot write nodes as {fmt.value}")
