#!/usr/bin/env python3
"""Script compiler — validates node bodies and extracts localizable strings.

Each node body is compiled line by line (line numbers are 1-based within
the body):

    blank lines, // comments      no string
    <<command>>                   no string; if/elseif/else/endif nesting checked
    [[Option text|Target]]        string "Option text"
    [[Target]]                    no string (plain jump)
    -> Option text <<if $x>>      string "Option text"
    anything else                 dialogue string

Trailing ``#hashtag`` tokens are line metadata. A ``#line:xxxxxx`` hashtag
is the line's stable id; lines without one are keyed
``<file stem>-<node title>-<n>`` in the string info table.

Usage:
    python -m yarntag.compiler.compiler Story.yarn.txt --json
"""

import argparse
import json
import re
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from yarntag.config import DEFAULTS, load_config
from yarntag.errors import CompileError, NodeParseError, UnsupportedFormatError, YarnTagError
from yarntag.loader.node_format import NodeFormat, get_format_from_file_name
from yarntag.loader.node_info import NodeInfo
from yarntag.loader.node_parser import get_nodes_from_text

COMMAND_RE = re.compile(r"<<(.*?)>>")
OPTION_RE = re.compile(r"\[\[(.*?)\]\]")
COMMAND_LINE_RE = re.compile(r"^(?:\s*<<.*?>>)+\s*$")
OPTION_LINE_RE = re.compile(r"^(?:\s*\[\[.*?\]\])+\s*$")
TRAILING_HASHTAG_RE = re.compile(r"(?:^|\s+)#([^\s#]+)$")
TRAILING_CONDITION_RE = re.compile(r"\s*<<.*?>>\s*$")

COMPILABLE_FORMATS = (NodeFormat.TEXT, NodeFormat.JSON, NodeFormat.SINGLE_NODE)


@dataclass
class LineInfo:
    """Metadata for one localizable string in a compiled script."""
    line_id: str
    node_name: str
    line_number: int
    text: str
    file_name: str = ""
    line_tags: List[str] = field(default_factory=list)


@dataclass
class CompiledScript:
    """Result of compiling one file."""
    file_name: str
    nodes: List[NodeInfo] = field(default_factory=list)
    string_table: Dict[str, LineInfo] = field(default_factory=dict)

    def get_string_info_table(self) -> Dict[str, LineInfo]:
        """Return {line id: LineInfo} in file order."""
        return dict(self.string_table)


def _split_hashtags(content: str):
    """Split trailing hashtags off a line. Returns (content, [tags])."""
    tags = []
    while True:
        m = TRAILING_HASHTAG_RE.search(content)
        if not m:
            break
        tags.insert(0, m.group(1))
        content = content[:m.start()]
    return content.strip(), tags


class _BodyCompiler:
    """Compiles the bodies of one file, accumulating its string table."""

    def __init__(self, file_name: str, tag_prefix: str):
        self.file_name = file_name
        self.tag_prefix = tag_prefix
        name = Path(file_name).name if file_name else "script"
        self.stem = name.split(".")[0] or "script"
        self.table: Dict[str, LineInfo] = {}
        self._untagged_count = 0

    def _error(self, message, node=None, line_number=None):
        return CompileError(message, self.file_name, node, line_number)

    def _check_balanced(self, content, node, line_number):
        # Stray closers are plain text; only an opener without a closer is an error
        if "<<" in COMMAND_RE.sub("", content):
            raise self._error("unterminated command", node, line_number)
        if "[[" in OPTION_RE.sub("", content):
            raise self._error("unterminated option link", node, line_number)

    def _handle_commands(self, content, stack, node, line_number):
        for inner in COMMAND_RE.findall(content):
            words = inner.split()
            if not words:
                raise self._error("empty command", node, line_number)
            keyword = words[0]
            if keyword == "if":
                if len(words) < 2:
                    raise self._error("<<if>> without a condition", node, line_number)
                stack.append(line_number)
            elif keyword in ("elseif", "else"):
                if not stack:
                    raise self._error(f"<<{keyword}>> without <<if>>", node, line_number)
            elif keyword == "endif":
                if not stack:
                    raise self._error("<<endif>> without <<if>>", node, line_number)
                stack.pop()

    def _option_text(self, content, node, line_number) -> Optional[str]:
        text = None
        for inner in OPTION_RE.findall(content):
            if "|" not in inner:
                if not inner.strip():
                    raise self._error("option link has no target", node, line_number)
                continue
            label, target = inner.split("|", 1)
            if not label.strip():
                raise self._error("option link has no text", node, line_number)
            if not target.strip():
                raise self._error("option link has no target", node, line_number)
            if text is None:
                text = label.strip()
        return text

    def _add_string(self, text, tags, node, line_number):
        line_id = next((t for t in tags if t.startswith(self.tag_prefix)), None)
        line_tags = [t for t in tags if t != line_id]
        if line_id is None:
            self._untagged_count += 1
            line_id = f"{self.stem}-{node}-{self._untagged_count}"
        elif line_id in self.table:
            other = self.table[line_id]
            raise self._error(
                f"duplicate line id '{line_id}' (also in node '{other.node_name}', "
                f"line {other.line_number})", node, line_number)
        self.table[line_id] = LineInfo(
            line_id=line_id,
            node_name=node,
            line_number=line_number,
            text=text,
            file_name=self.file_name,
            line_tags=line_tags,
        )

    def compile_node(self, node: NodeInfo):
        stack = []
        lines = node.body.replace("\r\n", "\n").split("\n")
        for line_number, raw in enumerate(lines, start=1):
            stripped = raw.strip()
            if not stripped or stripped.startswith("//"):
                continue

            content, tags = _split_hashtags(stripped)
            if not content:
                continue
            self._check_balanced(content, node.title, line_number)

            if COMMAND_LINE_RE.match(content):
                self._handle_commands(content, stack, node.title, line_number)
                continue

            if OPTION_LINE_RE.match(content):
                text = self._option_text(content, node.title, line_number)
                if text is not None:
                    self._add_string(text, tags, node.title, line_number)
                continue

            if content.startswith("->"):
                text = TRAILING_CONDITION_RE.sub("", content[2:]).strip()
                if not text:
                    raise self._error("shortcut option has no text", node.title, line_number)
                self._add_string(text, tags, node.title, line_number)
                continue

            self._add_string(content, tags, node.title, line_number)

        if stack:
            raise self._error("<<if>> without <<endif>>", node.title, stack[-1])


def compile_text(text: str, fmt: NodeFormat, file_name: str = "", config=None) -> CompiledScript:
    """Compile raw file text. Raises CompileError on any script error."""
    if fmt not in COMPILABLE_FORMATS:
        raise UnsupportedFormatError(f"cannot compile {fmt.value} files")
    tag_prefix = (config or DEFAULTS)["tagging"]["tag_prefix"]

    try:
        nodes = get_nodes_from_text(text, fmt, file_name)
    except NodeParseError as e:
        raise CompileError(str(e), file_name) from e

    seen = set()
    for node in nodes:
        if node.title in seen:
            raise CompileError(f"duplicate node title '{node.title}'", file_name)
        seen.add(node.title)

    body_compiler = _BodyCompiler(file_name, tag_prefix)
    for node in nodes:
        body_compiler.compile_node(node)

    return CompiledScript(file_name=file_name, nodes=nodes, string_table=body_compiler.table)


def compile_file(path, config=None) -> CompiledScript:
    """Read and compile a script file."""
    fmt = get_format_from_file_name(path, config)
    with open(path, "r", encoding="utf-8-sig") as f:
        text = f.read()
    return compile_text(text, fmt, str(path), config)


def main():
    parser = argparse.ArgumentParser(description="Compile a Yarn script and list its strings")
    parser.add_argument("file", help="Script file (.yarn.txt, .yarn, .json, .node)")
    parser.add_argument("--config", help="Path to yarntag_config.yaml")
    parser.add_argument("--json", action="store_true", help="JSON output")
    args = parser.parse_args()

    config = load_config(args.config)
    try:
        script = compile_file(args.file, config)
        result = {
            "status": "success",
            "file": args.file,
            "nodes": len(script.nodes),
            "strings": [asdict(info) for info in script.string_table.values()],
        }
    except YarnTagError as e:
        result = {"status": "error", "file": args.file, "message": str(e)}

    if args.json:
        print(json.dumps(result, indent=2, default=str))
    elif result["status"] == "success":
        print(f"{result['file']}: {result['nodes']} nodes, {len(result['strings'])} strings")
        for entry in result["strings"]:
            print(f"  {entry['line_id']}  [{entry['node_name']}:{entry['line_number']}] {entry['text']}")
    else:
        print(f"ERROR: {result['message']}")


if __name__ == "__main__":
    main()
