#!/usr/bin/env python3
"""Line Adder — tags untagged localizable lines in Yarn script files.

For each file, in order:
    1. Detect the format from the file name (JSON or text; others skipped)
    2. Compile the file; files that fail to compile are skipped
    3. Find strings in the string info table that have no line:xxxxxx id
    4. Re-read the file's nodes from raw text, append a fresh unique tag to
       each eligible line (rawText nodes and, with --only-use-tag, nodes
       without that tag are left alone)
    5. Write the nodes back in the original format (or report, on --dry-run)

Generated ids are unique across every file in one run.

Usage:
    python -m yarntag.tagging.line_adder Story.yarn.txt Extra.json
    python -m yarntag.tagging.line_adder *.yarn.txt --only-use-tag localise --dry-run
    python -m yarntag.tagging.line_adder Story.yarn.txt --verbose --json
"""

import argparse
import json
import logging
import os
import secrets
import shutil
import sys
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from yarntag.compiler.compiler import compile_file
from yarntag.config import DEFAULTS, load_config, setup_logging
from yarntag.errors import (
    LineIndexOutOfRangeError,
    NodeNotFoundError,
    NodeParseError,
    UnrecognizedExtensionError,
    YarnTagError,
)
from yarntag.loader.file_format_converter import convert_nodes
from yarntag.loader.node_format import (
    TAGGABLE_FORMATS,
    NodeFormat,
    check_file_list,
    get_format_from_file_name,
)
from yarntag.loader.node_parser import get_nodes_from_text
from yarntag.tagging.line_classifier import find_untagged_lines, is_line_eligible
from yarntag.tagging.node_rewriter import add_tag_to_line, get_line
from yarntag.tagging.tag_generator import generate_tag

logger = logging.getLogger("yarntag.tagging.line_adder")


@dataclass
class TaggingOptions:
    """Per-run tagging switches."""
    only_use_tag: Optional[str] = None
    dry_run: bool = False
    verbose: bool = False


def _result(path, status, fmt=None, tagged=None, **extra) -> dict:
    result = {
        "file": str(path),
        "status": status,
        "format": fmt.value if fmt else None,
        "tagged": tagged or [],
    }
    result.update(extra)
    return result


def _replace_file(path, data: bytes):
    """Write ``data`` next to ``path`` and swap it into place.

    The original file is only replaced once the new content is fully on
    disk, so a failed write leaves it as it was.
    """
    path = Path(path)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        shutil.copymode(path, tmp_path)
        os.replace(tmp_path, path)
    except OSError:
        Path(tmp_path).unlink(missing_ok=True)
        raise


def tag_file(path, options: TaggingOptions, used_ids: set, config=None,
             rand_below=secrets.randbelow) -> dict:
    """Tag every eligible untagged line in one file.

    ``used_ids`` is the run-wide set of ids already in use. It is seeded
    with this file's node titles and existing line ids, and every new tag
    is added to it.

    Returns a dict with ``status`` one of: written, dry_run,
    unsupported_format, compile_error, no_untagged_lines, no_changes, error.
    """
    config = config or DEFAULTS
    tagging = config["tagging"]
    prefix = tagging["tag_prefix"]

    try:
        fmt = get_format_from_file_name(path, config)
    except UnrecognizedExtensionError:
        fmt = NodeFormat.UNKNOWN
    if fmt not in TAGGABLE_FORMATS:
        logger.warning("Skipping file %s, which is in unsupported format '%s'", path, fmt.value)
        return _result(path, "unsupported_format", fmt)

    # The file must compile before anything is touched
    try:
        script = compile_file(path, config)
    except (YarnTagError, OSError, UnicodeDecodeError) as e:
        logger.warning("Skipping file %s due to compilation errors.", path)
        logger.debug("Compile failure in %s: %s", path, e)
        return _result(path, "compile_error", fmt)

    string_table = script.get_string_info_table()
    untagged = find_untagged_lines(string_table, prefix)
    if not untagged:
        logger.info("%s had no untagged lines. Either they're all tagged already, "
                    "or it has no localisable text.", path)
        return _result(path, "no_untagged_lines", fmt)

    tagged = []
    try:
        # The string table has no source text, so the nodes are re-read from disk
        with open(path, "r", encoding="utf-8-sig") as f:
            nodes = get_nodes_from_text(f.read(), fmt, str(path))
        node_map = {node.title: node for node in nodes}

        used_ids.update(node_map)
        used_ids.update(key for key in string_table if key.startswith(prefix))

        for info in untagged.values():
            node = node_map.get(info.node_name)
            if node is None:
                raise NodeNotFoundError(f"node '{info.node_name}' not found in {path}")

            eligible, reason = is_line_eligible(node, options.only_use_tag, tagging["raw_text_tag"])
            if not eligible:
                logger.debug("Not tagging line %d in node %s (%s)", info.line_number, node.title, reason)
                continue

            new_tag = generate_tag(used_ids, rand_below, prefix, tagging["id_space"])
            source_line = get_line(node.body, info.line_number)
            node.body = add_tag_to_line(node.body, info.line_number, new_tag)
            used_ids.add(new_tag)

            if options.verbose:
                logger.info('Tagged line with ID "%s" in node %s: %s', new_tag, node.title, source_line)
            tagged.append({
                "line_id": new_tag,
                "node": node.title,
                "line_number": info.line_number,
                "text": info.text,
            })
    except (LineIndexOutOfRangeError, NodeNotFoundError, NodeParseError) as e:
        logger.error("Compiled and raw views of %s disagree, file left unchanged: %s", path, e)
        return _result(path, "error", fmt, message=str(e))

    if not tagged:
        return _result(path, "no_changes", fmt)

    if options.dry_run:
        logger.info("Would have written to file %s", path)
        return _result(path, "dry_run", fmt, tagged)

    try:
        # Encode before touching the file so bad text never truncates it
        data = convert_nodes(nodes, fmt).encode("utf-8")
        _replace_file(path, data)
    except (OSError, UnicodeError, YarnTagError) as e:
        logger.error("Could not write %s, file left unchanged: %s", path, e)
        return _result(path, "error", fmt, message=str(e))
    if options.verbose:
        logger.info("Wrote %d new tag(s) to %s", len(tagged), path)
    return _result(path, "written", fmt, tagged)


def tag_batch(files, options: Optional[TaggingOptions] = None, config=None,
              used_ids: Optional[set] = None, rand_below=secrets.randbelow) -> dict:
    """Tag a list of files in order with one shared id pool.

    Raises:
        UnrecognizedExtensionError: a file has a disallowed extension; no
            file is processed.
    """
    options = options or TaggingOptions()
    config = config or DEFAULTS
    check_file_list(files, config["files"]["allowed_extensions"])

    used_ids = set() if used_ids is None else used_ids
    results = [tag_file(path, options, used_ids, config, rand_below) for path in files]

    return {
        "status": "success",
        "exit_code": 0,
        "dry_run": options.dry_run,
        "files": results,
        "tags_added": sum(len(r["tagged"]) for r in results),
    }


def run_batch(files, only_use_tag: Optional[str] = None, dry_run: bool = False,
              verbose: bool = False, config=None) -> int:
    """Tag ``files``; returns 0, or 1 if the extension pre-flight fails."""
    options = TaggingOptions(only_use_tag=only_use_tag, dry_run=dry_run, verbose=verbose)
    try:
        tag_batch(files, options, config)
    except UnrecognizedExtensionError as e:
        logger.error("%s", e)
        return 1
    return 0


def main():
    parser = argparse.ArgumentParser(description="Add line tags to untagged lines in Yarn scripts")
    parser.add_argument("files", nargs="+", help="Script files to tag")
    parser.add_argument("-t", "--only-use-tag", default=None,
                        help="Only tag lines in nodes that have this tag")
    parser.add_argument("-n", "--dry-run", action="store_true",
                        help="Report what would change without writing files")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every tagged line")
    parser.add_argument("--config", help="Path to yarntag_config.yaml")
    parser.add_argument("--json", action="store_true", help="JSON output")
    args = parser.parse_args()

    config = load_config(args.config)
    setup_logging(config, args.verbose)
    options = TaggingOptions(only_use_tag=args.only_use_tag, dry_run=args.dry_run,
                             verbose=args.verbose)

    try:
        result = tag_batch(args.files, options, config)
    except UnrecognizedExtensionError as e:
        result = {"status": "error", "exit_code": 1, "message": str(e)}
        if not args.json:
            logger.error("%s", e)

    if args.json:
        print(json.dumps(result, indent=2, default=str))
    sys.exit(result["exit_code"])


if __name__ == "__main__":
    main()
