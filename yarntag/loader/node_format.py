"""Node file formats and file-name based format detection."""

from enum import Enum

from yarntag.config import DEFAULTS
from yarntag.errors import UnrecognizedExtensionError


class NodeFormat(Enum):
    """On-disk serializations of a node collection."""
    UNKNOWN = "unknown"
    JSON = "json"
    TEXT = "text"
    SINGLE_NODE = "single_node"
    COMPILED = "compiled"


# Formats the tagger can read, rewrite and write back.
TAGGABLE_FORMATS = (NodeFormat.JSON, NodeFormat.TEXT)


def _files_section(config):
    return (config or DEFAULTS).get("files", DEFAULTS["files"])


def get_format_from_file_name(file_name, config=None) -> NodeFormat:
    """Map a file name to its NodeFormat by suffix, longest suffix first.

    Raises:
        UnrecognizedExtensionError: no configured suffix matches.
    """
    formats = _files_section(config).get("formats", {})
    name = str(file_name).lower()
    for suffix in sorted(formats, key=len, reverse=True):
        if name.endswith(suffix.lower()):
            return NodeFormat(formats[suffix])
    raise UnrecognizedExtensionError([str(file_name)])


def check_file_list(files, allowed_extensions):
    """Fail if any file's name does not end with an allowed extension."""
    allowed = [ext.lower() for ext in allowed_extensions]
    bad = [str(f) for f in files
           if not any(str(f).lower().endswith(ext) for ext in allowed)]
    if bad:
        raise UnrecognizedExtensionError(bad, allowed_extensions)
