"""Raw node record shared by the parser, compiler and serializer."""

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class NodeInfo:
    """One node as read from disk.

    ``headers`` keeps every field of the node in file order (title, tags,
    position, colorID, ...) so it can be written back unchanged; ``body``
    is the node's source text with lines joined by newlines.
    """
    title: str
    body: str = ""
    tags: List[str] = field(default_factory=list)
    headers: Dict[str, Any] = field(default_factory=dict)

    def has_tag(self, name: str) -> bool:
        return name in self.tags
