"""Unique line tag generation."""

import secrets

DEFAULT_PREFIX = "line:"
DEFAULT_ID_SPACE = 0x1000000


def generate_tag(used, rand_below=secrets.randbelow,
                 prefix: str = DEFAULT_PREFIX, id_space: int = DEFAULT_ID_SPACE) -> str:
    """Return a ``line:xxxxxx`` tag that is not in ``used``.

    Draws again until the candidate is unused. ``used`` is not modified;
    the caller must add the returned tag before asking for another.
    """
    while True:
        tag = f"{prefix}{rand_below(id_space):06x}"
        if tag not in used:
            return tag
