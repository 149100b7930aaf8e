"""Configuration loading and logging setup for yarntag.

Reads args/yarntag_config.yaml (or the file named by YARNTAG_CONFIG_PATH)
and merges it over built-in defaults. String values may reference
environment variables as ${VAR} or ${VAR:-default}.
"""

import copy
import logging
import os
import re
from pathlib import Path

import yaml

logger = logging.getLogger("yarntag.config")

BASE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_CONFIG_PATH = Path(os.environ.get(
    "YARNTAG_CONFIG_PATH", str(BASE_DIR / "args" / "yarntag_config.yaml")
))

DEFAULTS = {
    "tagging": {
        "tag_prefix": "line:",
        "raw_text_tag": "rawText",
        "id_space": 0x1000000,
    },
    "files": {
        "allowed_extensions": [".json", ".node", ".yarn.bytes", ".yarn.txt", ".yarn"],
        "formats": {
            ".json": "json",
            ".yarn.txt": "text",
            ".yarn": "text",
            ".node": "single_node",
            ".yarn.bytes": "compiled",
        },
    },
    "logging": {
        "level": "INFO",
        "format": "%(levelname)s: %(message)s",
    },
}


def _expand_env(value):
    """Expand ${VAR:-default} patterns in string values."""
    if isinstance(value, dict):
        return {k: _expand_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand_env(v) for v in value]
    if not isinstance(value, str):
        return value
    pattern = r'\$\{([^}]+)\}'

    def replacer(match):
        expr = match.group(1)
        if ":-" in expr:
            var, default = expr.split(":-", 1)
            return os.environ.get(var, default)
        return os.environ.get(expr, match.group(0))
    return re.sub(pattern, replacer, value)


def _merge(base, override):
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path=None) -> dict:
    """Load the YAML config, falling back to defaults when it is missing."""
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    if not path.exists():
        logger.warning("Config not found at %s, using defaults", path)
        return copy.deepcopy(DEFAULTS)

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config root must be a mapping: {path}")

    config = _merge(DEFAULTS, _expand_env(data))
    config["tagging"]["id_space"] = int(config["tagging"]["id_space"])
    return config


def setup_logging(config=None, verbose=False):
    """Configure the root logger from the ``logging`` config section."""
    section = (config or DEFAULTS).get("logging", {})
    level_name = str(section.get("level", "INFO")).upper()
    level = logging.DEBUG if verbose else getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        level=level,
        format=section.get("format", DEFAULTS["logging"]["format"]),
    )
