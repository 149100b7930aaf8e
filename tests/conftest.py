#!/usr/bin/env python3
"""Shared test fixtures for the yarntag test suite."""

import json
import sys
from pathlib import Path

import pytest

# Add project root to path
BASE_DIR = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(BASE_DIR))


START_TEXT = (
    "title: Start\n"
    "tags: \n"
    "colorID: 0\n"
    "position: 100,200\n"
    "---\n"
    "Hello there\n"
    "Goodbye #line:abcdef\n"
    "===\n"
)

MULTI_NODE_TEXT = (
    "title: Intro\n"
    "tags: loc\n"
    "---\n"
    "Welcome to the village.\n"
    "-> Thanks\n"
    "-> Leave me alone <<if $grumpy>>\n"
    "===\n"
    "title: Shop\n"
    "tags: \n"
    "---\n"
    "What are you buying?\n"
    "[[Nothing|Intro]]\n"
    "===\n"
    "title: Poem\n"
    "tags: rawText loc\n"
    "---\n"
    "Roses are red\n"
    "Violets are blue\n"
    "===\n"
)

JSON_NODES = [
    {
        "title": "Start",
        "tags": "",
        "body": "Hi there\r\nWhere to?\r\n[[North|North]]",
        "position": {"x": 10, "y": 20},
        "colorID": 3,
    },
    {
        "title": "North",
        "tags": "",
        "body": "It is cold. #line:00beef",
        "position": {"x": 30, "y": 40},
        "colorID": 0,
    },
]


@pytest.fixture
def start_file(tmp_path):
    """A one-node text script with one untagged and one tagged line."""
    path = tmp_path / "Start.yarn.txt"
    path.write_text(START_TEXT, encoding="utf-8")
    return path


@pytest.fixture
def multi_node_file(tmp_path):
    """Three nodes: one tagged 'loc', one untagged, one rawText."""
    path = tmp_path / "Village.yarn.txt"
    path.write_text(MULTI_NODE_TEXT, encoding="utf-8")
    return path


@pytest.fixture
def json_file(tmp_path):
    """A JSON script with CRLF line breaks in one body."""
    path = tmp_path / "Journey.json"
    path.write_text(json.dumps(JSON_NODES, indent=2), encoding="utf-8")
    return path


@pytest.fixture
def broken_file(tmp_path):
    """A text script that does not compile (unclosed <<if>>)."""
    path = tmp_path / "Broken.yarn.txt"
    path.write_text(
        "title: Start\n---\n<<if $x>>\nHello\n===\n", encoding="utf-8"
    )
    return path


@pytest.fixture
def make_script(tmp_path):
    """Write a single-node text script with the given body and tags."""
    def _make(name, body, tags="", title="Start"):
        path = tmp_path / name
        path.write_text(
            f"title: {title}\ntags: {tags}\n---\n{body}\n===\n", encoding="utf-8"
        )
        return path
    return _make


@pytest.fixture
def seq_rand():
    """Build a rand_below stand-in that returns the given values in order."""
    def _factory(values):
        it = iter(values)
        return lambda upper: next(it)
    return _factory


@pytest.fixture
def unencodable_json_file(tmp_path):
    """A JSON script whose body decodes to a lone surrogate (not UTF-8 writable)."""
    path = tmp_path / "Surrogate.json"
    path.write_text(
        '[{"title": "Start", "tags": "", "body": "Hi \\ud800 there"}]', encoding="utf-8"
    )
    return path
