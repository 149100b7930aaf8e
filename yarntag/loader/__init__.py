"""Script file loading: format detection, node extraction, serialization.

Modules:
    node_format           — NodeFormat enum, file-name detection, extension checks
    node_info             — NodeInfo record
    node_parser           — raw text → NodeInfo list (text, JSON, single-node)
    file_format_converter — NodeInfo list → raw text (text, JSON)
"""
