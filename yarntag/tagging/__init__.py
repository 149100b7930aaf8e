"""Line tagging service layer.

Modules:
    tag_generator   — unique line:XXXXXX id generation
    line_classifier — untagged-line filtering and node eligibility
    node_rewriter   — append a tag to one line of a node body
    line_adder      — per-file orchestrator, batch driver and CLI
"""
