"""Ownership and borrowing timelines for annotated Rust examples, rendered as SVG fragments."""

__version__ = "0.1.0"

__all__ = [
    "annotations",
    "code_panel",
    "data",
    "definitions",
    "events",
    "hover_messages",
    "line_styles",
    "timeline_layout",
    "timeline_lines",
    "timeline_panel",
    "utils",
    "visualization",
]