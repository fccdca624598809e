"""Render Slate markdown API docs from a .proto file."""

__version__ = "0.1.0"
