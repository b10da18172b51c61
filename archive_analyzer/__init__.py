"""Inspect ZIP archives: directory tree, file classification and line counts."""

__version__ = "0.1.0"
