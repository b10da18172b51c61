"""Utility functions for the archive analyzer."""

from .formatters import format_count, format_line_badge, format_duration
from .tree_render import render_tree
from .cli_helpers import print_error, print_warning, print_info, print_block

__all__ = [
    'format_count',
    'format_line_badge',
    'format_duration',
    'render_tree',
    'print_error',
    'print_warning',
    'print_info',
    'print_block',
]
