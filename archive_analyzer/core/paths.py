"""Archive entry path normalization."""

import re

_BACKSLASH_RUN = re.compile(r"\\+")


def split_path(raw_path: str) -> list[str]:
    """Split a raw archive path into its non-empty segments.
    
    Runs of backslashes count as a single forward slash, so Windows-style
    and POSIX-style entry names normalize to the same segments. Leading,
    trailing and repeated delimiters produce no empty segments. ``.`` and
    ``..`` are kept as literal names.
    
    Args:
        raw_path: Entry name as stored in the archive
        
    Returns:
        Ordered list of path segments (empty for the root)
    """
    normalized = _BACKSLASH_RUN.sub("/", raw_path)
    return [part for part in normalized.split("/") if part]


def join_path(segments: list[str]) -> str:
    """Join segments back into a normalized slash-delimited path."""
    return "/".join(segments)


def parent_path(segments: list[str]) -> str:
    """Return the normalized path of the parent of ``segments``."""
    return join_path(segments[:-1])
