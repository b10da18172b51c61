"""Deterministic ordering of directory children."""

import unicodedata

from .result_types import DirectoryNode, TreeNode

# Character classes in collation order: whitespace and controls, punctuation,
# symbols, digits, letters (and anything else).
_SPACE, _PUNCTUATION, _SYMBOL, _DIGIT, _LETTER = range(5)


def _char_class(ch: str) -> int:
    category = unicodedata.category(ch)
    if ch.isspace() or category.startswith(("Z", "C")):
        return _SPACE
    if category.startswith("P"):
        return _PUNCTUATION
    if category.startswith("S"):
        return _SYMBOL
    if category.startswith("N"):
        return _DIGIT
    return _LETTER


def collation_key(name: str) -> tuple:
    """Locale-style sort key for a node name.
    
    Compares base characters first (accents and case ignored), ranking
    punctuation before symbols, symbols before digits and digits before
    letters. Ties fall back to case-folded text, then lowercase before
    uppercase, and finally the raw name so the order is total.
    """
    folded = name.casefold()
    base = tuple(
        (_char_class(ch), ch)
        for ch in unicodedata.normalize("NFKD", folded)
        if not unicodedata.combining(ch)
    )
    return base, folded, name.swapcase(), name


def node_sort_key(node: TreeNode) -> tuple[int, tuple]:
    """Directories first, then by collated name."""
    kind = 0 if isinstance(node, DirectoryNode) else 1
    return kind, collation_key(node.name)


def sort_tree(root: DirectoryNode) -> DirectoryNode:
    """Sort the children of every directory below ``root`` in place.
    
    Sorting is idempotent. Returns ``root`` for convenience.
    """
    stack = [root]
    while stack:
        directory = stack.pop()
        directory.children.sort(key=node_sort_key)
        stack.extend(
            child for child in directory.children if isinstance(child, DirectoryNode)
        )
    return root
