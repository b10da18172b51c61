"""Text rendering of analyzed archive trees."""

from ..core.result_types import DirectoryNode, TreeNode
from .formatters import format_line_badge

NOT_ANALYZABLE_BADGE = "not analyzable"


def node_label(node: TreeNode) -> str:
    """Label for one node: 'name/' for directories, 'name  [badge]' for files."""
    if isinstance(node, DirectoryNode):
        return f"{node.name}/"
    if node.analyzable:
        badge = format_line_badge(node.line_count or 0)
    else:
        badge = NOT_ANALYZABLE_BADGE
    return f"{node.name}  [{badge}]"


def render_tree(root: DirectoryNode) -> str:
    """Render a tree in the style of the `tree` command.
    
    The root itself is shown as '.', children keep the order they have in
    the tree (sort it first for a stable listing).
    
    Args:
        root: Root directory node
        
    Returns:
        Formatted tree string representation
    """
    lines = ["."]

    def render(directory: DirectoryNode, prefix: str):
        last_index = len(directory.children) - 1
        for idx, child in enumerate(directory.children):
            is_last = idx == last_index
            connector = "└── " if is_last else "├── "
            lines.append(f"{prefix}{connector}{node_label(child)}")
            if isinstance(child, DirectoryNode):
                render(child, prefix + ("    " if is_last else "│   "))

    render(root, "")
    return "\n".join(lines)
