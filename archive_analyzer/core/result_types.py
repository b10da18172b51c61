"""Tree node and result types produced by an analysis run."""

from dataclasses import dataclass, field
from typing import Optional, Union

ROOT_NAME = "<root>"


@dataclass(eq=False)
class DirectoryNode:
    """A directory in the reconstructed archive tree.
    
    Nodes compare by identity: one path is materialized as exactly one
    instance per run.
    """
    name: str
    path: str = ""
    children: list['TreeNode'] = field(default_factory=list)


@dataclass(eq=False)
class FileNode:
    """A file in the reconstructed archive tree."""
    name: str
    path: str
    extension: str
    line_count: Optional[int]
    analyzable: bool


TreeNode = Union[DirectoryNode, FileNode]


def create_root() -> DirectoryNode:
    """Create the synthetic root directory of a tree."""
    return DirectoryNode(name=ROOT_NAME, path="")


@dataclass(frozen=True)
class Summary:
    """Aggregate statistics over all files of a tree."""
    total_files: int = 0
    analyzable_file_count: int = 0
    opaque_file_count: int = 0
    total_line_count: int = 0


@dataclass
class AnalysisResult:
    """Complete result of analyzing one archive."""
    archive_name: str
    tree: DirectoryNode
    summary: Summary

    @property
    def is_empty(self) -> bool:
        """True if the archive produced no nodes below the root."""
        return not self.tree.children
