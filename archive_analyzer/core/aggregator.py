"""Summary statistics over a reconstructed archive tree."""

from typing import Iterator

from .result_types import DirectoryNode, FileNode, Summary


class SummaryAccumulator:
    """Running totals, fed one file node at a time while the tree is built."""

    def __init__(self):
        self.total_files = 0
        self.analyzable_file_count = 0
        self.opaque_file_count = 0
        self.total_line_count = 0

    def add(self, node: FileNode) -> None:
        self.total_files += 1
        if node.analyzable:
            self.analyzable_file_count += 1
            self.total_line_count += node.line_count or 0
        else:
            self.opaque_file_count += 1

    def snapshot(self) -> Summary:
        return Summary(
            total_files=self.total_files,
            analyzable_file_count=self.analyzable_file_count,
            opaque_file_count=self.opaque_file_count,
            total_line_count=self.total_line_count,
        )


def iter_files(root: DirectoryNode) -> Iterator[FileNode]:
    """Yield every file node below ``root``, depth first."""
    stack = [root]
    while stack:
        directory = stack.pop()
        for child in reversed(directory.children):
            if isinstance(child, DirectoryNode):
                stack.append(child)
            else:
                yield child


def summarize(root: DirectoryNode) -> Summary:
    """Compute the summary of a finished tree by walking it.
    
    Produces the same totals as the accumulator the builder maintains, so
    either can be used to validate the other.
    """
    accumulator = SummaryAccumulator()
    for node in iter_files(root):
        accumulator.add(node)
    return accumulator.snapshot()
