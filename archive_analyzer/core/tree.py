"""Reconstruction of a directory tree from flat archive entries.

Archive listings are flat: every entry carries its full path, directories
may or may not be listed explicitly, and entries arrive in any order. The
builder materializes each directory path exactly once, synthesizing missing
ancestors on demand, and attaches files under their parent directory.
"""

import asyncio
import logging
from typing import Callable, Iterable, Optional, Protocol

from ..config import ArchiveAnalyzerError, DecodeFailure
from .aggregator import SummaryAccumulator
from .classifier import classify
from .metrics import count_lines
from .paths import join_path, parent_path, split_path
from .result_types import DirectoryNode, FileNode, Summary, create_root

logger = logging.getLogger(__name__)

# (entry_name, line_count, done, total)
DecodedCallback = Callable[[str, int, int, int], None]


class ArchiveEntry(Protocol):
    """One record of an archive listing, as supplied by a decoder."""
    name: str
    is_dir: bool

    async def decode_as_text(self) -> str:
        ...


class TreeBuilder:
    """Builds one tree for one analysis run.
    
    The path-to-directory mapping belongs to the builder instance and is
    discarded with it; nothing is shared between runs.
    """

    def __init__(self):
        self.root = create_root()
        self._directories: dict[str, DirectoryNode] = {"": self.root}
        self._file_paths: set[str] = set()
        self._totals = SummaryAccumulator()

    @property
    def summary(self) -> Summary:
        return self._totals.snapshot()

    def ensure_directory(self, path: str) -> DirectoryNode:
        """Return the directory node for ``path``, creating it and any missing ancestors.
        
        Walks the path root-down, so depth is bounded by the number of
        segments rather than by recursion limits.
        """
        existing = self._directories.get(path)
        if existing is not None:
            return existing

        current = self.root
        prefix: list[str] = []
        for segment in path.split("/"):
            prefix.append(segment)
            current_path = join_path(prefix)
            node = self._directories.get(current_path)
            if node is None:
                node = DirectoryNode(name=segment, path=current_path)
                current.children.append(node)
                self._directories[current_path] = node
                logger.debug("Materialized directory: %s", current_path)
            current = node
        return current

    def add_directory(self, segments: list[str]) -> DirectoryNode:
        """Attach an explicitly listed directory (no-op if already present)."""
        return self.ensure_directory(join_path(segments))

    def add_file(self, segments: list[str], line_count: Optional[int] = None) -> Optional[FileNode]:
        """Attach a file under its (possibly synthesized) parent directory.
        
        Args:
            segments: Normalized path segments of the file
            line_count: Decoded line count; required for analyzable files
            
        Returns:
            The new FileNode, or None if a file with the same path was
            already attached
        """
        path = join_path(segments)
        if path in self._file_paths:
            logger.warning("Duplicate file entry ignored: %s", path)
            return None

        name = segments[-1]
        extension, analyzable = classify(name)
        if analyzable and line_count is None:
            raise ArchiveAnalyzerError(f"Missing line count for analyzable file '{path}'")

        node = FileNode(
            name=name,
            path=path,
            extension=extension,
            line_count=line_count if analyzable else None,
            analyzable=analyzable,
        )
        parent = self.ensure_directory(parent_path(segments))
        parent.children.append(node)
        self._file_paths.add(path)
        self._totals.add(node)
        return node


def needs_decoding(entry: ArchiveEntry, segments: list[str]) -> bool:
    """True if ``entry`` is a file whose content gets counted."""
    return not entry.is_dir and classify(segments[-1])[1]


def plan_entries(entries: Iterable[ArchiveEntry]) -> list[tuple[ArchiveEntry, list[str]]]:
    """Order entries by raw path and drop those that cannot become nodes.
    
    Entries without any path segment are skipped. When several file entries
    normalize to the same path only one is kept: the one whose raw name is
    already in normalized form, otherwise the first in raw-path order.
    
    Returns:
        List of (entry, normalized segments) pairs
    """
    planned: list[tuple[ArchiveEntry, list[str]]] = []
    file_slots: dict[str, int] = {}

    for entry in sorted(entries, key=lambda e: e.name):
        segments = split_path(entry.name)
        if not segments:
            logger.warning("Skipping entry without a usable path: %r", entry.name)
            continue
        if entry.is_dir:
            planned.append((entry, segments))
            continue

        path = join_path(segments)
        slot = file_slots.get(path)
        if slot is None:
            file_slots[path] = len(planned)
            planned.append((entry, segments))
            continue

        kept = planned[slot][0]
        if entry.name == path and kept.name != path:
            planned[slot] = (entry, segments)
            logger.warning("Duplicate file entry %r ignored in favour of %r", kept.name, entry.name)
        else:
            logger.warning("Duplicate file entry %r ignored in favour of %r", entry.name, kept.name)

    return planned


async def decode_line_counts(
    entries: list[ArchiveEntry],
    max_concurrency: int = 8,
    on_decoded: Optional[DecodedCallback] = None
) -> list[int]:
    """Decode entries concurrently and return their line counts in input order.
    
    At most ``max_concurrency`` decodes are in flight. The first failure
    cancels every outstanding decode and is re-raised.
    """
    if max_concurrency < 1:
        raise ValueError("max_concurrency must be at least 1")

    semaphore = asyncio.Semaphore(max_concurrency)
    total = len(entries)
    done = 0

    async def decode(entry: ArchiveEntry) -> int:
        nonlocal done
        async with semaphore:
            try:
                text = await entry.decode_as_text()
            except ArchiveAnalyzerError:
                raise
            except Exception as e:
                raise DecodeFailure(entry.name, str(e)) from e
        lines = count_lines(text)
        done += 1
        if on_decoded is not None:
            on_decoded(entry.name, lines, done, total)
        return lines

    tasks = [asyncio.ensure_future(decode(entry)) for entry in entries]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def build_tree(
    entries: Iterable[ArchiveEntry],
    max_concurrency: int = 8,
    on_decoded: Optional[DecodedCallback] = None
) -> tuple[DirectoryNode, Summary]:
    """Build the unsorted tree and its summary from archive entries.
    
    Decoding of analyzable files may run concurrently; attaching nodes
    happens afterwards in one synchronous pass over the entries in raw-path
    order, so the result does not depend on decode completion order. Only
    entries that end up in the tree are decoded.
    
    Args:
        entries: Archive entries in any order
        max_concurrency: Upper bound on simultaneous decodes
        on_decoded: Optional progress callback ``(entry_name, line_count, done, total)``
        
    Returns:
        Tuple of (root directory node, incrementally computed summary)
        
    Raises:
        DecodeFailure: If any analyzable entry cannot be decoded
    """
    planned = plan_entries(entries)
    to_decode = [entry for entry, segments in planned if needs_decoding(entry, segments)]
    counts = await decode_line_counts(to_decode, max_concurrency, on_decoded)
    line_counts = {id(entry): lines for entry, lines in zip(to_decode, counts)}

    builder = TreeBuilder()
    for entry, segments in planned:
        if entry.is_dir:
            builder.add_directory(segments)
        else:
            builder.add_file(segments, line_counts.get(id(entry)))

    return builder.root, builder.summary
