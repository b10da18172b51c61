"""Core logic for archive analysis."""

from .paths import split_path, join_path
from .classifier import ANALYZABLE_EXTENSIONS, classify, extract_extension
from .metrics import count_lines
from .result_types import (
    ROOT_NAME, DirectoryNode, FileNode, TreeNode, Summary, AnalysisResult
)
from .tree import ArchiveEntry, TreeBuilder, build_tree
from .sorter import sort_tree
from .aggregator import SummaryAccumulator, summarize, iter_files
from .scanner import ZipArchive, ZipEntry, open_archive
from .pipeline import ArchiveAnalysisPipeline
from .session import AnalysisOutcome, AnalysisSession

__all__ = [
    'split_path',
    'join_path',
    'ANALYZABLE_EXTENSIONS',
    'classify',
    'extract_extension',
    'count_lines',
    'ROOT_NAME',
    'DirectoryNode',
    'FileNode',
    'TreeNode',
    'Summary',
    'AnalysisResult',
    'ArchiveEntry',
    'TreeBuilder',
    'build_tree',
    'sort_tree',
    'SummaryAccumulator',
    'summarize',
    'iter_files',
    'ZipArchive',
    'ZipEntry',
    'open_archive',
    'ArchiveAnalysisPipeline',
    'AnalysisOutcome',
    'AnalysisSession',
]
