"""Event-driven pipeline for archive analysis.

This pipeline takes one ZIP archive from listing to a sorted tree and
summary, emitting events at each stage for progress tracking and
presentation.
"""

import logging
import time
from pathlib import Path
from typing import Optional

from ..config import AppConfig, ArchiveAnalyzerError
from ..utils.events import SimpleEmitter
from ..utils.formatters import format_duration
from .aggregator import summarize
from .result_types import AnalysisResult
from .scanner import open_archive
from .sorter import sort_tree
from .tree import build_tree

logger = logging.getLogger(__name__)


class ArchiveAnalysisPipeline:
    """Event-driven pipeline for archive analysis.
    
    The pipeline processes a ZIP archive through four stages:
    1. Open - Read the archive listing
    2. Build - Decode analyzable files and reconstruct the tree
    3. Sort - Order every directory's children
    4. Summarize - Verify the running totals against a full tree walk
    
    Events are emitted at each stage for progress tracking:
    - 'stage:start' - Stage beginning
    - 'stage:complete' - Stage completion
    - 'stage:failed' - Stage aborted by an error or cancellation
    - 'file:decoded' - One analyzable file was decoded and counted
    
    Example:
        emitter = SimpleEmitter()
        emitter.on('stage:start', lambda **kw: print(f"Starting {kw['stage']}"))
        
        pipeline = ArchiveAnalysisPipeline(config, emitter)
        result = await pipeline.run(Path("project.zip"))
    """
    
    def __init__(self, config: AppConfig, emitter: Optional[SimpleEmitter] = None):
        """Initialize pipeline with configuration and optional event emitter.
        
        Args:
            config: Application configuration
            emitter: Event emitter for progress tracking (optional, defaults to silent)
        """
        self.config = config
        self.emitter = emitter or SimpleEmitter()  # Silent if None
        self._stage: Optional[str] = None
    
    async def run(self, archive_path: Path | str) -> AnalysisResult:
        """Execute complete pipeline: ZIP -> sorted tree + summary.
        
        Args:
            archive_path: Archive to analyze
            
        Returns:
            AnalysisResult with the tree and summary
            
        Raises:
            InvalidInputError: If the archive cannot be opened
            DecodeFailure: If an analyzable entry cannot be decoded
        """
        archive_path = Path(archive_path)
        try:
            return await self._run(archive_path)
        except BaseException as e:
            self.emitter.emit('stage:failed', stage=self._stage, error=e)
            raise
    
    async def _run(self, archive_path: Path) -> AnalysisResult:
        started = time.perf_counter()

        self._start('open', f'Opening {archive_path.name}...')
        with open_archive(archive_path) as archive:
            archive_name = archive.name
            entries = archive.entries()
            self._complete('open', entries_count=len(entries))

            self._start('build', 'Analyzing archive ...')
            root, summary = await build_tree(
                entries,
                max_concurrency=self.config.analysis.max_concurrency,
                on_decoded=self._on_decoded,
            )
            self._complete('build', files_count=summary.total_files)

        self._start('sort', 'Sorting tree...')
        sort_tree(root)
        self._complete('sort')

        self._start('summarize', 'Computing summary...')
        walked = summarize(root)
        if walked != summary:
            raise ArchiveAnalyzerError(
                f"Summary mismatch: running totals {summary} != tree walk {walked}"
            )
        elapsed = time.perf_counter() - started
        self._complete('summarize', summary=summary, elapsed=elapsed)

        logger.debug("Analyzed %s in %s", archive_path, format_duration(elapsed))
        logger.info(
            "%s: %d files (%d analyzable, %d opaque), %d lines",
            archive_name,
            summary.total_files,
            summary.analyzable_file_count,
            summary.opaque_file_count,
            summary.total_line_count,
        )
        return AnalysisResult(archive_name=archive_name, tree=root, summary=summary)
    
    def _start(self, stage: str, message: str) -> None:
        self._stage = stage
        logger.debug("Stage '%s' started", stage)
        self.emitter.emit('stage:start', stage=stage, message=message)
    
    def _complete(self, stage: str, **data) -> None:
        self.emitter.emit('stage:complete', stage=stage, **data)
        self._stage = None
    
    def _on_decoded(self, name: str, line_count: int, done: int, total: int) -> None:
        self.emitter.emit(
            'file:decoded', name=name, line_count=line_count, done=done, total=total
        )
