"""CLI presentation layer for archive analyzer.

This module handles all visual feedback in the CLI using Halo spinners,
subscribes to pipeline events for progress tracking and renders finished
analyses as a text tree with a summary.
"""

from halo import Halo
from typing import Optional

from ...core.result_types import AnalysisResult, Summary
from ...core.session import CANCELLED, AnalysisOutcome
from ...utils.events import SimpleEmitter
from ...utils import (
    format_count, format_duration, render_tree,
    print_block, print_error, print_info, print_warning,
)

IDLE_MESSAGE = "No archive loaded yet."
EMPTY_ARCHIVE_MESSAGE = "No files found in the archive."
CANCELLED_MESSAGE = "Analysis cancelled."


def format_summary(archive_name: str, summary: Summary) -> str:
    """Format the summary block shown above the tree.
    
    Args:
        archive_name: File name of the analyzed archive
        summary: Aggregated statistics
        
    Returns:
        Three-line summary text
    """
    return "\n".join([
        archive_name,
        f"{format_count(summary.total_files)} file(s) total • "
        f"{format_count(summary.analyzable_file_count)} analyzable • "
        f"{format_count(summary.opaque_file_count)} not analyzable.",
        f"{format_count(summary.total_line_count)} lines in analyzable files.",
    ])


class CLIPresenter:
    """Displays analysis progress and results in the CLI.
    
    Subscribes to pipeline events and provides visual feedback:
    - Halo spinners for stages
    - Decoding progress during the build stage
    - Success/failure messages
    - The final summary and tree
    
    Example:
        emitter = SimpleEmitter()
        presenter = CLIPresenter()
        presenter.attach_to_pipeline(emitter)
        
        session = AnalysisSession(config, emitter)
        presenter.show_outcome(await session.analyze(path))
    """
    
    def __init__(self, show_spinners: bool = True):
        """Initialize CLI presenter.
        
        Args:
            show_spinners: Disable to keep output free of terminal animations
        """
        self.show_spinners = show_spinners
        self.current_spinner: Optional[Halo] = None
    
    def attach_to_pipeline(self, emitter: SimpleEmitter):
        """Subscribe to pipeline events.
        
        Args:
            emitter: Event emitter shared with the pipeline
        """
        emitter.on('stage:start', self._on_stage_start)
        emitter.on('stage:complete', self._on_stage_complete)
        emitter.on('stage:failed', self._on_stage_failed)
        emitter.on('file:decoded', self._on_file_decoded)
    
    def _on_stage_start(self, stage: str, message: str, **_):
        """Handle stage start event - start spinner."""
        if not self.show_spinners:
            return
        if self.current_spinner:
            self.current_spinner.stop()
        
        self.current_spinner = Halo(text=message, spinner='dots')
        self.current_spinner.start()
    
    def _on_stage_complete(self, stage: str, **data):
        """Handle stage completion - show success message."""
        if not self.current_spinner:
            return
        
        self.current_spinner.succeed(self._format_success_message(stage, data))
        self.current_spinner = None
    
    def _on_stage_failed(self, stage: Optional[str], error: BaseException, **_):
        """Handle an aborted stage - mark the spinner as failed."""
        if not self.current_spinner:
            return
        
        label = stage.capitalize() if stage else 'Analysis'
        self.current_spinner.fail(f'{label} failed')
        self.current_spinner = None
    
    def _on_file_decoded(self, done: int, total: int, **_):
        """Handle decoding progress - update spinner."""
        if self.current_spinner:
            self.current_spinner.text = f'Analyzing archive ... {done}/{total} files read'
    
    def _format_success_message(self, stage: str, data: dict) -> str:
        """Format success message based on stage and data."""
        if stage == 'open':
            return f"Archive opened ({data.get('entries_count', 0)} entries)"
        
        if stage == 'build':
            return f"Tree built ({data.get('files_count', 0)} files)"
        
        if stage == 'sort':
            return 'Tree sorted'
        
        if stage == 'summarize':
            if 'elapsed' in data:
                return f"Summary complete ({format_duration(data['elapsed'])})"
            return 'Summary complete'
        
        return f'{stage.capitalize()} complete'
    
    def show_result(self, result: AnalysisResult):
        """Print summary and tree of a finished analysis."""
        print_block(format_summary(result.archive_name, result.summary), indent=0)
        print()
        if result.is_empty:
            print_info(EMPTY_ARCHIVE_MESSAGE, indent=0)
        else:
            print_block(render_tree(result.tree), indent=0)
    
    def show_outcome(self, outcome: AnalysisOutcome):
        """Print whatever a submitted analysis ended with."""
        if outcome.ok:
            self.show_result(outcome.result)
        elif outcome.status == CANCELLED:
            print_warning(CANCELLED_MESSAGE)
        else:
            print_error(outcome.message)
    
    @staticmethod
    def show_idle():
        print_info(IDLE_MESSAGE, indent=0)
