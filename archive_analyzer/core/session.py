"""Interactive analysis session: one archive at a time, latest request wins."""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from ..config import AppConfig, ArchiveAnalyzerError, UnsupportedArchiveError
from ..utils.events import SimpleEmitter
from .pipeline import ArchiveAnalysisPipeline
from .result_types import AnalysisResult

logger = logging.getLogger(__name__)

READ_FAILURE_MESSAGE = "The archive could not be read. Please try again."

SUCCESS = "success"
FAILURE = "failure"
CANCELLED = "cancelled"


@dataclass
class AnalysisOutcome:
    """How one submitted analysis ended."""
    status: str
    result: Optional[AnalysisResult] = None
    message: str = ""
    error: Optional[BaseException] = None

    @classmethod
    def success(cls, result: AnalysisResult) -> 'AnalysisOutcome':
        return cls(status=SUCCESS, result=result)

    @classmethod
    def failure(cls, message: str, error: Optional[BaseException] = None) -> 'AnalysisOutcome':
        return cls(status=FAILURE, message=message, error=error)

    @classmethod
    def cancelled(cls) -> 'AnalysisOutcome':
        return cls(status=CANCELLED)

    @property
    def ok(self) -> bool:
        return self.status == SUCCESS


class AnalysisSession:
    """Runs analyses for a single user, discarding superseded runs.
    
    Starting a new analysis while another is in flight cancels the old one;
    its outcome is reported as cancelled and none of its partial results are
    kept. ``current`` only ever holds the result of the latest completed run.
    """

    def __init__(
        self,
        config: AppConfig,
        emitter: Optional[SimpleEmitter] = None,
        pipeline_factory: Optional[Callable[[], ArchiveAnalysisPipeline]] = None
    ):
        self.config = config
        self.emitter = emitter or SimpleEmitter()
        self._pipeline_factory = pipeline_factory or (
            lambda: ArchiveAnalysisPipeline(self.config, self.emitter)
        )
        self._task: Optional[asyncio.Task] = None
        self._generation = 0
        self.current: Optional[AnalysisResult] = None

    @property
    def busy(self) -> bool:
        return self._task is not None and not self._task.done()

    def cancel(self) -> None:
        """Abandon the in-flight analysis, if any."""
        self._generation += 1
        task, self._task = self._task, None
        if task is not None and not task.done():
            logger.info("Cancelling in-flight analysis")
            task.cancel()

    async def analyze(self, archive_path: Path | str) -> AnalysisOutcome:
        """Analyze ``archive_path``, replacing any previous result.
        
        Returns:
            AnalysisOutcome; never raises for archive or decode errors
        """
        self.cancel()
        self.current = None
        generation = self._generation

        task = asyncio.ensure_future(self._pipeline_factory().run(archive_path))
        self._task = task
        try:
            result = await task
        except asyncio.CancelledError:
            if task.cancelled() and generation != self._generation:
                logger.debug("Analysis of %s superseded", archive_path)
                return AnalysisOutcome.cancelled()
            raise
        except UnsupportedArchiveError as e:
            return AnalysisOutcome.failure(str(e), error=e)
        except ArchiveAnalyzerError as e:
            logger.warning("Failed to analyze %s: %s", archive_path, e)
            return AnalysisOutcome.failure(READ_FAILURE_MESSAGE, error=e)
        except Exception as e:
            logger.error("Unexpected error while analyzing %s", archive_path, exc_info=True)
            return AnalysisOutcome.failure(READ_FAILURE_MESSAGE, error=e)
        finally:
            if self._task is task:
                self._task = None

        if generation != self._generation:
            logger.debug("Discarding superseded result for %s", archive_path)
            return AnalysisOutcome.cancelled()
        self.current = result
        return AnalysisOutcome.success(result)
