"""Test case execution orchestration."""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from caserunner.config import RunnerConfig
from caserunner.core.messages import MessageSink
from caserunner.core.summary import CaseSummary
from caserunner.core.testcase import TestCase
from caserunner.core.worker import WorkerThread

logger = logging.getLogger(__name__)


@dataclass
class RunSummary:
    """Totals across all the cases of a run."""

    cases: int = 0
    tests_run: int = 0
    tests_failed: int = 0
    tests_skipped: int = 0
    execution_time: float = 0.0

    @property
    def tests_passed(self) -> int:
        return self.tests_run - self.tests_failed - self.tests_skipped

    @property
    def success(self) -> bool:
        return self.tests_failed == 0

    def add(self, summary: CaseSummary) -> None:
        """Fold one case's statistics into the totals."""
        self.cases += 1
        self.tests_run += summary.tests_run
        self.tests_failed += summary.tests_failed
        self.tests_skipped += summary.tests_skipped
        self.execution_time += summary.execution_time

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "cases": self.cases,
            "tests_run": self.tests_run,
            "tests_passed": self.tests_passed,
            "tests_failed": self.tests_failed,
            "tests_skipped": self.tests_skipped,
            "execution_time": self.execution_time,
        }


class CaseRunner:
    """Runs test cases one after another."""

    def __init__(self, config: RunnerConfig, message_sink: MessageSink):
        """Initialize the runner.

        Args:
            config: Runner configuration
            message_sink: Receives the messages of every case
        """
        self.config = config
        self.message_sink = message_sink

    def run_case(self, case: TestCase) -> CaseSummary:
        """Run a single case, on a dedicated worker thread if configured."""
        if not self.config.execution.isolate_threads:
            return case.run(self.message_sink)

        result: list[CaseSummary] = []
        worker = WorkerThread(
            lambda: result.append(case.run(self.message_sink)),
            name=f"{self.config.execution.thread_name_prefix}-{case.method_name}",
        )
        worker.join()
        return result[0]

    def run(self, cases: Iterable[TestCase], summary: Optional[RunSummary] = None) -> RunSummary:
        """Run every case and return the totals."""
        summary = summary or RunSummary()

        for case in cases:
            logger.debug("Running %s", case.display_name)
            summary.add(self.run_case(case))

        logger.info(
            "Ran %d tests in %d cases: %d failed, %d skipped",
            summary.tests_run,
            summary.cases,
            summary.tests_failed,
            summary.tests_skipped,
        )
        return summary
