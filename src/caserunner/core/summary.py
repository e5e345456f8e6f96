"""Case-level statistics folded from the message stream."""

from dataclasses import dataclass

from caserunner.core.messages import (
    CaseMessage,
    DelegatingSink,
    MessageSink,
    TestFailed,
    TestFinished,
    TestSkipped,
)


@dataclass
class CaseSummary:
    """Counts and time for the tests run by one case."""

    tests_run: int = 0
    tests_failed: int = 0
    tests_skipped: int = 0
    execution_time: float = 0.0

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "tests_run": self.tests_run,
            "tests_failed": self.tests_failed,
            "tests_skipped": self.tests_skipped,
            "execution_time": self.execution_time,
        }


class SummarizingSink(DelegatingSink):
    """Forwards messages and tallies finished, failed and skipped tests.

    A new instance is used for every run of a case, so counters never leak
    between runs.
    """

    def __init__(self, inner: MessageSink):
        super().__init__(inner, self._observe)
        self.summary = CaseSummary()

    def _observe(self, message: CaseMessage) -> None:
        if isinstance(message, TestFinished):
            self.summary.tests_run += 1
            self.summary.execution_time += message.execution_time
        elif isinstance(message, TestFailed):
            self.summary.tests_failed += 1
        elif isinstance(message, TestSkipped):
            self.summary.tests_skipped += 1
