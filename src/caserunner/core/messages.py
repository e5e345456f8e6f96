"""Lifecycle messages emitted while a test case runs.

Every message is an immutable value carrying the originating test case. Only
the order in which messages are emitted matters; none is ever retracted.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, fields
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, ClassVar, Optional

if TYPE_CHECKING:
    from caserunner.core.testcase import TestCase


class Verdict(str, Enum):
    """Terminal classification of one test run."""

    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


def error_to_dict(error: BaseException) -> dict:
    """Describe an exception as plain data."""
    data: dict[str, Any] = {
        "type": type(error).__name__,
        "message": str(error),
    }
    if isinstance(error, BaseExceptionGroup):
        data["errors"] = [error_to_dict(e) for e in error.exceptions]
    return data


@dataclass(frozen=True, kw_only=True)
class CaseMessage:
    """Base class for all lifecycle messages."""

    test_case: "TestCase"

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        data: dict[str, Any] = {"type": type(self).__name__}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name == "test_case":
                data["test_case"] = value.display_name
            elif isinstance(value, BaseException):
                data[f.name] = error_to_dict(value)
            elif isinstance(value, Enum):
                data[f.name] = value.value
            else:
                data[f.name] = value
        return data


@dataclass(frozen=True, kw_only=True)
class TestMessage(CaseMessage):
    """Base class for messages about one test run of a case."""

    test_display_name: str


@dataclass(frozen=True, kw_only=True)
class TestResultMessage(TestMessage):
    """Base class for the verdict of a test run."""

    verdict: ClassVar[Verdict]
    execution_time: float = 0.0


@dataclass(frozen=True, kw_only=True)
class CaseStarting(CaseMessage):
    pass


@dataclass(frozen=True, kw_only=True)
class CaseFinished(CaseMessage):
    execution_time: float = 0.0
    tests_run: int = 0
    tests_failed: int = 0
    tests_skipped: int = 0


@dataclass(frozen=True, kw_only=True)
class TestStarting(TestMessage):
    pass


@dataclass(frozen=True, kw_only=True)
class TestFinished(TestMessage):
    execution_time: float = 0.0


@dataclass(frozen=True, kw_only=True)
class TestSkipped(TestResultMessage):
    verdict = Verdict.SKIPPED
    reason: str


@dataclass(frozen=True, kw_only=True)
class TestPassed(TestResultMessage):
    verdict = Verdict.PASSED


@dataclass(frozen=True, kw_only=True)
class TestFailed(TestResultMessage):
    verdict = Verdict.FAILED
    error: Exception


@dataclass(frozen=True, kw_only=True)
class ClassConstructionStarting(TestMessage):
    pass


@dataclass(frozen=True, kw_only=True)
class ClassConstructionFinished(TestMessage):
    pass


@dataclass(frozen=True, kw_only=True)
class BeforeHookStarting(TestMessage):
    hook_name: str


@dataclass(frozen=True, kw_only=True)
class BeforeHookFinished(TestMessage):
    hook_name: str


@dataclass(frozen=True, kw_only=True)
class AfterHookStarting(TestMessage):
    hook_name: str


@dataclass(frozen=True, kw_only=True)
class AfterHookFinished(TestMessage):
    hook_name: str


@dataclass(frozen=True, kw_only=True)
class MethodInvoking(TestMessage):
    pass


@dataclass(frozen=True, kw_only=True)
class MethodInvoked(TestMessage):
    pass


@dataclass(frozen=True, kw_only=True)
class ClassDisposeStarting(TestMessage):
    pass


@dataclass(frozen=True, kw_only=True)
class ClassDisposeFinished(TestMessage):
    pass


class MessageSink(ABC):
    """Receives the lifecycle message stream."""

    @abstractmethod
    def on_message(self, message: CaseMessage) -> None:
        """Handle a single message."""
        pass


class ListSink(MessageSink):
    """Keeps every message it receives, in order."""

    def __init__(self):
        self.messages: list[CaseMessage] = []

    def on_message(self, message: CaseMessage) -> None:
        self.messages.append(message)

    def of_type(self, message_type: type) -> list:
        """Return the received messages of the given type."""
        return [m for m in self.messages if isinstance(m, message_type)]

    @property
    def names(self) -> list[str]:
        """Class names of the received messages, in order."""
        return [type(m).__name__ for m in self.messages]


class DelegatingSink(MessageSink):
    """Forwards every message unchanged to another sink."""

    def __init__(
        self,
        inner: MessageSink,
        callback: Optional[Callable[[CaseMessage], None]] = None,
    ):
        self.inner = inner
        self.callback = callback

    def on_message(self, message: CaseMessage) -> None:
        self.inner.on_message(message)
        if self.callback is not None:
            self.callback(message)
