"""Test case execution lifecycle.

A ``TestCase`` runs one test method through construction of its class, the
before hooks, the method itself, the after hooks and disposal, reporting each
stage to a ``MessageSink``.

Failure rules:

- Construction failure is fatal. No hooks run, the method is not invoked and
  there is nothing to dispose.
- Any other failure is recorded and the remaining stages still run. A failing
  before hook stops the before hooks after it and the method, but the after
  hooks of the hooks that already ran and disposal still happen.
"""

import logging
import time
from typing import Any, Optional, Protocol, Sequence, runtime_checkable

from caserunner.core.aggregator import ExceptionAggregator
from caserunner.core.messages import (
    AfterHookFinished,
    AfterHookStarting,
    BeforeHookFinished,
    BeforeHookStarting,
    CaseFinished,
    CaseStarting,
    ClassConstructionFinished,
    ClassConstructionStarting,
    ClassDisposeFinished,
    ClassDisposeStarting,
    MessageSink,
    MethodInvoked,
    MethodInvoking,
    TestFailed,
    TestFinished,
    TestPassed,
    TestSkipped,
    TestStarting,
)
from caserunner.core.metadata import (
    BeforeAfterHook,
    MethodInfo,
    TypeResolver,
    get_before_after_hooks,
    type_name_of,
)
from caserunner.core.naming import DisplayNameFormatter
from caserunner.core.summary import CaseSummary, SummarizingSink

logger = logging.getLogger(__name__)


@runtime_checkable
class SupportsClose(Protocol):
    """Test class instances with a ``close()`` method are disposed after the test."""

    def close(self) -> Any: ...


class TestCase:
    """One test method, optionally bound to argument values."""

    __test__ = False

    def __init__(
        self,
        test_class: type,
        method: MethodInfo | str,
        arguments: Optional[Sequence[Any]] = None,
        formatter: Optional[DisplayNameFormatter] = None,
        resolver: Optional[TypeResolver] = None,
    ):
        """Initialize a test case from live metadata.

        Args:
            test_class: The class declaring the test method
            method: The test method, or its name on ``test_class``
            arguments: Values bound to the method's parameters
            formatter: Builds the display name; defaults to invariant formatting
            resolver: Resolves the class and method again when the case is
                rebuilt from a dict
        """
        if isinstance(method, str):
            method = MethodInfo(test_class, method)

        self._test_class: Optional[type] = test_class
        self._method: Optional[MethodInfo] = method
        self.resolver = resolver or TypeResolver()

        self.type_name = type_name_of(test_class)
        self.method_name = method.name
        self.arguments: tuple = tuple(arguments) if arguments is not None else ()

        fact = method.fact
        base_name = (fact.display_name if fact else None) or f"{test_class.__name__}.{method.name}"
        formatter = formatter or DisplayNameFormatter()
        self.display_name: str = formatter.format(base_name, method.parameter_names, self.arguments)
        self.skip_reason: Optional[str] = fact.skip if fact else None

        self.traits: dict[str, list[str]] = {}
        for name, value in method.traits:
            self.traits.setdefault(name, []).append(value)

        self.source_file_name: Optional[str] = None
        self.source_file_line: Optional[int] = None

    @property
    def test_class(self) -> Optional[type]:
        """The live class, or None when the case was rebuilt from a dict."""
        return self._test_class

    @property
    def method(self) -> Optional[MethodInfo]:
        """The live method, or None when the case was rebuilt from a dict."""
        return self._method

    def set_source(self, file_name: Optional[str], line: Optional[int]) -> None:
        """Record where the test is defined."""
        self.source_file_name = file_name
        self.source_file_line = line

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "type_name": self.type_name,
            "method_name": self.method_name,
            "display_name": self.display_name,
            "skip_reason": self.skip_reason,
            "arguments": list(self.arguments),
            "traits": {name: list(values) for name, values in self.traits.items()},
            "source_file_name": self.source_file_name,
            "source_file_line": self.source_file_line,
        }

    @classmethod
    def from_dict(cls, data: dict, resolver: Optional[TypeResolver] = None) -> "TestCase":
        """Rebuild a case from ``to_dict`` output.

        The class and method are not imported here; ``run`` resolves them.
        """
        case = cls.__new__(cls)
        case._test_class = None
        case._method = None
        case.resolver = resolver or TypeResolver()
        case.type_name = data["type_name"]
        case.method_name = data["method_name"]
        case.display_name = data["display_name"]
        case.skip_reason = data.get("skip_reason")
        case.arguments = tuple(data.get("arguments") or ())
        case.traits = {name: list(values) for name, values in (data.get("traits") or {}).items()}
        case.source_file_name = data.get("source_file_name")
        case.source_file_line = data.get("source_file_line")
        return case

    def run(self, message_sink: MessageSink) -> CaseSummary:
        """Run the case, reporting to ``message_sink``.

        Test failures never raise; they are reported as messages. Each call
        builds a fresh instance of the test class.

        Returns:
            Counts and execution time of the tests that ran
        """
        message_sink.on_message(CaseStarting(test_case=self))

        summarizing_sink = SummarizingSink(message_sink)
        self.run_tests(summarizing_sink)
        summary = summarizing_sink.summary

        message_sink.on_message(
            CaseFinished(
                test_case=self,
                execution_time=summary.execution_time,
                tests_run=summary.tests_run,
                tests_failed=summary.tests_failed,
                tests_skipped=summary.tests_skipped,
            )
        )
        return summary

    def get_before_after_hooks(self, test_class: type, method: MethodInfo) -> list[BeforeAfterHook]:
        """Hooks to run around the test; class-level first."""
        return get_before_after_hooks(test_class, method)

    def run_tests(self, message_sink: MessageSink) -> None:
        """Run the single test of this case."""
        name = self.display_name
        execution_time = 0.0

        message_sink.on_message(TestStarting(test_case=self, test_display_name=name))

        if self.skip_reason:
            logger.debug("Skipping %s: %s", name, self.skip_reason)
            message_sink.on_message(
                TestSkipped(test_case=self, test_display_name=name, reason=self.skip_reason)
            )
        else:
            aggregator = ExceptionAggregator()
            start_time = time.perf_counter()

            with aggregator.capture():
                self._run_lifecycle(message_sink, aggregator)

            execution_time = time.perf_counter() - start_time

            error = aggregator.to_exception()
            if error is None:
                logger.debug("%s passed in %.3fs", name, execution_time)
                result = TestPassed(test_case=self, test_display_name=name, execution_time=execution_time)
            else:
                logger.debug("%s failed in %.3fs: %r", name, execution_time, error)
                result = TestFailed(
                    test_case=self,
                    test_display_name=name,
                    execution_time=execution_time,
                    error=error,
                )
            message_sink.on_message(result)

        message_sink.on_message(
            TestFinished(test_case=self, test_display_name=name, execution_time=execution_time)
        )

    def _resolve(self) -> tuple[type, MethodInfo]:
        test_class = self._test_class or self.resolver.resolve_type(self.type_name)
        method = self._method or self.resolver.resolve_method(test_class, self.method_name)
        return test_class, method

    def _run_lifecycle(self, message_sink: MessageSink, aggregator: ExceptionAggregator) -> None:
        # Anything raised here, construction failure included, is fatal to
        # the remaining stages
        name = self.display_name
        test_class, method = self._resolve()
        instance = None

        if not method.is_static:
            message_sink.on_message(ClassConstructionStarting(test_case=self, test_display_name=name))
            try:
                instance = test_class()
            finally:
                message_sink.on_message(ClassConstructionFinished(test_case=self, test_display_name=name))

        hooks_run: list[BeforeAfterHook] = []

        with aggregator.capture():
            for hook in self.get_before_after_hooks(test_class, method):
                message_sink.on_message(
                    BeforeHookStarting(test_case=self, test_display_name=name, hook_name=hook.name)
                )
                try:
                    hook.before(method)
                    hooks_run.append(hook)
                finally:
                    message_sink.on_message(
                        BeforeHookFinished(test_case=self, test_display_name=name, hook_name=hook.name)
                    )

            message_sink.on_message(MethodInvoking(test_case=self, test_display_name=name))
            aggregator.run(lambda: method.invoke(instance, self.arguments))
            message_sink.on_message(MethodInvoked(test_case=self, test_display_name=name))

        for hook in reversed(hooks_run):
            message_sink.on_message(
                AfterHookStarting(test_case=self, test_display_name=name, hook_name=hook.name)
            )
            aggregator.run(lambda: hook.after(method))
            message_sink.on_message(
                AfterHookFinished(test_case=self, test_display_name=name, hook_name=hook.name)
            )

        with aggregator.capture():
            if isinstance(instance, SupportsClose) and callable(instance.close):
                message_sink.on_message(ClassDisposeStarting(test_case=self, test_display_name=name))
                try:
                    instance.close()
                finally:
                    message_sink.on_message(ClassDisposeFinished(test_case=self, test_display_name=name))

    def __repr__(self) -> str:
        return f"<TestCase {self.display_name}>"
