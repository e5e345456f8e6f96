"""Exception aggregation for independently attempted stages.

Each stage of a test run is attempted through an ``ExceptionAggregator``. A
failure is recorded rather than raised, so the stages after it still run, and
the recorded failures are resolved into a single result at the end.
"""

from contextlib import contextmanager
from typing import Callable, Iterator, Optional


class InvocationError(Exception):
    """Raised by dynamic invocation to wrap an exception thrown by test code.

    The original exception is always available as ``__cause__``.
    """

    pass


def unwrap(exc: BaseException) -> BaseException:
    """Strip ``InvocationError`` layers down to the innermost cause."""
    while isinstance(exc, InvocationError) and exc.__cause__ is not None:
        exc = exc.__cause__
    return exc


class ExceptionAggregator:
    """Records failures from stages without propagating them."""

    def __init__(self):
        self._exceptions: list[Exception] = []

    @property
    def exceptions(self) -> list[Exception]:
        """Recorded exceptions, in the order they happened."""
        return list(self._exceptions)

    @property
    def has_exceptions(self) -> bool:
        return bool(self._exceptions)

    def add(self, exc: Exception) -> None:
        """Record an exception after unwrapping it."""
        self._exceptions.append(unwrap(exc))

    def run(self, code: Callable[[], object]) -> None:
        """Call ``code`` and record anything it raises."""
        with self.capture():
            code()

    @contextmanager
    def capture(self) -> Iterator[None]:
        """Run the enclosed block as one aggregated attempt."""
        try:
            yield
        except Exception as e:
            self.add(e)

    def to_exception(self) -> Optional[Exception]:
        """Resolve the recorded failures.

        Returns:
            None when nothing failed, the single exception when exactly one
            failed, otherwise an ``ExceptionGroup`` holding all of them in
            recording order.
        """
        if not self._exceptions:
            return None
        if len(self._exceptions) == 1:
            return self._exceptions[0]
        return ExceptionGroup(
            f"{len(self._exceptions)} failures during test execution",
            list(self._exceptions),
        )
