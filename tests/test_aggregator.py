"""Tests for exception aggregation."""

import pytest

from caserunner.core.aggregator import ExceptionAggregator, InvocationError, unwrap


def _raise(exc):
    raise exc


def _wrapped(exc):
    try:
        raise exc
    except Exception as e:
        raise InvocationError("wrapped") from e


class TestUnwrap:
    """Tests for unwrap()."""

    def test_plain_exception_unchanged(self):
        """Test that an unwrapped exception is returned as-is."""
        error = ValueError("boom")
        assert unwrap(error) is error

    def test_strips_invocation_error(self):
        """Test that the cause of an InvocationError is returned."""
        error = ValueError("boom")
        with pytest.raises(InvocationError) as exc_info:
            _wrapped(error)
        assert unwrap(exc_info.value) is error

    def test_strips_nested_layers(self):
        """Test that several wrapper layers are all removed."""
        inner = KeyError("k")
        middle = InvocationError("middle")
        middle.__cause__ = inner
        outer = InvocationError("outer")
        outer.__cause__ = middle
        assert unwrap(outer) is inner

    def test_invocation_error_without_cause(self):
        """Test that a wrapper with no cause is kept."""
        error = InvocationError("alone")
        assert unwrap(error) is error


class TestExceptionAggregator:
    """Tests for ExceptionAggregator."""

    def test_no_failures(self):
        """Test that nothing recorded resolves to None."""
        aggregator = ExceptionAggregator()
        aggregator.run(lambda: None)
        assert not aggregator.has_exceptions
        assert aggregator.to_exception() is None

    def test_single_failure_unmodified(self):
        """Test that one failure resolves to that exact exception."""
        error = RuntimeError("once")
        aggregator = ExceptionAggregator()
        aggregator.run(lambda: _raise(error))
        assert aggregator.to_exception() is error

    def test_failure_does_not_propagate(self):
        """Test that code after a failed attempt still runs."""
        aggregator = ExceptionAggregator()
        reached = []
        aggregator.run(lambda: _raise(ValueError()))
        reached.append(True)
        assert reached == [True]

    def test_two_failures_composite_in_order(self):
        """Test that two failures resolve to a group in recording order."""
        first = ValueError("first")
        second = TypeError("second")
        aggregator = ExceptionAggregator()
        aggregator.run(lambda: _raise(first))
        aggregator.run(lambda: _raise(second))

        error = aggregator.to_exception()
        assert isinstance(error, ExceptionGroup)
        assert list(error.exceptions) == [first, second]

    def test_records_unwrapped_cause(self):
        """Test that invocation wrappers are removed before recording."""
        error = ValueError("inner")
        aggregator = ExceptionAggregator()
        aggregator.run(lambda: _wrapped(error))
        assert aggregator.exceptions == [error]

    def test_capture_block(self):
        """Test the context manager form."""
        aggregator = ExceptionAggregator()
        with aggregator.capture():
            raise ValueError("in block")
        assert len(aggregator.exceptions) == 1

    def test_nested_capture(self):
        """Test that an inner attempt records and the outer one continues."""
        aggregator = ExceptionAggregator()
        steps = []
        with aggregator.capture():
            with aggregator.capture():
                raise ValueError("inner")
            steps.append("after inner")
        assert steps == ["after inner"]
        assert len(aggregator.exceptions) == 1

    def test_base_exceptions_propagate(self):
        """Test that KeyboardInterrupt is not captured."""
        aggregator = ExceptionAggregator()
        with pytest.raises(KeyboardInterrupt):
            aggregator.run(lambda: _raise(KeyboardInterrupt()))
        assert not aggregator.has_exceptions

    def test_exceptions_is_a_copy(self):
        """Test that the exceptions list cannot be modified from outside."""
        aggregator = ExceptionAggregator()
        aggregator.run(lambda: _raise(ValueError()))
        aggregator.exceptions.clear()
        assert aggregator.has_exceptions
