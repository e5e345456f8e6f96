"""Tests for lifecycle messages and the summarizing sink."""

import dataclasses

import pytest

import sample_cases
from caserunner.core import messages
from caserunner.core.messages import DelegatingSink, ListSink, Verdict
from caserunner.core.summary import CaseSummary, SummarizingSink
from caserunner.core.testcase import TestCase


@pytest.fixture
def case():
    return TestCase(sample_cases.PlainCases, "test")


class TestMessages:
    """Tests for message values."""

    def test_messages_are_immutable(self, case):
        """Test that messages cannot be modified."""
        message = messages.TestStarting(test_case=case, test_display_name="x")
        with pytest.raises(dataclasses.FrozenInstanceError):
            message.test_display_name = "y"

    def test_verdicts(self, case):
        """Test the verdict of each result message."""
        passed = messages.TestPassed(test_case=case, test_display_name="x", execution_time=1.0)
        failed = messages.TestFailed(test_case=case, test_display_name="x", error=ValueError())
        skipped = messages.TestSkipped(test_case=case, test_display_name="x", reason="r")

        assert passed.verdict == Verdict.PASSED
        assert failed.verdict == Verdict.FAILED
        assert skipped.verdict == Verdict.SKIPPED
        assert messages.TestFailed.verdict == Verdict.FAILED
        assert "verdict" not in passed.to_dict()
        assert skipped.execution_time == 0.0

    def test_to_dict(self, case):
        """Test converting a message to a dictionary."""
        message = messages.BeforeHookStarting(test_case=case, test_display_name="x", hook_name="Db")
        assert message.to_dict() == {
            "type": "BeforeHookStarting",
            "test_case": "PlainCases.test",
            "test_display_name": "x",
            "hook_name": "Db",
        }

    def test_failed_to_dict_describes_error(self, case):
        """Test that errors, including groups, are described as data."""
        error = ExceptionGroup("2 failures", [ValueError("a"), KeyError("b")])
        message = messages.TestFailed(test_case=case, test_display_name="x", execution_time=0.5, error=error)

        data = message.to_dict()
        assert data["execution_time"] == 0.5
        assert data["error"]["type"] == "ExceptionGroup"
        assert [e["type"] for e in data["error"]["errors"]] == ["ValueError", "KeyError"]
        assert data["error"]["errors"][0]["message"] == "a"


class TestDelegatingSink:
    """Tests for DelegatingSink."""

    def test_forwards_and_calls_back(self, case):
        """Test that messages are forwarded unchanged and observed."""
        inner = ListSink()
        seen = []
        sink = DelegatingSink(inner, seen.append)
        message = messages.CaseStarting(test_case=case)

        sink.on_message(message)

        assert inner.messages == [message]
        assert seen == [message]


class TestSummarizingSink:
    """Tests for SummarizingSink."""

    def test_counts(self, case):
        """Test folding finished, failed and skipped messages."""
        inner = ListSink()
        sink = SummarizingSink(inner)
        stream = [
            messages.TestStarting(test_case=case, test_display_name="a"),
            messages.TestFailed(test_case=case, test_display_name="a", execution_time=0.25, error=ValueError()),
            messages.TestFinished(test_case=case, test_display_name="a", execution_time=0.25),
            messages.TestSkipped(test_case=case, test_display_name="b", reason="r"),
            messages.TestFinished(test_case=case, test_display_name="b", execution_time=0.0),
            messages.TestPassed(test_case=case, test_display_name="c", execution_time=0.5),
            messages.TestFinished(test_case=case, test_display_name="c", execution_time=0.5),
        ]

        for message in stream:
            sink.on_message(message)

        assert inner.messages == stream
        assert sink.summary == CaseSummary(
            tests_run=3, tests_failed=1, tests_skipped=1, execution_time=0.75
        )

    def test_empty_summary(self):
        """Test that a fresh sink starts at zero."""
        sink = SummarizingSink(ListSink())
        assert sink.summary.to_dict() == {
            "tests_run": 0,
            "tests_failed": 0,
            "tests_skipped": 0,
            "execution_time": 0.0,
        }
