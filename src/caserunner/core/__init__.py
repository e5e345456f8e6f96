"""Core test case execution functionality."""

from caserunner.core.aggregator import ExceptionAggregator, InvocationError, unwrap
from caserunner.core.loader import CaseLoader, LoadResult
from caserunner.core.messages import DelegatingSink, ListSink, MessageSink, Verdict
from caserunner.core.metadata import (
    BeforeAfterHook,
    MethodInfo,
    ResolutionError,
    TypeResolver,
    fact,
    inline_data,
    trait,
)
from caserunner.core.naming import DisplayNameFormatter
from caserunner.core.runner import CaseRunner, RunSummary
from caserunner.core.summary import CaseSummary, SummarizingSink
from caserunner.core.testcase import TestCase
from caserunner.core.worker import WorkerThread

__all__ = [
    "BeforeAfterHook",
    "CaseLoader",
    "CaseRunner",
    "CaseSummary",
    "DelegatingSink",
    "DisplayNameFormatter",
    "ExceptionAggregator",
    "InvocationError",
    "ListSink",
    "LoadResult",
    "MessageSink",
    "MethodInfo",
    "ResolutionError",
    "RunSummary",
    "SummarizingSink",
    "TestCase",
    "TypeResolver",
    "Verdict",
    "WorkerThread",
    "fact",
    "inline_data",
    "trait",
    "unwrap",
]
