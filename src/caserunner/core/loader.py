"""Build test cases for explicitly named test classes and methods."""

import logging
from dataclasses import dataclass, field
from typing import Optional

from caserunner.core.metadata import MethodInfo, ResolutionError, TypeResolver
from caserunner.core.naming import DisplayNameFormatter
from caserunner.core.testcase import TestCase

logger = logging.getLogger(__name__)


@dataclass
class LoadResult:
    """Result of loading one target."""

    target: str
    cases: list[TestCase] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        """Check if loading was successful."""
        return self.error is None


class CaseLoader:
    """Creates test cases from ``module:Class`` or ``module:Class.method`` targets."""

    def __init__(
        self,
        formatter: Optional[DisplayNameFormatter] = None,
        resolver: Optional[TypeResolver] = None,
    ):
        self.formatter = formatter or DisplayNameFormatter()
        self.resolver = resolver or TypeResolver()

    def load(self, target: str) -> LoadResult:
        """Load the cases named by ``target``."""
        try:
            test_class, method_name = self._resolve_target(target)
            if method_name is None:
                methods = self.test_methods(test_class)
            else:
                methods = [self.resolver.resolve_method(test_class, method_name)]
        except ResolutionError as e:
            return LoadResult(target=target, error=str(e))

        cases = []
        for method in methods:
            cases.extend(self.cases_for(test_class, method))

        logger.debug("Loaded %d cases from %s", len(cases), target)
        return LoadResult(target=target, cases=cases)

    def _resolve_target(self, target: str) -> tuple[type, Optional[str]]:
        try:
            return self.resolver.resolve_type(target), None
        except ResolutionError:
            type_name, dot, method_name = target.rpartition(".")
            if not dot or ":" not in type_name:
                raise
            return self.resolver.resolve_type(type_name), method_name

    def test_methods(self, test_class: type) -> list[MethodInfo]:
        """Methods marked with ``@fact``, base class methods first."""
        names: list[str] = []
        for klass in reversed(test_class.__mro__):
            for name in vars(klass):
                if name not in names:
                    names.append(name)

        methods = []
        for name in names:
            try:
                method = MethodInfo(test_class, name)
            except ResolutionError:
                continue
            if method.fact is not None:
                methods.append(method)
        return methods

    def cases_for(self, test_class: type, method: MethodInfo) -> list[TestCase]:
        """One case per inline data row, or a single case without arguments."""
        rows: list[Optional[tuple]] = list(method.data_rows) or [None]

        cases = []
        for row in rows:
            case = TestCase(
                test_class,
                method,
                arguments=row,
                formatter=self.formatter,
                resolver=self.resolver,
            )
            case.set_source(method.source_file_name, method.source_file_line)
            cases.append(case)
        return cases
