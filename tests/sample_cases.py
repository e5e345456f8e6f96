"""Test classes run by the lifecycle tests.

Every stage appends to ``calls`` so tests can assert what ran and in which
order.
"""

from caserunner.core.metadata import BeforeAfterHook, fact, inline_data, trait

calls: list[str] = []


class Recorder(BeforeAfterHook):
    """Hook that records its calls and can be told to fail."""

    def __init__(self, label: str, fail_before: bool = False, fail_after: bool = False):
        self.label = label
        self.fail_before = fail_before
        self.fail_after = fail_after

    @property
    def name(self) -> str:
        return self.label

    def before(self, method):
        calls.append(f"before:{self.label}")
        if self.fail_before:
            raise RuntimeError(f"before {self.label} failed")

    def after(self, method):
        calls.append(f"after:{self.label}")
        if self.fail_after:
            raise RuntimeError(f"after {self.label} failed")


@Recorder("class-a")
@Recorder("class-b")
class HookedCases:
    def __init__(self):
        calls.append("init")

    @fact
    @Recorder("method-c")
    def passes(self):
        calls.append("body")

    @fact
    @Recorder("method-c")
    def fails(self):
        calls.append("body")
        raise AssertionError("body failed")

    def close(self):
        calls.append("close")


class BeforeFailureCases:
    def __init__(self):
        calls.append("init")

    @fact
    @Recorder("h0")
    @Recorder("h1")
    @Recorder("h2", fail_before=True)
    @Recorder("h3")
    def test(self):
        calls.append("body")

    def close(self):
        calls.append("close")


class AfterFailureCases:
    @fact
    @Recorder("h0", fail_after=True)
    @Recorder("h1", fail_after=True)
    def test(self):
        calls.append("body")


class BrokenConstructorCases:
    def __init__(self):
        calls.append("init")
        raise ValueError("constructor failed")

    @fact
    @Recorder("h0")
    def test(self):
        calls.append("body")

    def close(self):
        calls.append("close")


class StaticCases:
    @fact
    @staticmethod
    def add(a, b):
        calls.append(f"add:{a}+{b}")

    @fact
    @classmethod
    def named(cls):
        calls.append(f"named:{cls.__name__}")


class SkippedCases:
    def __init__(self):
        calls.append("init")

    @fact(skip="not today")
    @Recorder("h0")
    def test(self):
        calls.append("body")


class DisposeFailureCases:
    @fact
    def test(self):
        calls.append("body")

    def close(self):
        calls.append("close")
        raise OSError("close failed")


class PlainCases:
    @fact
    def test(self):
        calls.append("body")

    def helper(self):
        pass


class CloseValueCases:
    def __init__(self):
        self.close = 101.5

    @fact
    def test(self):
        calls.append("body")


class ParameterizedCases:
    @fact
    @trait("category", "math")
    @trait("owner", "qa")
    @trait("category", "fast")
    @inline_data(2, 3)
    @inline_data(-1, 1)
    def add(self, a, b):
        calls.append(f"add:{a}+{b}")
        assert a + b in (5, 0)

    @fact(display_name="Custom name")
    def renamed(self):
        calls.append("renamed")

    @fact
    def varargs(self, first, *rest, **options):
        calls.append(f"varargs:{first}")


class DerivedCases(PlainCases):
    @fact
    def extra(self):
        calls.append("extra")
