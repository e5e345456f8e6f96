"""Test metadata declarations and runtime resolution.

Tests are plain classes. Their methods are marked with decorators:

    @Transaction()
    class CalcTests:
        @fact
        @trait("category", "math")
        @inline_data(2, 3)
        @inline_data(-1, 1)
        def add(self, a, b):
            ...

Stacked decorators keep top-to-bottom declaration order.
"""

import importlib
import inspect
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from caserunner.core.aggregator import InvocationError

FACT_ATTR = "_caserunner_fact"
TRAITS_ATTR = "_caserunner_traits"
DATA_ATTR = "_caserunner_data"
HOOKS_ATTR = "_caserunner_hooks"


class ResolutionError(Exception):
    """Raised when a test class or method cannot be resolved."""

    pass


def _unwrap_descriptor(obj: Any) -> Any:
    if isinstance(obj, (staticmethod, classmethod)):
        return obj.__func__
    return obj


def _prepend(func: Any, attr: str, value: Any) -> None:
    # Decorators apply bottom-up, so prepending preserves source order
    target = _unwrap_descriptor(func)
    values = target.__dict__.get(attr)
    if values is None:
        values = []
        setattr(target, attr, values)
    values.insert(0, value)


@dataclass(frozen=True)
class FactInfo:
    """Marks a method as a test."""

    display_name: Optional[str] = None
    skip: Optional[str] = None


def fact(func=None, *, display_name: Optional[str] = None, skip: Optional[str] = None):
    """Mark a method as a test, optionally renaming or skipping it.

    Usable bare (``@fact``) or with arguments (``@fact(skip="flaky")``).
    """
    info = FactInfo(display_name=display_name, skip=skip)

    def decorate(f):
        setattr(_unwrap_descriptor(f), FACT_ATTR, info)
        return f

    if func is not None:
        return decorate(func)
    return decorate


def trait(name: str, value: str):
    """Attach a name/value trait to a test method."""

    def decorate(f):
        _prepend(f, TRAITS_ATTR, (name, value))
        return f

    return decorate


def inline_data(*values: Any):
    """Attach one row of arguments to a test method."""

    def decorate(f):
        _prepend(f, DATA_ATTR, tuple(values))
        return f

    return decorate


class BeforeAfterHook:
    """Setup/teardown behavior attached to a test class or method.

    Subclasses override ``before`` and/or ``after``. An instance is also a
    decorator: applied to a class it runs for every test of the class,
    applied to a method it runs for that test only.
    """

    @property
    def name(self) -> str:
        return type(self).__name__

    def before(self, method: "MethodInfo") -> None:
        """Called before the test method runs."""
        pass

    def after(self, method: "MethodInfo") -> None:
        """Called after the test method ran, only if ``before`` succeeded."""
        pass

    def __call__(self, target):
        if isinstance(target, type):
            hooks = target.__dict__.get(HOOKS_ATTR)
            if hooks is None:
                hooks = []
                setattr(target, HOOKS_ATTR, hooks)
            hooks.insert(0, self)
        else:
            _prepend(target, HOOKS_ATTR, self)
        return target

    def __repr__(self) -> str:
        return f"<{self.name}>"


class MethodInfo:
    """A test method on its declaring class."""

    def __init__(self, owner: type, name: str):
        try:
            raw = inspect.getattr_static(owner, name)
        except AttributeError as e:
            raise ResolutionError(f"{owner.__qualname__} has no method {name!r}") from e

        self.owner = owner
        self.name = name
        self.is_static = isinstance(raw, (staticmethod, classmethod))
        self.function = _unwrap_descriptor(raw)

        if not callable(self.function):
            raise ResolutionError(f"{owner.__qualname__}.{name} is not callable")

    @property
    def full_name(self) -> str:
        return f"{self.owner.__qualname__}.{self.name}"

    @property
    def parameter_names(self) -> list[str]:
        """Declared parameter names, without the bound ``self``/``cls``."""
        params = list(inspect.signature(self.function).parameters.values())
        if not isinstance(inspect.getattr_static(self.owner, self.name), staticmethod):
            params = params[1:]
        return [
            p.name
            for p in params
            if p.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
        ]

    @property
    def fact(self) -> Optional[FactInfo]:
        return getattr(self.function, FACT_ATTR, None)

    @property
    def traits(self) -> list[tuple[str, str]]:
        return list(self.function.__dict__.get(TRAITS_ATTR, []))

    @property
    def data_rows(self) -> list[tuple]:
        return list(self.function.__dict__.get(DATA_ATTR, []))

    @property
    def hooks(self) -> list[BeforeAfterHook]:
        return list(self.function.__dict__.get(HOOKS_ATTR, []))

    @property
    def source_file_name(self) -> Optional[str]:
        try:
            return inspect.getsourcefile(self.function)
        except TypeError:
            return None

    @property
    def source_file_line(self) -> Optional[int]:
        try:
            return inspect.getsourcelines(self.function)[1]
        except (OSError, TypeError):
            return None

    def invoke(self, instance: Any, arguments: Sequence[Any] = ()) -> Any:
        """Call the method on ``instance``, or on the class when static.

        Raises:
            InvocationError: Wrapping whatever the method raised
        """
        target = getattr(self.owner if instance is None else instance, self.name)
        try:
            return target(*arguments)
        except Exception as e:
            raise InvocationError(f"{self.full_name} raised {type(e).__name__}") from e

    def __repr__(self) -> str:
        return f"<MethodInfo {self.full_name}>"


def get_before_after_hooks(test_class: type, method: MethodInfo) -> list[BeforeAfterHook]:
    """Hooks for a test: class-level (base classes first), then method-level."""
    hooks: list[BeforeAfterHook] = []
    for klass in reversed(test_class.__mro__):
        hooks.extend(klass.__dict__.get(HOOKS_ATTR, []))
    hooks.extend(method.hooks)
    return hooks


def type_name_of(test_class: type) -> str:
    """Name a class the way ``TypeResolver.resolve_type`` expects."""
    return f"{test_class.__module__}:{test_class.__qualname__}"


class TypeResolver:
    """Resolves test classes and methods from their names at run time."""

    def resolve_type(self, type_name: str) -> type:
        """Import a class named ``module:QualName``."""
        module_name, _, qualname = type_name.partition(":")
        if not module_name or not qualname:
            raise ResolutionError(f"Expected 'module:QualName', got {type_name!r}")

        try:
            obj: Any = importlib.import_module(module_name)
        except ImportError as e:
            raise ResolutionError(f"Cannot import module {module_name!r}: {e}") from e

        for part in qualname.split("."):
            try:
                obj = getattr(obj, part)
            except AttributeError as e:
                raise ResolutionError(f"{type_name} not found") from e

        if not isinstance(obj, type):
            raise ResolutionError(f"{type_name} is not a class")
        return obj

    def resolve_method(self, test_class: type, method_name: str) -> MethodInfo:
        return MethodInfo(test_class, method_name)
