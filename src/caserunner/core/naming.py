"""Display names for test cases.

A parameterized case is named after its base name followed by each parameter
and the value bound to it, e.g. ``Calc.add(a: 2, b: 3)``.
"""

import locale
from typing import Any, Callable, Optional, Sequence

from caserunner.config import FormatConfig

MISSING = "???"


def _locale_format(value: Any) -> str:
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, int):
        return locale.format_string("%d", value, grouping=True)
    if isinstance(value, float):
        return locale.str(value)
    return str(value)


class DisplayNameFormatter:
    """Builds deterministic display names from bound arguments."""

    def __init__(
        self,
        max_string_length: int = 50,
        value_formatter: Optional[Callable[[Any], str]] = None,
    ):
        """Initialize the formatter.

        Args:
            max_string_length: Strings longer than this are truncated
            value_formatter: Renders values that are not None or strings.
                Defaults to ``str``, which does not depend on the locale.
        """
        self.max_string_length = max_string_length
        self.value_formatter = value_formatter or str

    @classmethod
    def from_config(cls, config: FormatConfig) -> "DisplayNameFormatter":
        """Create a formatter from the format section of the configuration."""
        return cls(
            max_string_length=config.max_string_length,
            value_formatter=_locale_format if config.locale_aware else None,
        )

    def format_value(self, value: Any) -> str:
        """Render a single argument value."""
        if value is None:
            return "null"

        if isinstance(value, str):
            # Python has no char type, a one character string stands in for one
            if len(value) == 1:
                return f"'{value}'"
            if len(value) > self.max_string_length:
                return f'"{value[: self.max_string_length]}...'
            return f'"{value}"'

        return self.value_formatter(value)

    def format(
        self,
        base_name: str,
        parameter_names: Sequence[str],
        arguments: Optional[Sequence[Any]],
    ) -> str:
        """Build the display name for a case.

        Args:
            base_name: Name used as-is for cases without bound arguments
            parameter_names: Declared parameter names, in order
            arguments: Bound argument values; None or empty when not parameterized

        Returns:
            The base name, or ``base(name: value, ...)`` with one entry per
            declared parameter or bound argument, whichever is more.
        """
        if not arguments:
            return base_name

        entries = []
        for idx, value in enumerate(arguments):
            name = parameter_names[idx] if idx < len(parameter_names) else MISSING
            entries.append(f"{name}: {self.format_value(value)}")

        # Declared parameters with nothing bound to them
        for name in parameter_names[len(arguments) :]:
            entries.append(f"{name}: {MISSING}")

        return f"{base_name}({', '.join(entries)})"
