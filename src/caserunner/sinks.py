"""Message sinks that render the lifecycle message stream."""

import json
import sys
import threading
from typing import Optional, TextIO

from rich.console import Console
from rich.markup import escape

from caserunner.core import messages
from caserunner.core.messages import CaseMessage, MessageSink

_STAGE_LABELS = {
    messages.ClassConstructionStarting: "constructing",
    messages.BeforeHookStarting: "before",
    messages.MethodInvoking: "invoking",
    messages.AfterHookStarting: "after",
    messages.ClassDisposeStarting: "disposing",
}


class ConsoleSink(MessageSink):
    """Prints test verdicts, and optionally every stage, to a rich console."""

    def __init__(self, console: Optional[Console] = None, show_stages: bool = False):
        self.console = console or Console()
        self.show_stages = show_stages

    def on_message(self, message: CaseMessage) -> None:
        if isinstance(message, messages.TestPassed):
            self.console.print(
                f"  [green]✓[/green] {escape(message.test_display_name)} "
                f"[dim]({message.execution_time:.3f}s)[/dim]"
            )
        elif isinstance(message, messages.TestFailed):
            self.console.print(
                f"  [red]✗[/red] {escape(message.test_display_name)} "
                f"[dim]({message.execution_time:.3f}s)[/dim]"
            )
            self._print_error(message.error, indent=6)
        elif isinstance(message, messages.TestSkipped):
            self.console.print(
                f"  [yellow]-[/yellow] {escape(message.test_display_name)} "
                f"[yellow]skipped:[/yellow] {escape(message.reason)}"
            )
        elif self.show_stages and type(message) in _STAGE_LABELS:
            label = _STAGE_LABELS[type(message)]
            hook_name = getattr(message, "hook_name", None)
            suffix = f" {escape(hook_name)}" if hook_name else ""
            self.console.print(f"    [dim]{label}{suffix}[/dim]")

    def _print_error(self, error: BaseException, indent: int) -> None:
        pad = " " * indent
        self.console.print(f"{pad}[red]{type(error).__name__}:[/red] {escape(str(error))}")
        if isinstance(error, BaseExceptionGroup):
            for inner in error.exceptions:
                self._print_error(inner, indent + 2)


class JsonSink(MessageSink):
    """Writes each message as one line of JSON."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout
        self._lock = threading.Lock()

    def on_message(self, message: CaseMessage) -> None:
        line = json.dumps(message.to_dict(), default=repr)
        with self._lock:
            self.stream.write(line + "\n")
            self.stream.flush()
