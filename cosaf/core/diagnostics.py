"""Diagnostics sinks.

Components never print. They receive a sink and call `emit(source, message)`;
what happens to the line is the caller's choice. The default sink drops it.
"""

import sys
from typing import TextIO


class Diagnostics:
    """No-op sink."""

    def emit(self, source: str, message: str) -> None:
        pass


class StderrDiagnostics(Diagnostics):
    """Print `source: message` lines, the way the CLI reports progress."""

    def __init__(self, stream: TextIO | None = None):
        self.stream = stream

    def emit(self, source: str, message: str) -> None:
        print(f'{source}: {message}', file=self.stream or sys.stderr)


NULL = Diagnostics()
