"""
Input and output objects for Burrow sessions.

An input object provides `read(prompt) -> str` and signals end of input by
raising EOFError. An output object provides `puts(*values)`.
"""
import sys
from typing import Iterable, List, Optional, TextIO


class StdinInput:
    """Reads lines from the terminal with the builtin `input`."""

    def read(self, prompt: str) -> str:
        return input(prompt)


class ArrayInput:
    """Reads lines from a fixed sequence, e.g. a script or a test fixture.

    Prompts shown are recorded in `prompts`. EOFError is raised once the
    lines are exhausted.
    """

    def __init__(self, lines: Iterable[str]):
        self._lines = iter(lines)
        self.prompts: List[str] = []

    @classmethod
    def from_string(cls, text: str) -> 'ArrayInput':
        return cls(text.splitlines())

    def read(self, prompt: str) -> str:
        self.prompts.append(prompt)
        try:
            return next(self._lines)
        except StopIteration:
            raise EOFError from None


class StreamOutput:
    """Writes each value on its own line to a text stream (stdout by default)."""

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        # Resolved late so that a replaced sys.stdout is honoured.
        return self._stream if self._stream is not None else sys.stdout

    def puts(self, *values):
        if not values:
            values = ("",)
        for value in values:
            self.stream.write(f"{value}\n")
        self.stream.flush()
