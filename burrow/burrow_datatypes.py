"""
Defines the core data types shared by the Burrow session engine.

This module provides the nesting stack, the pending input buffer, the
tagged evaluation outcome, the shared session state and the control-flow
and error types raised by the engine.
"""

from dataclasses import dataclass, field
from typing import Any, List, Literal, Optional
import collections.abc


class BreakoutSignal(BaseException):
    """Unwinds nested sessions until the one entered at `level` absorbs it.

    Derives from BaseException so that the evaluator's fault capture
    (`except Exception`) never mistakes it for an error in user code.
    """
    def __init__(self, level: int):
        super().__init__(level)
        self.level = level


class ConfigError(ValueError):
    """Raised for a malformed configuration file."""


class CommandError(Exception):
    """Raised by command handlers for bad arguments."""


# =================================================================
# Nesting
# =================================================================

@dataclass(frozen=True)
class Frame:
    """One active session: the level it was entered at and its receiver."""
    level: int
    target_self: Any


class NestingStack(collections.abc.Sequence):
    """The ordered frames of all active sessions, outermost first."""
    def __init__(self, frames: Optional[List[Frame]] = None):
        self.frames: List[Frame] = list(frames or [])

    def __getitem__(self, index):
        return self.frames[index]

    def __len__(self) -> int:
        return len(self.frames)

    def push(self, level: int, target_self: Any) -> Frame:
        frame = Frame(level, target_self)
        self.frames.append(frame)
        return frame

    def pop(self) -> Frame:
        return self.frames.pop()

    @property
    def level(self) -> int:
        """Level of the innermost session, 0 when none is active."""
        if not self.frames:
            return 0
        return self.frames[-1].level

    def __repr__(self) -> str:
        return f"<NestingStack depth={len(self.frames)}>"


# =================================================================
# Input accumulation
# =================================================================

class InputBuffer:
    """The pending unit: lines read so far, each newline-terminated.

    Command handlers receive this object and may `clear()` it in place to
    drop the current line (and anything before it) from evaluation.
    """
    def __init__(self):
        self.lines: List[str] = []

    def append(self, line: str):
        if line.endswith("\n"):
            line = line[:-1]
        self.lines.append(f"{line}\n")

    def clear(self):
        del self.lines[:]

    def empty(self) -> bool:
        return not self.lines

    def __len__(self) -> int:
        return len(self.lines)

    def __str__(self) -> str:
        return "".join(self.lines)

    def __eq__(self, other):
        if isinstance(other, InputBuffer):
            return self.lines == other.lines
        if isinstance(other, str):
            return str(self) == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"InputBuffer({str(self)!r})"


# =================================================================
# Evaluation
# =================================================================

@dataclass
class Outcome:
    """The tagged result of evaluating one unit: a value or a fault."""
    status: Literal['ok', 'fault']
    value: Any = None

    @classmethod
    def ok(cls, value: Any) -> 'Outcome':
        return cls('ok', value)

    @classmethod
    def fault(cls, error: BaseException) -> 'Outcome':
        return cls('fault', error)

    @property
    def is_fault(self) -> bool:
        return self.status == 'fault'

    @property
    def result(self) -> Any:
        """The value to print: the produced value or the fault object."""
        return self.value


@dataclass
class SessionState:
    """Slots shared by every session that runs against the same state.

    Sessions nest re-entrantly (evaluated code may start a new session), so
    the stack and result slots live here rather than on a single session.
    """
    nesting: NestingStack = field(default_factory=NestingStack)
    last_result: Any = None
    active_instance: Any = None

    def reset(self):
        self.nesting = NestingStack()
        self.last_result = None
        self.active_instance = None


DEFAULT_STATE = SessionState()
