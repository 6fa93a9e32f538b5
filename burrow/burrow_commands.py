"""
Session commands: lines that are handled by Burrow itself instead of being
evaluated as Python.

A command table is an ordered collection of `(key, handler)` entries. A key
is a string (matched by equality), a compiled regular expression (matched
with `fullmatch`, its groups become the captures), or a tuple/list/set of
those. The first entry whose key matches the line wins.
"""
import collections.abc
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, NamedTuple, Optional, Tuple

from burrow.burrow_datatypes import BreakoutSignal, CommandError, InputBuffer, NestingStack

logger = logging.getLogger(__name__)


@dataclass
class CommandOptions:
    """Everything a command handler gets to work with."""
    captures: Optional[Tuple[Any, ...]]
    eval_string: InputBuffer
    target: Any
    val: str
    nesting: NestingStack
    output: Any
    session: Any = None

    def breakout(self, level: int):
        """Leave every session entered above `level`."""
        raise BreakoutSignal(level)


class Command(NamedTuple):
    key: Any
    handler: Callable[[CommandOptions], None]
    description: str = ""


def match_key(key, val: str):
    """Match a command key against a line.

    Returns (matched, captures); captures are the regex groups, or None
    for a literal match.
    """
    match key:
        case str():
            return key == val, None
        case re.Pattern():
            m = key.fullmatch(val)
            if m is None:
                return False, None
            return True, m.groups()
        case tuple() | list() | set() | frozenset():
            for member in key:
                matched, captures = match_key(member, val)
                if matched:
                    return True, captures
            return False, None
        case _:
            raise TypeError(f"unsupported command key: {key!r}")


def command_entries(commands) -> Iterable[Tuple[Any, Callable]]:
    """The ordered (key, handler) pairs of any supported command table."""
    if isinstance(commands, CommandSet):
        return commands.commands
    if isinstance(commands, collections.abc.Mapping):
        return list(commands.items())
    return list(commands)


def describe_commands(commands) -> List[Tuple[str, str]]:
    """(label, description) pairs for any supported command table.

    Plain tables have no descriptions; the handler's docstring is used.
    """
    if isinstance(commands, CommandSet):
        return commands.describe()
    return [
        (_key_label(key), (handler.__doc__ or "").strip())
        for key, handler in command_entries(commands)
    ]


def find_command(commands, val: str):
    """First (key, handler, captures) matching `val`, or None."""
    for key, handler in command_entries(commands):
        matched, captures = match_key(key, val)
        if matched:
            return key, handler, captures
    return None


class CommandSet:
    """An ordered table of session commands."""

    def __init__(self, entries: Optional[Iterable] = None):
        self._entries: List[Command] = []
        for entry in entries or []:
            self.add(*entry)

    @property
    def commands(self) -> List[Tuple[Any, Callable]]:
        return [(c.key, c.handler) for c in self._entries]

    def add(self, key, handler: Callable[[CommandOptions], None], description: str = ""):
        self._entries.append(Command(key, handler, description))
        return handler

    def command(self, *keys, description: str = ""):
        """Decorator registering a handler under one or more keys.

        CommandError raised by the handler is reported on the session output
        and the offending line is discarded.
        """
        if not keys:
            raise TypeError("command requires at least one key")
        key = keys[0] if len(keys) == 1 else tuple(keys)

        def decorator(func):
            def handler(opts: CommandOptions):
                try:
                    func(opts)
                except CommandError as e:
                    opts.eval_string.clear()
                    opts.output.puts(f"Error: {e}")
            handler.__name__ = func.__name__
            handler.__doc__ = func.__doc__
            self.add(key, handler, description or (func.__doc__ or "").strip())
            return func
        return decorator

    def import_from(self, other: 'CommandSet', *names: str):
        """Copy entries from another set; with names, only entries whose key includes one of them."""
        for entry in other._entries:
            if names and not any(match_key(entry.key, n)[0] for n in names):
                continue
            self._entries.append(entry)
        return self

    def describe(self) -> List[Tuple[str, str]]:
        return [(_key_label(c.key), c.description) for c in self._entries]

    def __iter__(self):
        return iter(self.commands)

    def __len__(self) -> int:
        return len(self._entries)


def _key_label(key) -> str:
    match key:
        case str():
            return key
        case re.Pattern():
            return key.pattern
        case _:
            return ", ".join(_key_label(k) for k in key)


# ===================================================================
# Default commands
# ===================================================================

DEFAULT_COMMANDS = CommandSet()
command = DEFAULT_COMMANDS.command


def _show(opts: CommandOptions, value):
    printer = getattr(opts.session, "print", None)
    if printer is None:
        opts.output.puts(repr(value))
    else:
        printer(opts.output, value)


def _evaluate(opts: CommandOptions, source: str):
    try:
        return opts.target.evaluate(source)
    except Exception as e:
        raise CommandError(f"{type(e).__name__}: {e}") from e


@command("!", description="Refresh the REPL, discarding any pending input.")
def refresh(opts: CommandOptions):
    opts.eval_string.clear()
    opts.output.puts("Refreshed REPL.")


@command("exit", "quit", "back", re.compile(r"cd\s*\.\."),
         description="End the current session and return to the one it was started from.")
def exit_session(opts: CommandOptions):
    opts.eval_string.clear()
    opts.breakout(opts.nesting.level)


@command("exit-all", description="End all nested sessions and the top-level one.")
def exit_all(opts: CommandOptions):
    opts.eval_string.clear()
    opts.breakout(0)


@command("exit-program", "quit-program", description="End the current program.")
def exit_program(opts: CommandOptions):
    opts.output.puts("Exiting program.")
    raise SystemExit(0)


@command(re.compile(r"jump-to\s*(\d*)"), description="Jump to session level N, e.g. `jump-to 0`.")
def jump_to(opts: CommandOptions):
    raw = opts.captures[0] if opts.captures else ""
    current = opts.nesting.level
    if not raw:
        raise CommandError("jump-to requires a level")
    level = int(raw)
    if 0 <= level < current:
        opts.eval_string.clear()
        # End every session above `level`; the one at `level` resumes.
        opts.breakout(level + 1)
    elif level == current:
        opts.eval_string.clear()
        opts.output.puts(f"Already at nest level {level}.")
    else:
        raise CommandError(f"Invalid nest level. Must be between 0 and {current}. Got {level}.")


@command("nesting", description="Show the nesting of active sessions.")
def show_nesting(opts: CommandOptions):
    opts.eval_string.clear()
    opts.output.puts("Nesting status:", "--")
    for frame in opts.nesting:
        if frame.level == 0:
            opts.output.puts(f"{frame.level}. {frame.target_self!r} (Burrow top level)")
        else:
            opts.output.puts(f"{frame.level}. {frame.target_self!r}")


def _local_names(target) -> List[str]:
    namespace = getattr(target, "namespace", {})
    return sorted(n for n in namespace if not (n.startswith("__") and n.endswith("__")))


@command("status", description="Show the receiver, nesting level and last result.")
def status(opts: CommandOptions):
    opts.eval_string.clear()
    state = getattr(opts.session, "state", None)
    last = state.last_result if state is not None else None
    opts.output.puts(
        "Status:",
        "--",
        f"Receiver: {opts.target.receiver!r}",
        f"Nesting level: {opts.nesting.level}",
        f"Local variables: {', '.join(_local_names(opts.target))}",
        f"Last result: {last!r}",
    )


@command("ls", description="List the names bound in the current session.")
def ls(opts: CommandOptions):
    opts.eval_string.clear()
    opts.output.puts(" ".join(_local_names(opts.target)))


@command(re.compile(r"cat\s+(.+)"), description="Show the value of an expression, e.g. `cat x`.")
def cat(opts: CommandOptions):
    opts.eval_string.clear()
    _show(opts, _evaluate(opts, opts.captures[0]))


@command(re.compile(r"cd\s+(.+)"), description="Start a session on the value of an expression, e.g. `cd obj`.")
def cd(opts: CommandOptions):
    opts.eval_string.clear()
    obj = _evaluate(opts, opts.captures[0])
    logger.debug("cd into %r from level %d", obj, opts.nesting.level)
    opts.session.spawn().repl(obj)


@command(re.compile(r"help(?:\s+(.+))?"), description="Show the available commands, or the one named.")
def show_help(opts: CommandOptions):
    opts.eval_string.clear()
    wanted = opts.captures[0] if opts.captures else None
    commands = opts.session.commands if opts.session is not None else DEFAULT_COMMANDS
    described = describe_commands(commands)
    if wanted:
        described = [(label, text) for label, text in described if wanted.strip() in label.split(", ")]
        if not described:
            raise CommandError(f"No such command: {wanted.strip()}")
    opts.output.puts("Command list:", "--")
    for label, text in described:
        opts.output.puts(f"{label}: {text}" if text else label)
