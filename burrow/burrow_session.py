"""
The Burrow session: a nestable read-eval-print loop over an execution
context.
"""
import logging
from typing import Any, Optional

from burrow.burrow_commands import CommandOptions, find_command
from burrow.burrow_config import CONFIG_OPTIONS, Defaults, SessionConfig
from burrow.burrow_context import TOPLEVEL_BINDING, ExecutionContext, binding_for, evaluate_unit
from burrow.burrow_datatypes import DEFAULT_STATE, BreakoutSignal, InputBuffer, NestingStack, SessionState
from burrow.burrow_syntax import valid_expression

logger = logging.getLogger(__name__)


class Session:
    """A read-eval-print loop.

    Every option in CONFIG_OPTIONS (`input`, `output`, `commands`, `print`,
    `prompts`, `hooks`) may be given as a keyword argument; the rest come
    from the process-wide defaults. Sessions sharing a `state` share one
    nesting stack and one set of result slots.
    """

    def __init__(self, state: Optional[SessionState] = None, defaults: Optional[Defaults] = None, **options):
        self.config = SessionConfig.build(defaults, **options)
        self.state = state if state is not None else DEFAULT_STATE

    @classmethod
    def start(cls, target: Any = TOPLEVEL_BINDING, **options) -> Any:
        """Start a session on `target` with the given options.

        Without `state` the session runs on the process-wide default state.
        Inside a session with its own state, nest with `_burrow_.spawn().repl(obj)`
        or pass `state=_burrow_.state`, so that `exit-all` and `jump-to` reach
        the outer levels.
        """
        return cls(**options).repl(target)

    def spawn(self) -> 'Session':
        """A new session with this session's collaborators and state."""
        options = {name: getattr(self.config, name) for name in CONFIG_OPTIONS}
        return type(self)(state=self.state, **options)

    # Collaborators, read-only after construction.
    input = property(lambda self: self.config.input)
    output = property(lambda self: self.config.output)
    commands = property(lambda self: self.config.commands)
    print = property(lambda self: self.config.print)
    prompts = property(lambda self: self.config.prompts)
    hooks = property(lambda self: self.config.hooks)

    @property
    def nesting(self) -> NestingStack:
        return self.state.nesting

    def exec_hook(self, hook_name: str, *args, **kwargs):
        """Execute the hook `hook_name`, if it is defined."""
        hook = self.hooks.get(hook_name)
        if hook:
            hook(*args, **kwargs)

    def repl(self, target: Any = TOPLEVEL_BINDING) -> Any:
        """Start a read-eval-print loop on `target`.

        Runs until a breakout is raised. A breakout for this session's own
        level ends it; one for a lower level ends it and is passed on to the
        session it was started from. The frame is popped and `after_session`
        runs however the loop ends.

        Returns the receiver of the session.
        """
        target = binding_for(target)
        target_self = target.receiver

        self.exec_hook("before_session", self.output, target_self)

        nesting_level = len(self.nesting)

        self.state.active_instance = self
        self._bind_locals(target)

        self.nesting.push(nesting_level, target_self)
        logger.debug("entered session at level %d on %r", nesting_level, target_self)
        try:
            while True:
                self.rep(target)
        except BreakoutSignal as signal:
            break_level = signal.level
        finally:
            self.nesting.pop()
            self.exec_hook("after_session", self.output, target_self)

        if break_level != nesting_level:
            logger.debug("passing breakout to level %d on from level %d", break_level, nesting_level)
            raise BreakoutSignal(break_level)

        logger.debug("left session at level %d", nesting_level)
        return target_self

    def rep(self, target: Any = TOPLEVEL_BINDING):
        """Perform a read-eval-print."""
        target = binding_for(target)
        self.print(self.output, self.re(target))

    def re(self, target: Any = TOPLEVEL_BINDING) -> Any:
        """Perform a read-eval.

        Returns the value of the evaluated unit, or the exception it raised.
        SystemExit raised by the evaluated code is not caught.
        """
        target = binding_for(target)
        outcome = evaluate_unit(target, self.r(target))
        if not outcome.is_fault:
            self.state.last_result = outcome.value
            self.state.active_instance = self
            self._bind_locals(target)
        return outcome.result

    def r(self, target: Any = TOPLEVEL_BINDING) -> str:
        """Perform a multi-line read, until the input forms a complete unit.

        Every line is offered to the commands first; a command may clear the
        pending input so the line never reaches evaluation.
        """
        target = binding_for(target)
        eval_string = InputBuffer()
        while True:
            val = self.input.read(self.prompt(eval_string, target))
            if val.endswith("\n"):
                val = val[:-1]
            eval_string.append(val)
            self.process_commands(val, eval_string, target)

            code = str(eval_string)
            if valid_expression(code):
                return code

    def process_commands(self, val: str, eval_string: InputBuffer, target: ExecutionContext):
        """Run the first command matching `val`, if any."""
        found = find_command(self.commands, val)
        if found is None:
            return
        pattern, action, captures = found
        logger.debug("command %r matched %r", pattern, val)

        options = CommandOptions(
            captures=captures,
            eval_string=eval_string,
            target=target,
            val=val,
            nesting=self.nesting,
            output=self.output,
            session=self,
        )
        action(options)

    def prompt(self, eval_string, target: ExecutionContext) -> str:
        """The prompt to show: fresh when nothing is pending, continuation otherwise."""
        target_self = target.receiver
        fresh, continuation = self.prompts
        if not len(eval_string):
            return fresh(target_self, self.nesting.level)
        return continuation(target_self, self.nesting.level)

    def _bind_locals(self, target: ExecutionContext):
        target.bind("_burrow_", self.state.active_instance)
        target.bind("_", self.state.last_result)

    def __repr__(self) -> str:
        return f"<Session level={self.nesting.level} depth={len(self.nesting)}>"


def start(target: Any = TOPLEVEL_BINDING, **options) -> Any:
    """Start a session on `target`; see Session.start."""
    return Session.start(target, **options)
