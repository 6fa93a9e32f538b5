"""
Execution contexts for Burrow sessions: the Binding, the top-level
binding, and resolution of arbitrary session targets into bindings.
"""
import ast
import builtins
import inspect
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from burrow.burrow_datatypes import Outcome

logger = logging.getLogger(__name__)


class _Main:
    """The receiver of the top-level session."""
    _instance: Optional['_Main'] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "main"


MAIN = _Main()


class ExecutionContext(ABC):
    """The required base class for anything a session can evaluate in."""

    @property
    @abstractmethod
    def receiver(self) -> Any: raise NotImplementedError
    @abstractmethod
    def evaluate(self, source: str) -> Any: raise NotImplementedError
    @abstractmethod
    def bind(self, name: str, value: Any): raise NotImplementedError


class Binding(ExecutionContext):
    """A point of evaluation: a namespace plus a receiver bound as `self`.

    Source handed to `evaluate` runs with the namespace as its globals, so
    assignments and definitions persist across evaluations. When the final
    statement is an expression its value is returned, otherwise None.
    """
    def __init__(self, receiver: Any, namespace: Optional[Dict[str, Any]] = None, filename: str = "(burrow)"):
        self.namespace: Dict[str, Any] = namespace if namespace is not None else {}
        self.namespace.setdefault("__builtins__", builtins)
        self.namespace.setdefault("__name__", "__burrow__")
        self.namespace["self"] = receiver
        self.filename = filename

    @classmethod
    def for_object(cls, obj: Any, namespace: Optional[Dict[str, Any]] = None) -> 'Binding':
        """A fresh binding with `obj` as its receiver."""
        return cls(obj, dict(namespace or {}))

    @property
    def receiver(self) -> Any:
        return self.namespace.get("self")

    def bind(self, name: str, value: Any):
        self.namespace[name] = value

    def evaluate(self, source: str) -> Any:
        tree = ast.parse(source, self.filename, "exec")
        last = None
        if tree.body and isinstance(tree.body[-1], ast.Expr):
            last = ast.Expression(tree.body.pop().value)
        exec(compile(tree, self.filename, "exec"), self.namespace)
        if last is None:
            return None
        return eval(compile(last, self.filename, "eval"), self.namespace)

    def __repr__(self) -> str:
        return f"<Binding self={self.receiver!r}>"


TOPLEVEL_BINDING = Binding(MAIN)


def binding_for(target: Any) -> ExecutionContext:
    """Return an ExecutionContext for `target`, or `target` itself if it is one.

    The top-level receiver maps to TOPLEVEL_BINDING. Any other object may
    supply its own binding through a `__binding__()` method; otherwise it
    gets a fresh namespace with itself as receiver.
    """
    match target:
        case ExecutionContext():
            return target
        case _Main():
            return TOPLEVEL_BINDING
        case _:
            factory = None if inspect.isclass(target) else getattr(target, "__binding__", None)
            if callable(factory):
                return factory()
            return Binding.for_object(target)


def evaluate_unit(target: ExecutionContext, source: str) -> Outcome:
    """Evaluate `source` in `target`, capturing any fault as the outcome.

    SystemExit and BreakoutSignal are not faults and propagate.
    """
    try:
        return Outcome.ok(target.evaluate(source))
    except (Exception, KeyboardInterrupt) as e:
        logger.debug("captured %s while evaluating %r", type(e).__name__, source)
        return Outcome.fault(e)
