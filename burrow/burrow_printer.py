"""
A pretty-printer for values produced by Burrow sessions.
"""
import collections.abc
from typing import Any

from burrow.burrow_context import Binding, _Main


class Printer:
    """Formats evaluation results and faults into readable strings.

    Containers are rendered inline when they fit within `width`, otherwise
    one element per line, indented by `indent_width` per level. A container
    met again while it is being formatted renders as `[...]`, `{...}` or
    `(...)`, as `repr` does.
    """

    def __init__(self, indent_width=2, width=80):
        self._indent_char = " " * indent_width
        self.width = width
        self._handlers = self._create_handlers()

    def pformat(self, obj, level=0, seen=None):
        """Public entry point to format an object."""
        handler = self._get_handler(obj)
        return handler(obj, level, seen if seen is not None else set())

    def _get_handler(self, obj):
        """Dispatcher to find the correct formatting method."""
        obj_type = type(obj)
        if obj_type in self._handlers:
            return self._handlers[obj_type]
        if isinstance(obj, BaseException): return self._pformat_exception
        if isinstance(obj, str): return self._pformat_primitive_repr
        if isinstance(obj, collections.abc.Mapping): return self._pformat_dict
        if isinstance(obj, (list, tuple)): return self._pformat_sequence
        # Default to Python's repr for unknown types
        return lambda o, l, s: repr(o)

    def _create_handlers(self):
        return {
            str: self._pformat_primitive_repr,
            bytes: self._pformat_primitive_repr,
            int: self._pformat_primitive,
            float: self._pformat_primitive_repr,
            bool: self._pformat_primitive,
            type(None): self._pformat_primitive,
            list: self._pformat_sequence,
            tuple: self._pformat_sequence,
            set: self._pformat_set,
            frozenset: self._pformat_set,
            dict: self._pformat_dict,
            Binding: self._pformat_primitive_repr,
            _Main: self._pformat_primitive_repr,
        }

    def _pformat_primitive(self, obj, level, seen):
        return str(obj)

    def _pformat_primitive_repr(self, obj, level, seen):
        return repr(obj)

    def _pformat_exception(self, obj, level, seen):
        message = str(obj)
        name = type(obj).__name__
        return f"{name}: {message}" if message else name

    def _pformat_sequence(self, obj, level, seen):
        open_char, close_char = ('(', ')') if isinstance(obj, tuple) else ('[', ']')
        if id(obj) in seen:
            return f"{open_char}...{close_char}"
        seen.add(id(obj))
        try:
            if isinstance(obj, tuple) and len(obj) == 1:
                return f"({self.pformat(obj[0], level, seen)},)"
            items = [self.pformat(x, level + 1, seen) for x in obj]
        finally:
            seen.discard(id(obj))
        return self._pformat_items(items, level, open_char, close_char)

    def _pformat_set(self, obj, level, seen):
        if not obj:
            return f"{type(obj).__name__}()"
        items = sorted((self.pformat(x, level + 1, seen) for x in obj))
        return self._pformat_items(items, level, '{', '}')

    def _pformat_dict(self, obj, level, seen):
        if id(obj) in seen:
            return "{...}"
        seen.add(id(obj))
        try:
            items = [
                f"{self.pformat(key, level + 1, seen)}: {self.pformat(value, level + 1, seen)}"
                for key, value in obj.items()
            ]
        finally:
            seen.discard(id(obj))
        return self._pformat_items(items, level, '{', '}')

    def _pformat_items(self, items, level, open_char, close_char):
        if not items:
            return f"{open_char}{close_char}"

        inline = f"{open_char}{', '.join(items)}{close_char}"
        if '\n' not in inline and len(self._indent_char * level) + len(inline) <= self.width:
            return inline

        outer_indent = self._indent_char * level
        inner_indent = self._indent_char * (level + 1)

        lines = []
        for item in items:
            # Only the first line needs indenting; nested blocks indent their own rest.
            item_lines = item.splitlines() or [""]
            lines.append("\n".join([inner_indent + item_lines[0]] + item_lines[1:]) + ",")

        return f"{open_char}\n" + "\n".join(lines) + f"\n{outer_indent}{close_char}"


def make_print(printer: Printer):
    """Build a print function for sessions from a configured Printer.

    A value that cannot be formatted (its `__repr__` raises) is reported
    by the exception it raised, like any other fault.
    """
    def print_result(output, value: Any):
        # Statements produce None; like the interactive interpreter, show nothing.
        if value is None:
            return
        try:
            text = printer.pformat(value)
        except Exception as e:
            output.puts(printer.pformat(e))
            return
        if isinstance(value, BaseException):
            output.puts(text)
        else:
            output.puts(f"=> {text}")
    return print_result


default_print = make_print(Printer())
