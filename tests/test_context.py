import pytest

from burrow.burrow_context import (
    MAIN, TOPLEVEL_BINDING, Binding, ExecutionContext, binding_for, evaluate_unit
)
from burrow.burrow_datatypes import BreakoutSignal


class Widget:
    def __init__(self, name):
        self.name = name

    def __repr__(self):
        return f"Widget({self.name!r})"


class SelfBinding:
    def __init__(self):
        self.binding = Binding(self, {"greeting": "hello"})

    def __binding__(self):
        return self.binding


def test_binding_is_returned_unchanged():
    b = Binding(Widget("a"))
    assert binding_for(b) is b


def test_main_resolves_to_toplevel_binding():
    assert binding_for(MAIN) is TOPLEVEL_BINDING
    assert TOPLEVEL_BINDING.receiver is MAIN
    assert repr(MAIN) == "main"


def test_object_supplies_its_own_binding():
    obj = SelfBinding()
    assert binding_for(obj) is obj.binding


def test_plain_object_gets_fresh_binding_with_itself_as_receiver():
    w = Widget("a")
    b = binding_for(w)
    assert isinstance(b, Binding)
    assert b.receiver is w
    assert b.evaluate("self.name") == "a"
    # A fresh namespace each time
    assert binding_for(w) is not b


def test_classes_are_receivers_not_binding_factories():
    b = binding_for(SelfBinding)
    assert b.receiver is SelfBinding


def test_other_execution_contexts_are_returned_unchanged():
    class Scripted(ExecutionContext):
        receiver = "scripted"

        def evaluate(self, source):
            return 42

        def bind(self, name, value):
            pass

    ctx = Scripted()
    assert binding_for(ctx) is ctx


def test_evaluate_expression_returns_value():
    b = Binding(MAIN, {})
    assert b.evaluate("1 + 1") == 2


def test_evaluate_statements_persist_and_return_none():
    b = Binding(MAIN, {})
    assert b.evaluate("x = 20\n") is None
    assert b.evaluate("def double(n):\n    return n * 2\n\n") is None
    assert b.evaluate("double(x) + 2") == 42


def test_evaluate_returns_value_of_trailing_expression():
    b = Binding(MAIN, {})
    assert b.evaluate("a = 1\nb = 2\na + b\n") == 3


def test_evaluate_empty_source_is_none():
    b = Binding(MAIN, {})
    assert b.evaluate("") is None
    assert b.evaluate("\n") is None


def test_evaluate_raises_faults():
    b = Binding(MAIN, {})
    with pytest.raises(ZeroDivisionError):
        b.evaluate("1 / 0")
    with pytest.raises(SyntaxError):
        b.evaluate("1 +* 2")


def test_evaluate_unit_captures_faults():
    b = Binding(MAIN, {})
    outcome = evaluate_unit(b, "1 / 0")
    assert outcome.is_fault
    assert isinstance(outcome.result, ZeroDivisionError)

    outcome = evaluate_unit(b, "1 + 1")
    assert not outcome.is_fault
    assert outcome.result == 2


def test_evaluate_unit_captures_keyboard_interrupt():
    b = Binding(MAIN, {})
    outcome = evaluate_unit(b, "raise KeyboardInterrupt")
    assert isinstance(outcome.result, KeyboardInterrupt)


def test_evaluate_unit_propagates_system_exit():
    b = Binding(MAIN, {})
    with pytest.raises(SystemExit):
        evaluate_unit(b, "raise SystemExit(3)")


def test_evaluate_unit_propagates_breakout():
    b = Binding(MAIN, {"BreakoutSignal": BreakoutSignal})
    with pytest.raises(BreakoutSignal):
        evaluate_unit(b, "raise BreakoutSignal(0)")


def test_bind_sets_names_visible_to_code():
    b = Binding(MAIN, {})
    b.bind("_", 41)
    assert b.evaluate("_ + 1") == 42
