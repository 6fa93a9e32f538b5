"""
burrow - a nestable read-eval-print session engine for Python.
"""

from burrow.burrow_commands import DEFAULT_COMMANDS, CommandOptions, CommandSet
from burrow.burrow_config import DEFAULTS, Defaults, SessionConfig, load_config, template_prompt
from burrow.burrow_context import MAIN, TOPLEVEL_BINDING, Binding, ExecutionContext, binding_for
from burrow.burrow_datatypes import BreakoutSignal, CommandError, ConfigError, SessionState
from burrow.burrow_io import ArrayInput, StdinInput, StreamOutput
from burrow.burrow_printer import Printer
from burrow.burrow_session import Session, start
from burrow.burrow_syntax import valid_expression

__version__ = "0.1.0"

__all__ = [
    "Session", "start",
    "SessionState", "SessionConfig", "Defaults", "DEFAULTS", "load_config", "template_prompt",
    "Binding", "ExecutionContext", "MAIN", "TOPLEVEL_BINDING", "binding_for",
    "CommandSet", "CommandOptions", "DEFAULT_COMMANDS",
    "ArrayInput", "StdinInput", "StreamOutput", "Printer",
    "BreakoutSignal", "CommandError", "ConfigError",
    "valid_expression",
]
