"""
Decides whether accumulated input forms a complete unit of Python.
"""
import codeop
import logging
import warnings

logger = logging.getLogger(__name__)


def valid_expression(code: str) -> bool:
    """Determine if `code` is a complete Python unit.

    Follows the interactive interpreter's rules: a simple statement is
    complete on its own line, a compound statement once a blank line
    follows it. Input that fails to compile is never complete, so the
    reader keeps accumulating (the `!` command discards it).

    >>> valid_expression("class Hello:\\n")
    False
    >>> valid_expression("class Hello:\\n    pass\\n\\n")
    True
    """
    if code.endswith("\n"):
        code = code[:-1]
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", SyntaxWarning)
            return codeop.compile_command(code, "(burrow)", "single") is not None
    except (SyntaxError, ValueError, OverflowError) as e:
        logger.debug("treating uncompilable input as incomplete: %s", e)
        return False
