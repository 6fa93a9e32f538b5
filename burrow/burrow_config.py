"""
Session configuration: the six collaborators every session is built from,
the process-wide defaults they fall back to, and YAML configuration files.
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

import pystache
import yaml

from burrow.burrow_commands import DEFAULT_COMMANDS
from burrow.burrow_datatypes import ConfigError
from burrow.burrow_io import StdinInput, StreamOutput
from burrow.burrow_printer import Printer, default_print, make_print

logger = logging.getLogger(__name__)

# The list of configuration options.
CONFIG_OPTIONS = ("input", "output", "commands", "print", "prompts", "hooks")

Prompt = Callable[[Any, int], str]


# ===================================================================
# Prompts
# ===================================================================

DEFAULT_PROMPT_TEMPLATES = (
    "burrow({{receiver}}){{#nested}}:{{level}}{{/nested}}> ",
    "burrow({{receiver}}){{#nested}}:{{level}}{{/nested}}* ",
)


def template_prompt(template: str) -> Prompt:
    """Build a prompt function from a Mustache template.

    The template sees `receiver` (the repr of the session's receiver),
    `level` (the nesting level) and `nested` (true above level 0).
    """
    renderer = pystache.Renderer(escape=lambda u: u)

    def prompt(target_self, level):
        context = {"receiver": repr(target_self), "level": level, "nested": level > 0}
        return renderer.render(template, context)
    return prompt


DEFAULT_PROMPT: Tuple[Prompt, Prompt] = (
    template_prompt(DEFAULT_PROMPT_TEMPLATES[0]),
    template_prompt(DEFAULT_PROMPT_TEMPLATES[1]),
)


# ===================================================================
# Hooks
# ===================================================================

def _announce(verb: str):
    def hook(output, target_self):
        output.puts(f"{verb} Burrow session for {target_self!r}")
    return hook


DEFAULT_HOOKS: Dict[str, Callable] = {
    "before_session": _announce("Beginning"),
    "after_session": _announce("Ending"),
}


# ===================================================================
# Defaults and per-session configuration
# ===================================================================

class Defaults:
    """Process-wide defaults that sessions fall back to."""

    def __init__(self):
        self._values: Dict[str, Any] = {}
        self.reset()

    def reset(self):
        self._values = {
            "input": StdinInput(),
            "output": StreamOutput(),
            "commands": DEFAULT_COMMANDS,
            "print": default_print,
            "prompts": DEFAULT_PROMPT,
            "hooks": dict(DEFAULT_HOOKS),
        }

    def set(self, **options):
        _check_option_names(options)
        self._values.update(options)

    def options(self) -> Dict[str, Any]:
        return dict(self._values)

    def configure(self, path):
        """Apply a YAML configuration file to the defaults."""
        self.set(**load_config(path))

    def __getattr__(self, name: str):
        values = self.__dict__.get("_values", {})
        if name in values:
            return values[name]
        raise AttributeError(name)


DEFAULTS = Defaults()


def _check_option_names(options):
    unknown = sorted(set(options) - set(CONFIG_OPTIONS))
    if unknown:
        raise TypeError(f"unknown session option(s): {', '.join(unknown)}")


@dataclass(frozen=True)
class SessionConfig:
    """The collaborators of one session, fixed at construction."""
    input: Any
    output: Any
    commands: Any
    print: Callable[[Any, Any], None]
    prompts: Tuple[Prompt, Prompt]
    hooks: Dict[str, Callable]

    @classmethod
    def build(cls, defaults: Optional[Defaults] = None, **overrides) -> 'SessionConfig':
        """Merge `overrides` onto the defaults."""
        _check_option_names(overrides)
        options = (defaults or DEFAULTS).options()
        options.update(overrides)
        prompts = options["prompts"]
        if callable(prompts):
            prompts = (prompts, prompts)
        if len(prompts) != 2:
            raise TypeError("prompts must be a (fresh, continuation) pair")
        options["prompts"] = tuple(prompts)
        options["hooks"] = dict(options["hooks"] or {})
        return cls(**options)


# ===================================================================
# Configuration files
# ===================================================================

def load_config(path) -> Dict[str, Any]:
    """Read a YAML configuration file into session overrides."""
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"cannot read configuration {p}: {e}") from e
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {p}: {e}") from e
    return config_from_mapping(data or {})


def config_from_mapping(data) -> Dict[str, Any]:
    """Translate a parsed configuration mapping into session overrides.

    Recognised sections: `prompt` (`fresh`, `continuation` templates),
    `printer` (`indent_width`, `width`) and `hooks` (`announce`).
    """
    if not isinstance(data, dict):
        raise ConfigError("configuration must be a mapping")
    unknown = sorted(set(data) - {"prompt", "printer", "hooks"})
    if unknown:
        logger.warning("ignoring unknown configuration section(s): %s", ", ".join(map(str, unknown)))

    overrides: Dict[str, Any] = {}

    prompt = _section(data, "prompt")
    if prompt is not None:
        fresh = prompt.get("fresh", DEFAULT_PROMPT_TEMPLATES[0])
        continuation = prompt.get("continuation", DEFAULT_PROMPT_TEMPLATES[1])
        if not isinstance(fresh, str) or not isinstance(continuation, str):
            raise ConfigError("prompt templates must be strings")
        overrides["prompts"] = (template_prompt(fresh), template_prompt(continuation))

    printer = _section(data, "printer")
    if printer is not None:
        indent_width = printer.get("indent_width", 2)
        width = printer.get("width", 80)
        if not isinstance(indent_width, int) or not isinstance(width, int) or indent_width < 0 or width < 1:
            raise ConfigError("printer.indent_width and printer.width must be positive integers")
        overrides["print"] = make_print(Printer(indent_width=indent_width, width=width))

    hooks = _section(data, "hooks")
    if hooks is not None:
        announce = hooks.get("announce", True)
        if not isinstance(announce, bool):
            raise ConfigError("hooks.announce must be true or false")
        overrides["hooks"] = dict(DEFAULT_HOOKS) if announce else {}

    return overrides


def _section(data, name) -> Optional[dict]:
    section = data.get(name)
    if section is None:
        return None
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' must be a mapping")
    return section
