import logging
import os
import sys
from pathlib import Path

from burrow import MAIN, ConfigError, Session, load_config

DEFAULT_CONFIG_PATH = Path.home() / ".burrowrc.yaml"


def config_path():
    """The configuration file to use, if any: $BURROW_CONFIG, else ~/.burrowrc.yaml when present."""
    env = os.environ.get("BURROW_CONFIG")
    if env:
        return Path(env)
    if DEFAULT_CONFIG_PATH.exists():
        return DEFAULT_CONFIG_PATH
    return None


def main():
    """Start an interactive top-level session on stdin/stdout."""
    if os.environ.get("BURROW_DEBUG"):
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    options = {}
    path = config_path()
    if path is not None:
        try:
            options = load_config(path)
        except ConfigError as e:
            print(f"Error: {e}", file=sys.stderr)
            raise SystemExit(1)

    print("Burrow REPL v0.1")
    print("Type 'exit' or press Ctrl+D to quit.")

    try:
        Session(**options).repl(MAIN)
    except EOFError:
        print("\nExiting.")


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\nExiting.")
