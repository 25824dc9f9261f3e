from __future__ import annotations

import argparse
import sys

from commitment.apps import diagnostics_cli as diag_app
from commitment.apps import generate_cli as generate_app
from commitment.apps import init_cli as init_app

COMMANDS = {
    "generate": ("commitment-generate", generate_app.main),
    "diag": ("commitment-diag", diag_app.main),
    "init": ("commitment-init", init_app.main),
}


def main() -> int:
    parser = argparse.ArgumentParser(prog="commitment", description="commitment short command")
    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("generate", help="Generate a commit message", add_help=False)
    subparsers.add_parser("diag", help="Run diagnostics", add_help=False)
    subparsers.add_parser("init", help="Install the prepare-commit-msg hook", add_help=False)

    # Everything after the command belongs to the sub-CLI, including its flags.
    argv = sys.argv[1:]
    if argv and argv[0] in COMMANDS:
        prog, entry = COMMANDS[argv[0]]
        sys.argv = [prog, *argv[1:]]
        return entry()

    parser.parse_args(argv)
    parser.print_help()
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
