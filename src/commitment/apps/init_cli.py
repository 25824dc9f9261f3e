from __future__ import annotations

import os

from commitment.cli import base_parser
from commitment.core.git.hooks import HOOK_MANAGERS, HookInstallError, install_hook
from commitment.core.telemetry.logging import configure_logging


def main() -> int:
    parser = base_parser("commitment-init", "Install a prepare-commit-msg hook that runs commitment")
    parser.add_argument("--cwd", default=None, help="Repository to install into (defaults to the current directory)")
    parser.add_argument("--hook-manager", choices=HOOK_MANAGERS, default=None, help="Skip detection and use this manager")
    parser.add_argument(
        "--provider",
        action="append",
        default=None,
        help="Provider the hook asks for, in order (repeatable)",
    )
    parser.add_argument("--force", action="store_true", help="Overwrite a hook that commitment did not write")
    args = parser.parse_args()

    configure_logging(os.getenv("COMMITMENT_LOG_LEVEL", "WARNING"))

    try:
        result = install_hook(args.cwd, manager=args.hook_manager, providers=args.provider or (), force=args.force)
    except (HookInstallError, OSError) as exc:
        print(f"hook-install-failed error={exc}")
        return 1

    print(f"hook-manager={result.manager} detected={result.detected}")
    print(f"hook-installed path={result.path}")
    for step in result.next_steps:
        print(f"next: {step}")
    print("Next: git add <files> && git commit")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
