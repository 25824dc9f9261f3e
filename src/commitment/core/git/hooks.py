"""Install a prepare-commit-msg hook that fills in the message with ``commitment generate``.

The hook only runs for a plain ``git commit``: when git passes a message source
(``-m``, a template, a merge or squash) the user's message is left alone. A
failing generation keeps git's default message file untouched.
"""

from __future__ import annotations

import json
import os
import shlex
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

import yaml

from commitment.core.git.staged import GIT_TIMEOUT_MS
from commitment.core.runtime.errors import ProviderError
from commitment.core.runtime.process import run
from commitment.core.telemetry.logging import get_logger

logger = get_logger("commitment.git.hooks")

HookManager = Literal["husky", "simple-git-hooks", "lefthook", "git"]
HOOK_MANAGERS: tuple[HookManager, ...] = ("husky", "simple-git-hooks", "lefthook", "git")

HOOK_NAME = "prepare-commit-msg"
HOOK_MARKER = "# commitment prepare-commit-msg hook"
LEFTHOOK_CONFIG_NAMES = ("lefthook.yml", ".lefthook.yml", "lefthook.yaml", ".lefthook.yaml")
LEFTHOOK_SCRIPT = Path(".lefthook") / HOOK_NAME / "commitment.sh"
SIMPLE_GIT_HOOKS_KEY = "simple-git-hooks"


class HookInstallError(RuntimeError):
    pass


@dataclass(slots=True, frozen=True)
class HookInstallResult:
    manager: HookManager
    path: Path
    detected: bool
    next_steps: tuple[str, ...] = ()


def generate_command(providers: Sequence[str] = ()) -> str:
    parts = ["commitment", "generate", "--from-git"]
    for name in providers:
        parts.extend(["--provider", name])
    return shlex.join(parts)


def hook_command(providers: Sequence[str] = ()) -> str:
    return f'if [ -z "$2" ] && message=$({generate_command(providers)}); then printf \'%s\\n\' "$message" > "$1"; fi'


def hook_script(providers: Sequence[str] = ()) -> str:
    return "\n".join(
        [
            "#!/bin/sh",
            HOOK_MARKER,
            "# $1 is the message file; $2 is the message source, empty for a plain `git commit`.",
            f'if [ -z "$2" ] && message=$({generate_command(providers)}); then',
            "  printf '%s\\n' \"$message\" > \"$1\"",
            "fi",
            "",
        ]
    )


def repository_root(cwd: str | Path | None = None) -> Path:
    try:
        top = run("git", ["rev-parse", "--show-toplevel"], cwd=cwd, timeout_ms=GIT_TIMEOUT_MS)
    except ProviderError as exc:
        raise HookInstallError(f"not a git repository: {Path(cwd or Path.cwd())}") from exc
    return Path(top.strip())


def git_hooks_dir(root: Path) -> Path:
    # Honours core.hooksPath and worktrees.
    hooks = run("git", ["rev-parse", "--git-path", "hooks"], cwd=root, timeout_ms=GIT_TIMEOUT_MS).strip()
    return (root / hooks).resolve()


def _read_package_json(root: Path) -> dict[str, Any] | None:
    path = root / "package.json"
    if not path.exists():
        return None
    try:
        content = json.loads(path.read_text(encoding="utf-8"))
    except ValueError as exc:
        raise HookInstallError(f"invalid package.json: {exc}") from exc
    if not isinstance(content, dict):
        raise HookInstallError("package.json must contain an object")
    return content


def detect_hook_manager(root: Path) -> HookManager | None:
    if any((root / name).exists() for name in LEFTHOOK_CONFIG_NAMES):
        return "lefthook"
    if (root / ".husky").is_dir():
        return "husky"

    package = _read_package_json(root)
    if package is not None:
        deps = {**(package.get("dependencies") or {}), **(package.get("devDependencies") or {})}
        if SIMPLE_GIT_HOOKS_KEY in package or SIMPLE_GIT_HOOKS_KEY in deps:
            return "simple-git-hooks"
    return None


def _write_hook(path: Path, content: str, *, force: bool) -> None:
    if path.exists() and not force and HOOK_MARKER not in path.read_text(encoding="utf-8", errors="replace"):
        raise HookInstallError(f"Refused to overwrite existing hook: {path} (use --force)")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    if os.name != "nt":
        path.chmod(0o755)


def _install_git(root: Path, providers: Sequence[str], force: bool) -> tuple[Path, tuple[str, ...]]:
    path = git_hooks_dir(root) / HOOK_NAME
    _write_hook(path, hook_script(providers), force=force)
    return path, ()


def _install_husky(root: Path, providers: Sequence[str], force: bool) -> tuple[Path, tuple[str, ...]]:
    path = root / ".husky" / HOOK_NAME
    _write_hook(path, hook_script(providers), force=force)
    return path, ()


def _install_lefthook(root: Path, providers: Sequence[str], force: bool) -> tuple[Path, tuple[str, ...]]:
    script = root / LEFTHOOK_SCRIPT
    _write_hook(script, hook_script(providers), force=force)

    config = next((root / name for name in LEFTHOOK_CONFIG_NAMES if (root / name).exists()), root / "lefthook.yml")
    existing = config.read_text(encoding="utf-8") if config.exists() else ""
    try:
        parsed = yaml.safe_load(existing) if existing.strip() else {}
    except yaml.YAMLError as exc:
        raise HookInstallError(f"invalid {config.name}: {exc}") from exc

    block = f"{HOOK_NAME}:\n  scripts:\n    \"{LEFTHOOK_SCRIPT.name}\":\n      runner: sh\n"
    if isinstance(parsed, dict) and HOOK_NAME in parsed:
        if LEFTHOOK_SCRIPT.name in existing:
            return script, ("npx lefthook install",)
        return script, (f"add {LEFTHOOK_SCRIPT.name} under {HOOK_NAME} scripts in {config.name}", "npx lefthook install")

    text = f"{existing.rstrip()}\n\n{block}" if existing.strip() else block
    config.write_text(text, encoding="utf-8")
    return script, ("npx lefthook install",)


def _install_simple_git_hooks(root: Path, providers: Sequence[str], force: bool) -> tuple[Path, tuple[str, ...]]:
    path = root / "package.json"
    package = _read_package_json(root)
    if package is None:
        raise HookInstallError(f"simple-git-hooks needs a package.json in {root}")

    hooks = package.get(SIMPLE_GIT_HOOKS_KEY)
    if not isinstance(hooks, dict):
        hooks = {}
    current = hooks.get(HOOK_NAME)
    if current and not force and "commitment generate" not in current:
        raise HookInstallError(f"Refused to overwrite existing {SIMPLE_GIT_HOOKS_KEY} {HOOK_NAME} entry (use --force)")

    hooks[HOOK_NAME] = hook_command(providers)
    package[SIMPLE_GIT_HOOKS_KEY] = hooks
    scripts = package.get("scripts")
    if isinstance(scripts, dict):
        scripts.setdefault("prepare", SIMPLE_GIT_HOOKS_KEY)
    else:
        package["scripts"] = {"prepare": SIMPLE_GIT_HOOKS_KEY}

    path.write_text(json.dumps(package, indent=2) + "\n", encoding="utf-8")
    return path, ("npx simple-git-hooks",)


_INSTALLERS = {
    "git": _install_git,
    "husky": _install_husky,
    "lefthook": _install_lefthook,
    "simple-git-hooks": _install_simple_git_hooks,
}


def install_hook(
    cwd: str | Path | None = None,
    *,
    manager: HookManager | None = None,
    providers: Sequence[str] = (),
    force: bool = False,
) -> HookInstallResult:
    root = repository_root(cwd)
    detected = False
    if manager is None:
        found = detect_hook_manager(root)
        detected = found is not None
        manager = found or "git"
    if manager not in _INSTALLERS:
        raise HookInstallError(f"unknown hook manager '{manager}'")

    path, next_steps = _INSTALLERS[manager](root, providers, force)
    logger.info("hook_installed", manager=manager, path=str(path), detected=detected)
    return HookInstallResult(manager=manager, path=path, detected=detected, next_steps=next_steps)
