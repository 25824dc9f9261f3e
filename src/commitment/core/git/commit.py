from __future__ import annotations

from pathlib import Path

from commitment.core.git.staged import GIT_TIMEOUT_MS
from commitment.core.runtime.process import run


def append_signature(message: str, signature: str | None) -> str:
    if signature is None or not signature.strip():
        return message
    return f"{message}\n\n{signature.strip()}"


def create_commit(message: str, cwd: str | Path | None = None) -> str:
    """Commit what is staged; a failing ``git commit`` raises ``CommandFailedError``."""
    return run("git", ["commit", "--quiet", "-m", message], cwd=cwd, timeout_ms=GIT_TIMEOUT_MS)
