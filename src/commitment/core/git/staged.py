from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from commitment.core.runtime.process import run

GIT_TIMEOUT_MS = 30_000


@dataclass(slots=True, frozen=True)
class StagedChanges:
    diff: str
    stat: str
    name_status: str

    @property
    def is_empty(self) -> bool:
        return not self.diff.strip()


def _git(args: list[str], cwd: str | Path | None) -> str:
    return run("git", args, cwd=cwd, timeout_ms=GIT_TIMEOUT_MS)


def collect_staged_changes(cwd: str | Path | None = None) -> StagedChanges:
    """Collect the staged diff as raw text; git failures propagate as provider errors."""
    return StagedChanges(
        diff=_git(["diff", "--cached", "--unified=3", "--no-color"], cwd),
        stat=_git(["diff", "--cached", "--stat", "--no-color"], cwd),
        name_status=_git(["diff", "--cached", "--name-status"], cwd),
    )
