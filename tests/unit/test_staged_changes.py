from __future__ import annotations

import shutil
import subprocess

import pytest

from commitment.core.git.staged import collect_staged_changes
from commitment.core.runtime.errors import CommandFailedError

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def _git(cwd, *args):
    subprocess.run(["git", *args], cwd=cwd, check=True, capture_output=True)


def test_collects_staged_diff(tmp_path):
    _git(tmp_path, "init", "-q")
    (tmp_path / "hello.txt").write_text("hello\n", encoding="utf-8")
    _git(tmp_path, "add", "hello.txt")

    staged = collect_staged_changes(tmp_path)
    assert not staged.is_empty
    assert "hello.txt" in staged.diff
    assert "+hello" in staged.diff
    assert "A\thello.txt" in staged.name_status
    assert "hello.txt" in staged.stat


def test_nothing_staged_is_empty(tmp_path):
    _git(tmp_path, "init", "-q")
    assert collect_staged_changes(tmp_path).is_empty


def test_outside_repository_fails(tmp_path, monkeypatch):
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path.parent))
    with pytest.raises(CommandFailedError):
        collect_staged_changes(tmp_path)
