from __future__ import annotations

import subprocess
import sys


def _run(args: list[str]) -> subprocess.CompletedProcess[str]:
    return subprocess.run(args, capture_output=True, text=True, check=False)


def test_cli_help_smoke():
    cmds = [
        [sys.executable, "-m", "commitment.apps.generate_cli", "--help"],
        [sys.executable, "-m", "commitment.apps.diagnostics_cli", "--help"],
        [sys.executable, "-m", "commitment.apps.init_cli", "--help"],
        [sys.executable, "-m", "commitment.apps.short_cli", "--help"],
    ]
    for cmd in cmds:
        proc = _run(cmd)
        assert proc.returncode == 0, proc.stderr
        assert "usage:" in proc.stdout
