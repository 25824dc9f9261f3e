from __future__ import annotations

import io
import shutil
import subprocess
import sys

import pytest
import yaml

from commitment.apps import generate_cli, short_cli

MISSING = "commitment-definitely-missing-binary"
ECHO_STDIN = "import sys; data = sys.stdin.read(); print('feat: ' + ('sentinel' if '<<<COMMIT_MESSAGE_START>>>' in data else data.strip()))"


@pytest.fixture(autouse=True)
def _isolated(monkeypatch, tmp_path):
    monkeypatch.delenv("COMMITMENT_CONFIG_FILE", raising=False)
    monkeypatch.delenv("COMMITMENT_LOG_LEVEL", raising=False)
    monkeypatch.chdir(tmp_path)


def _write_config(tmp_path, providers) -> str:
    path = tmp_path / "commitment.yaml"
    path.write_text(yaml.safe_dump({"providers": providers}), encoding="utf-8")
    return str(path)


def _python_claude(code: str = ECHO_STDIN) -> dict:
    return {"kind": "cli", "tool": "claude", "command": sys.executable, "args": ["-c", code]}


def test_falls_back_to_working_provider(tmp_path, monkeypatch, capsys):
    config = _write_config(tmp_path, [{"kind": "cli", "tool": "gemini", "command": MISSING}, _python_claude()])
    monkeypatch.setattr("sys.stdin", io.StringIO("add the login page"))
    monkeypatch.setattr("sys.argv", ["commitment-generate", "--config", config])

    rc = generate_cli.main()
    captured = capsys.readouterr()
    assert rc == 0
    assert captured.out.strip() == "feat: add the login page"


def test_all_failures_print_report_and_exit_1(tmp_path, monkeypatch, capsys):
    config = _write_config(tmp_path, [{"kind": "cli", "tool": "gemini", "command": MISSING}])
    monkeypatch.setattr("sys.stdin", io.StringIO("prompt"))
    monkeypatch.setattr("sys.argv", ["commitment-generate", "--config", config])

    rc = generate_cli.main()
    captured = capsys.readouterr()
    assert rc == 1
    assert captured.out == ""
    assert "All 1 providers failed" in captured.err
    assert "1. gemini:" in captured.err


def test_prompt_file_and_provider_selection(tmp_path, monkeypatch, capsys):
    config = _write_config(tmp_path, [{"kind": "cli", "tool": "gemini", "command": MISSING}, _python_claude()])
    prompt_file = tmp_path / "prompt.txt"
    prompt_file.write_text("tidy the readme", encoding="utf-8")
    monkeypatch.setattr(
        "sys.argv",
        ["commitment-generate", "--config", config, "--provider", "claude", "--prompt-file", str(prompt_file)],
    )

    rc = generate_cli.main()
    assert rc == 0
    assert capsys.readouterr().out.strip() == "feat: tidy the readme"


def test_unknown_provider_is_a_usage_error(tmp_path, monkeypatch, capsys):
    config = _write_config(tmp_path, [_python_claude()])
    monkeypatch.setattr("sys.stdin", io.StringIO("prompt"))
    monkeypatch.setattr("sys.argv", ["commitment-generate", "--config", config, "--provider", "copilot"])

    assert generate_cli.main() == 2
    assert "unknown provider 'copilot'" in capsys.readouterr().err


def test_invalid_config_exits_2(tmp_path, monkeypatch, capsys):
    path = tmp_path / "bad.yaml"
    path.write_text("providers:\n  - kind: cli\n    tool: copilot\n", encoding="utf-8")
    monkeypatch.setattr("sys.argv", ["commitment-generate", "--config", str(path)])

    assert generate_cli.main() == 2
    assert "config-invalid" in capsys.readouterr().err


def test_empty_prompt_exits_1(tmp_path, monkeypatch, capsys):
    config = _write_config(tmp_path, [_python_claude()])
    monkeypatch.setattr("sys.stdin", io.StringIO("   \n"))
    monkeypatch.setattr("sys.argv", ["commitment-generate", "--config", config])

    assert generate_cli.main() == 1
    assert "prompt-empty" in capsys.readouterr().err


def test_non_positive_timeout_is_rejected_by_parser(tmp_path, monkeypatch):
    monkeypatch.setattr("sys.argv", ["commitment-generate", "--timeout-ms", "0"])
    with pytest.raises(SystemExit) as exc:
        generate_cli.main()
    assert exc.value.code == 2


@pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
def test_from_git_builds_prompt_from_staged_changes(tmp_path, monkeypatch, capsys):
    repo = tmp_path / "repo"
    repo.mkdir()
    subprocess.run(["git", "init", "-q"], cwd=repo, check=True)
    (repo / "app.py").write_text("print('hi')\n", encoding="utf-8")
    subprocess.run(["git", "add", "app.py"], cwd=repo, check=True)

    config = _write_config(tmp_path, [_python_claude()])
    monkeypatch.setattr(
        "sys.argv",
        ["commitment-generate", "--config", config, "--from-git", "--cwd", str(repo), "--title", "Greeting"],
    )

    rc = generate_cli.main()
    assert rc == 0
    assert capsys.readouterr().out.strip() == "feat: sentinel"


def test_short_cli_forwards_generate_flags(tmp_path, monkeypatch, capsys):
    config = _write_config(tmp_path, [{"kind": "cli", "tool": "gemini", "command": MISSING}, _python_claude()])
    prompt_file = tmp_path / "prompt.txt"
    prompt_file.write_text("tidy the readme", encoding="utf-8")
    monkeypatch.setattr(
        "sys.argv",
        ["commitment", "generate", "--config", config, "--provider", "claude", "--prompt-file", str(prompt_file)],
    )

    assert short_cli.main() == 0
    assert capsys.readouterr().out.strip() == "feat: tidy the readme"


def test_signature_is_appended_after_blank_line(tmp_path, monkeypatch, capsys):
    config = _write_config(tmp_path, [_python_claude()])
    monkeypatch.setattr("sys.stdin", io.StringIO("add the login page"))
    monkeypatch.setattr("sys.argv", ["commitment-generate", "--config", config, "--signature", "Signed-off-by: Dev <dev@example.com>"])

    assert generate_cli.main() == 0
    assert capsys.readouterr().out == "feat: add the login page\n\nSigned-off-by: Dev <dev@example.com>\n"


def _staged_repo(tmp_path):
    repo = tmp_path / "repo"
    repo.mkdir()
    subprocess.run(["git", "init", "-q"], cwd=repo, check=True)
    subprocess.run(["git", "config", "user.email", "dev@example.com"], cwd=repo, check=True)
    subprocess.run(["git", "config", "user.name", "Dev"], cwd=repo, check=True)
    (repo / "app.py").write_text("print('hi')\n", encoding="utf-8")
    subprocess.run(["git", "add", "app.py"], cwd=repo, check=True)
    return repo


def _head_message(repo) -> str:
    proc = subprocess.run(["git", "log", "-1", "--format=%B"], cwd=repo, capture_output=True, text=True, check=False)
    return proc.stdout.strip() if proc.returncode == 0 else ""


@pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
def test_commit_creates_commit_with_signature(tmp_path, monkeypatch, capsys):
    repo = _staged_repo(tmp_path)
    config = _write_config(tmp_path, [_python_claude()])
    monkeypatch.setattr(
        "sys.argv",
        ["commitment-generate", "--config", config, "--from-git", "--cwd", str(repo), "--commit", "--signature", "via commitment"],
    )

    assert generate_cli.main() == 0
    assert capsys.readouterr().out.strip() == "feat: sentinel\n\nvia commitment"
    assert _head_message(repo) == "feat: sentinel\n\nvia commitment"


@pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
def test_dry_run_prints_without_committing(tmp_path, monkeypatch, capsys):
    repo = _staged_repo(tmp_path)
    config = _write_config(tmp_path, [_python_claude()])
    monkeypatch.setattr(
        "sys.argv",
        ["commitment-generate", "--config", config, "--from-git", "--cwd", str(repo), "--commit", "--dry-run"],
    )

    assert generate_cli.main() == 0
    assert capsys.readouterr().out.strip() == "feat: sentinel"
    assert _head_message(repo) == ""


@pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
def test_failed_commit_exits_1(tmp_path, monkeypatch, capsys):
    config = _write_config(tmp_path, [_python_claude()])
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path.parent))
    monkeypatch.setattr("sys.stdin", io.StringIO("add the login page"))
    monkeypatch.setattr("sys.argv", ["commitment-generate", "--config", config, "--cwd", str(tmp_path), "--commit"])

    assert generate_cli.main() == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "commit-failed" in captured.err
