"""Process executor for external AI command-line tools.

Each call spawns exactly one process from an argv list (never a shell string),
optionally feeds it a stdin payload, and bounds the wait with a timeout. A
timed-out process is terminated together with its process group, given a short
grace period, then killed.
"""

from __future__ import annotations

import os
import signal
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from time import perf_counter

from commitment.core.runtime import timeouts
from commitment.core.runtime.errors import CommandFailedError, ProviderNotAvailableError, ProviderTimeoutError
from commitment.core.telemetry.logging import get_logger

logger = get_logger("commitment.runtime.process")


@dataclass(slots=True, frozen=True)
class ExecuteResult:
    stdout: str
    stderr: str
    exit_code: int
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.exit_code == 0 and not self.timed_out


def _popen_platform_kwargs() -> dict:
    if os.name == "nt":
        return {"creationflags": subprocess.CREATE_NEW_PROCESS_GROUP}
    return {"start_new_session": True}


def _signal_process_tree(proc: subprocess.Popen, *, force: bool) -> None:
    if proc.poll() is not None:
        return

    if os.name == "nt":
        cmd = ["taskkill", "/T", "/PID", str(proc.pid)]
        if force:
            cmd.insert(1, "/F")
        try:
            subprocess.run(cmd, capture_output=True, timeout=5, check=False)
            return
        except (subprocess.SubprocessError, OSError):
            pass
        _signal_direct(proc, force=force)
        return

    # start_new_session makes the child the leader of its own process group.
    try:
        os.killpg(proc.pid, signal.SIGKILL if force else signal.SIGTERM)
    except ProcessLookupError:
        return
    except OSError:
        _signal_direct(proc, force=force)


def _signal_direct(proc: subprocess.Popen, *, force: bool) -> None:
    try:
        if force:
            proc.kill()
        else:
            proc.terminate()
    except OSError:
        pass


def _terminate(proc: subprocess.Popen, command: str) -> tuple[str, str]:
    grace = timeouts.TERMINATE_GRACE_SECONDS
    _signal_process_tree(proc, force=False)
    try:
        return proc.communicate(timeout=grace)
    except subprocess.TimeoutExpired:
        pass

    logger.warning("process_kill_escalated", command=command, pid=proc.pid, grace_seconds=grace)
    _signal_process_tree(proc, force=True)
    try:
        return proc.communicate(timeout=grace)
    except subprocess.TimeoutExpired:
        # A detached grandchild may still hold the pipes open; stop reading.
        for pipe in (proc.stdin, proc.stdout, proc.stderr):
            if pipe is not None:
                try:
                    pipe.close()
                except OSError:
                    pass
        try:
            proc.wait(timeout=grace)
        except subprocess.TimeoutExpired:
            logger.warning("process_still_running", command=command, pid=proc.pid)
        return "", ""


def execute(
    command: str,
    args: Sequence[str] = (),
    *,
    cwd: str | Path | None = None,
    env: Mapping[str, str] | None = None,
    input: str | None = None,
    timeout_ms: int | None = None,
) -> ExecuteResult:
    """Run ``command`` and return its raw outcome.

    Never raises for a non-zero exit code. Raises ``ProviderNotAvailableError``
    when the process cannot be started and ``ProviderTimeoutError`` (with the
    partial ``ExecuteResult`` attached as ``result``) when ``timeout_ms`` elapses.
    Without ``timeout_ms`` the wait is bounded by the default CLI timeout.
    """
    if timeout_ms is None:
        timeout_ms = timeouts.DEFAULT_CLI_TIMEOUT_MS
    argv = [command, *args]
    merged_env = {**os.environ, **env} if env else None

    started = perf_counter()
    try:
        proc = subprocess.Popen(
            argv,
            stdin=subprocess.PIPE if input is not None else subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            cwd=str(cwd) if cwd is not None else None,
            env=merged_env,
            text=True,
            encoding="utf-8",
            errors="replace",
            **_popen_platform_kwargs(),
        )
    except OSError as exc:
        raise ProviderNotAvailableError(command, f"failed to start: {exc}", exc) from exc

    logger.debug("process_spawn", command=command, pid=proc.pid, timeout_ms=timeout_ms, stdin=input is not None)

    try:
        stdout, stderr = proc.communicate(input=input, timeout=timeouts.to_seconds(timeout_ms))
    except subprocess.TimeoutExpired as exc:
        stdout, stderr = _terminate(proc, command)
        result = ExecuteResult(
            stdout=stdout or "",
            stderr=stderr or "",
            exit_code=proc.returncode if proc.returncode is not None else -1,
            timed_out=True,
        )
        logger.warning("process_timeout", command=command, pid=proc.pid, timeout_ms=timeout_ms)
        raise ProviderTimeoutError(command, timeout_ms, "command execution", exc, result=result) from exc

    logger.debug(
        "process_exit",
        command=command,
        exit_code=proc.returncode,
        elapsed_ms=round((perf_counter() - started) * 1000, 2),
    )
    return ExecuteResult(stdout=stdout or "", stderr=stderr or "", exit_code=proc.returncode)


def run(
    command: str,
    args: Sequence[str] = (),
    *,
    cwd: str | Path | None = None,
    env: Mapping[str, str] | None = None,
    input: str | None = None,
    timeout_ms: int | None = None,
) -> str:
    """Like ``execute`` but returns stdout and raises ``CommandFailedError`` on a non-zero exit."""
    result = execute(command, args, cwd=cwd, env=env, input=input, timeout_ms=timeout_ms)
    if result.exit_code != 0:
        output = result.stderr.strip() or result.stdout.strip()
        raise CommandFailedError(command, result.exit_code, output, result=result)
    return result.stdout
