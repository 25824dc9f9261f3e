from __future__ import annotations

from commitment.core.runtime import timeouts
from commitment.core.runtime.process import execute
from commitment.core.telemetry.logging import get_logger

logger = get_logger("commitment.providers.availability")


def check_available(command: str, timeout_ms: int = timeouts.PROBE_TIMEOUT_MS) -> bool:
    """Return True when ``command --version`` (or, failing that, ``--help``) exits 0.

    Never raises: a missing binary, a hang or any other failure means False.
    """
    for flag in ("--version", "--help"):
        try:
            result = execute(command, [flag], timeout_ms=timeout_ms)
        except Exception as exc:  # noqa: BLE001
            logger.debug("provider_probe", command=command, flag=flag, available=False, error=str(exc))
            return False
        if result.exit_code == 0:
            logger.debug("provider_probe", command=command, flag=flag, available=True)
            return True
    logger.debug("provider_probe", command=command, available=False)
    return False
