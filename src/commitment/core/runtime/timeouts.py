from __future__ import annotations

DEFAULT_CLI_TIMEOUT_MS = 120_000
DEFAULT_API_TIMEOUT_MS = 30_000
PROBE_TIMEOUT_MS = 5_000

# Time a terminated process gets to exit before it is killed outright.
TERMINATE_GRACE_SECONDS = 2.0


def resolve_timeout_ms(call_override: int | None, provider_default: int | None, global_default: int) -> int:
    """Call-level override wins over the provider's configured default, which wins over the global one."""
    for candidate in (call_override, provider_default):
        if candidate is not None:
            return candidate
    return global_default


def to_seconds(timeout_ms: int | None) -> float | None:
    if timeout_ms is None:
        return None
    return max(timeout_ms, 1) / 1000.0
