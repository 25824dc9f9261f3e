from __future__ import annotations

from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from time import perf_counter

from pydantic import BaseModel

from commitment.core.providers.base import Provider


class ProviderCheckResult(BaseModel):
    provider: str
    kind: str
    ok: bool
    latency_ms: float | None = None
    error: str | None = None


def check_provider(provider: Provider) -> ProviderCheckResult:
    started = perf_counter()
    try:
        ok = bool(provider.is_available())
    except Exception as exc:  # noqa: BLE001
        return ProviderCheckResult(
            provider=provider.name,
            kind=provider.kind.value,
            ok=False,
            latency_ms=round((perf_counter() - started) * 1000, 2),
            error=str(exc),
        )
    return ProviderCheckResult(
        provider=provider.name,
        kind=provider.kind.value,
        ok=ok,
        latency_ms=round((perf_counter() - started) * 1000, 2),
        error=None if ok else "not available",
    )


def check_providers(providers: Sequence[Provider]) -> list[ProviderCheckResult]:
    if not providers:
        return []
    with ThreadPoolExecutor(max_workers=len(providers)) as pool:
        return list(pool.map(check_provider, providers))
