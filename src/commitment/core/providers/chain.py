from __future__ import annotations

from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from time import perf_counter

from commitment.core.providers.base import GenerateOptions, Provider
from commitment.core.runtime.errors import (
    ProviderChainError,
    ProviderConfigurationError,
    ProviderError,
    classify_error,
    compact_error_summary,
)
from commitment.core.telemetry.logging import get_logger

logger = get_logger("commitment.providers.chain")

CHAIN_NAME = "ProviderChain"


def _safe_probe(provider: Provider) -> bool:
    try:
        return bool(provider.is_available())
    except Exception as exc:  # noqa: BLE001
        logger.debug("provider_probe", provider=provider.name, available=False, error=str(exc))
        return False


def probe_all(providers: Sequence[Provider]) -> list[bool]:
    """Probe every provider concurrently; ``result[i]`` belongs to ``providers[i]``."""
    if not providers:
        return []
    with ThreadPoolExecutor(max_workers=len(providers)) as pool:
        return list(pool.map(_safe_probe, providers))


def _as_provider_error(provider: Provider, exc: Exception) -> ProviderError:
    if isinstance(exc, ProviderError):
        return exc
    return ProviderError(provider.name, str(exc) or exc.__class__.__name__, cause=exc)


class ProviderChain(Provider):
    """Try providers in the given order; the first success wins.

    Providers after a success are never invoked. When every provider fails, the
    raised ``ProviderChainError`` lists each provider with its own failure.
    """

    def __init__(self, providers: Sequence[Provider]) -> None:
        if not providers:
            raise ProviderConfigurationError(CHAIN_NAME, "at least one provider is required")
        self.providers = tuple(providers)
        self.name = f"{CHAIN_NAME}[{', '.join(p.name for p in self.providers)}]"
        self.kind = self.providers[0].kind

    def generate_commit_message(self, prompt: str, options: GenerateOptions | None = None) -> str:
        attempted: list[str] = []
        errors: list[ProviderError] = []

        for provider in self.providers:
            started = perf_counter()
            try:
                message = provider.generate_commit_message(prompt, options)
            except Exception as exc:  # noqa: BLE001
                error = _as_provider_error(provider, exc)
                info = classify_error(error, provider=provider.name)
                logger.info(
                    "provider_attempt",
                    provider=provider.name,
                    outcome="error",
                    elapsed_ms=round((perf_counter() - started) * 1000, 2),
                    error_type=info.error_type,
                    retryable=info.retryable,
                    error=compact_error_summary(error),
                )
                attempted.append(provider.name)
                errors.append(error)
                continue

            logger.info(
                "provider_attempt",
                provider=provider.name,
                outcome="ok",
                elapsed_ms=round((perf_counter() - started) * 1000, 2),
            )
            return message

        logger.warning("provider_chain_exhausted", attempted=attempted)
        raise ProviderChainError(attempted, errors)

    def is_available(self) -> bool:
        return any(probe_all(self.providers))


def format_chain_error(error: ProviderChainError) -> str:
    lines = [f"All {len(error.attempted_providers)} providers failed to generate a commit message:"]
    for index, (name, err) in enumerate(zip(error.attempted_providers, error.errors), start=1):
        lines.append(f"  {index}. {name}: {err}")
    return "\n".join(lines)
