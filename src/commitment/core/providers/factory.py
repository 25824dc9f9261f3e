from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, assert_never

import httpx
from pydantic import TypeAdapter, ValidationError

from commitment.core.config.schema import (
    APIProviderConfig,
    AppConfig,
    CLIProviderConfig,
    ProviderConfig,
    TimeoutsConfig,
)
from commitment.core.providers.api_provider import APIProvider
from commitment.core.providers.base import Provider
from commitment.core.providers.chain import ProviderChain
from commitment.core.providers.claude import ClaudeProvider
from commitment.core.providers.cli_provider import CLIProvider
from commitment.core.providers.codex import CodexProvider
from commitment.core.providers.gemini import GeminiProvider
from commitment.core.providers.gemini_api import GeminiAPIProvider
from commitment.core.providers.openai_api import OpenAIProvider
from commitment.core.providers.parser import ValidationPolicy

SUPPORTED_CLI_TOOLS = ("claude", "codex", "gemini")
SUPPORTED_API_TOOLS = ("openai", "gemini")

_CONFIG_ADAPTER: TypeAdapter[ProviderConfig] = TypeAdapter(ProviderConfig)


def validate_provider_config(data: Mapping[str, Any] | ProviderConfig) -> CLIProviderConfig | APIProviderConfig:
    if isinstance(data, (CLIProviderConfig, APIProviderConfig)):
        return data
    try:
        return _CONFIG_ADAPTER.validate_python(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid provider configuration: {exc}") from exc


def policy_from_config(cfg: AppConfig) -> ValidationPolicy:
    return ValidationPolicy(
        min_length=cfg.validation.min_length,
        commit_types=tuple(cfg.validation.commit_types),
        require_conventional=cfg.validation.require_conventional,
    )


def _create_cli_provider(config: CLIProviderConfig, policy: ValidationPolicy | None, limits: TimeoutsConfig) -> CLIProvider:
    kwargs = {"policy": policy, "default_timeout_ms": limits.cli_ms, "probe_timeout_ms": limits.probe_ms}
    tool = config.tool
    if tool == "claude":
        return ClaudeProvider(config, **kwargs)
    if tool == "codex":
        return CodexProvider(config, **kwargs)
    if tool == "gemini":
        return GeminiProvider(config, **kwargs)
    assert_never(tool)


def _create_api_provider(
    config: APIProviderConfig,
    policy: ValidationPolicy | None,
    limits: TimeoutsConfig,
    transport: httpx.BaseTransport | None,
) -> APIProvider:
    kwargs = {"policy": policy, "default_timeout_ms": limits.api_ms, "transport": transport}
    tool = config.tool
    if tool == "openai":
        return OpenAIProvider(config, **kwargs)
    if tool == "gemini":
        return GeminiAPIProvider(config, **kwargs)
    assert_never(tool)


def create_provider(
    config: Mapping[str, Any] | ProviderConfig,
    *,
    policy: ValidationPolicy | None = None,
    timeouts: TimeoutsConfig | None = None,
    transport: httpx.BaseTransport | None = None,
) -> Provider:
    """Map a provider config onto its implementation; unknown kinds or tools never get this far."""
    typed = validate_provider_config(config)
    limits = timeouts or TimeoutsConfig()
    if isinstance(typed, CLIProviderConfig):
        return _create_cli_provider(typed, policy, limits)
    if isinstance(typed, APIProviderConfig):
        return _create_api_provider(typed, policy, limits, transport)
    assert_never(typed)


def create_providers(
    configs: Iterable[Mapping[str, Any] | ProviderConfig],
    *,
    policy: ValidationPolicy | None = None,
    timeouts: TimeoutsConfig | None = None,
    transport: httpx.BaseTransport | None = None,
) -> list[Provider]:
    return [create_provider(c, policy=policy, timeouts=timeouts, transport=transport) for c in configs]


def create_chain(
    configs: Iterable[Mapping[str, Any] | ProviderConfig],
    *,
    policy: ValidationPolicy | None = None,
    timeouts: TimeoutsConfig | None = None,
    transport: httpx.BaseTransport | None = None,
) -> ProviderChain:
    return ProviderChain(create_providers(configs, policy=policy, timeouts=timeouts, transport=transport))


def chain_from_app_config(cfg: AppConfig, *, transport: httpx.BaseTransport | None = None) -> ProviderChain:
    return create_chain(cfg.providers, policy=policy_from_config(cfg), timeouts=cfg.timeouts, transport=transport)
