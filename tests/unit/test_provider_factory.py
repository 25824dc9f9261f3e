from __future__ import annotations

import typing

import pytest

from commitment.core.config.schema import AppConfig, CLIProviderConfig, TimeoutsConfig
from commitment.core.providers.chain import ProviderChain
from commitment.core.providers.claude import ClaudeProvider
from commitment.core.providers.codex import CodexProvider
from commitment.core.providers.factory import (
    SUPPORTED_API_TOOLS,
    SUPPORTED_CLI_TOOLS,
    chain_from_app_config,
    create_chain,
    create_provider,
    policy_from_config,
    validate_provider_config,
)
from commitment.core.providers.gemini import GeminiProvider
from commitment.core.providers.gemini_api import GeminiAPIProvider
from commitment.core.providers.openai_api import OpenAIProvider


@pytest.mark.parametrize(
    ("config", "expected"),
    [
        ({"kind": "cli", "tool": "claude"}, ClaudeProvider),
        ({"kind": "cli", "tool": "codex"}, CodexProvider),
        ({"kind": "cli", "tool": "gemini"}, GeminiProvider),
        ({"kind": "api", "tool": "openai", "credential": "k"}, OpenAIProvider),
        ({"kind": "api", "tool": "gemini", "credential_env": "GEMINI_API_KEY"}, GeminiAPIProvider),
    ],
)
def test_every_config_maps_to_an_implementation(config, expected):
    assert isinstance(create_provider(config), expected)


def test_supported_tools_match_config_literals():
    from commitment.core.config.schema import APIToolName, CLIToolName

    assert set(typing.get_args(CLIToolName)) == set(SUPPORTED_CLI_TOOLS)
    assert set(typing.get_args(APIToolName)) == set(SUPPORTED_API_TOOLS)


@pytest.mark.parametrize(
    "config",
    [
        {"kind": "cli", "tool": "copilot"},
        {"kind": "ssh", "tool": "claude"},
        {"tool": "claude"},
        {"kind": "cli", "tool": "claude", "timeout_ms": -1},
        {"kind": "cli", "tool": "claude", "unexpected": True},
    ],
)
def test_invalid_configs_raise_clear_value_error(config):
    with pytest.raises(ValueError, match="Invalid provider configuration"):
        validate_provider_config(config)


def test_timeouts_and_policy_flow_into_providers():
    cfg = AppConfig.model_validate(
        {
            "timeouts": {"cli_ms": 1111, "api_ms": 2222, "probe_ms": 333},
            "validation": {"min_length": 7, "commit_types": ["feat"], "require_conventional": True},
        }
    )
    policy = policy_from_config(cfg)
    assert policy.min_length == 7
    assert policy.commit_types == ("feat",)
    assert policy.require_conventional is True

    cli = create_provider(CLIProviderConfig(tool="claude"), policy=policy, timeouts=cfg.timeouts)
    assert cli.default_timeout_ms == 1111
    assert cli.probe_timeout_ms == 333
    assert cli.policy is policy

    api = create_provider({"kind": "api", "tool": "openai", "credential": "k"}, timeouts=TimeoutsConfig(api_ms=2222))
    assert api.default_timeout_ms == 2222


def test_create_chain_keeps_order():
    chain = create_chain([{"kind": "cli", "tool": "gemini"}, {"kind": "cli", "tool": "claude"}])
    assert isinstance(chain, ProviderChain)
    assert [p.name for p in chain.providers] == ["gemini", "claude"]


def test_default_app_config_chain():
    chain = chain_from_app_config(AppConfig())
    assert chain.name == "ProviderChain[claude, codex, gemini]"
