"""Commit-message providers, response cleaning and the fallback chain."""

from commitment.core.providers.base import GenerateOptions, Provider, ProviderKind
from commitment.core.providers.chain import ProviderChain, format_chain_error
from commitment.core.providers.factory import create_chain, create_provider, validate_provider_config

__all__ = [
    "GenerateOptions",
    "Provider",
    "ProviderKind",
    "ProviderChain",
    "format_chain_error",
    "create_chain",
    "create_provider",
    "validate_provider_config",
]
