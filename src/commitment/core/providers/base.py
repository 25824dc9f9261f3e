from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from commitment.core.runtime.errors import ProviderConfigurationError


class ProviderKind(str, Enum):
    CLI = "cli"
    API = "api"


@dataclass(slots=True, frozen=True)
class GenerateOptions:
    """Per-call overrides layered on top of a provider's configured defaults."""

    working_directory: str | Path | None = None
    timeout_ms: int | None = None


def validate_request(provider_name: str, prompt: str, options: GenerateOptions | None) -> GenerateOptions:
    if not isinstance(prompt, str) or not prompt.strip():
        raise ProviderConfigurationError(provider_name, "prompt must be a non-empty string")
    opts = options or GenerateOptions()
    timeout_ms = opts.timeout_ms
    if timeout_ms is not None and (isinstance(timeout_ms, bool) or not isinstance(timeout_ms, int) or timeout_ms <= 0):
        raise ProviderConfigurationError(provider_name, f"timeout_ms must be a positive integer, got {timeout_ms!r}")
    return opts


class Provider(ABC):
    name: str
    kind: ProviderKind

    @abstractmethod
    def generate_commit_message(self, prompt: str, options: GenerateOptions | None = None) -> str:
        raise NotImplementedError

    @abstractmethod
    def is_available(self) -> bool:
        raise NotImplementedError

    def generate(self, prompt: str, working_directory: str | Path | None = None) -> str:
        return self.generate_commit_message(prompt, GenerateOptions(working_directory=working_directory))
