from __future__ import annotations

import os
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, SecretStr, field_validator, model_validator

from commitment.core.runtime import timeouts

CLIToolName = Literal["claude", "codex", "gemini"]
APIToolName = Literal["openai", "gemini"]

DEFAULT_COMMIT_TYPES = ("feat", "fix", "docs", "style", "refactor", "perf", "test", "chore", "build", "ci")


class CLIProviderConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["cli"] = "cli"
    tool: CLIToolName
    command: str | None = Field(default=None, min_length=1)
    args: tuple[str, ...] | None = None
    timeout_ms: PositiveInt | None = None


class APIProviderConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["api"] = "api"
    tool: APIToolName
    endpoint: str | None = None
    credential: SecretStr | None = None
    credential_env: str | None = None
    model: str | None = None
    timeout_ms: PositiveInt | None = None

    @field_validator("endpoint")
    @classmethod
    def _endpoint_is_http(cls, value: str | None) -> str | None:
        if value is None:
            return None
        if not value.startswith(("http://", "https://")):
            raise ValueError("endpoint must be an http(s) URL")
        return value.rstrip("/")

    @model_validator(mode="after")
    def _has_credential_source(self) -> APIProviderConfig:
        if self.credential is None and not self.credential_env:
            raise ValueError("either credential or credential_env is required")
        return self

    def resolved_credential(self) -> str:
        if self.credential is not None:
            return self.credential.get_secret_value()
        return os.getenv(self.credential_env or "", "").strip()


ProviderConfig = Annotated[Union[CLIProviderConfig, APIProviderConfig], Field(discriminator="kind")]


class TimeoutsConfig(BaseModel):
    cli_ms: PositiveInt = timeouts.DEFAULT_CLI_TIMEOUT_MS
    api_ms: PositiveInt = timeouts.DEFAULT_API_TIMEOUT_MS
    probe_ms: PositiveInt = timeouts.PROBE_TIMEOUT_MS


class ValidationConfig(BaseModel):
    min_length: PositiveInt = 5
    commit_types: list[str] = Field(default_factory=lambda: list(DEFAULT_COMMIT_TYPES))
    require_conventional: bool = False


class PromptConfig(BaseModel):
    max_diff_chars: PositiveInt = 8000


class TelemetryConfig(BaseModel):
    log_level: str = "WARNING"
    json_logs: bool = False


def _default_providers() -> list[CLIProviderConfig]:
    return [CLIProviderConfig(tool="claude"), CLIProviderConfig(tool="codex"), CLIProviderConfig(tool="gemini")]


class AppConfig(BaseModel):
    providers: list[ProviderConfig] = Field(default_factory=_default_providers, min_length=1)
    timeouts: TimeoutsConfig = Field(default_factory=TimeoutsConfig)
    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    prompt: PromptConfig = Field(default_factory=PromptConfig)
    telemetry: TelemetryConfig = Field(default_factory=TelemetryConfig)
