from __future__ import annotations

from typing import Literal

from commitment.core.config.schema import CLIProviderConfig
from commitment.core.providers.availability import check_available
from commitment.core.providers.base import GenerateOptions, Provider, ProviderKind, validate_request
from commitment.core.providers.parser import DEFAULT_POLICY, Transform, ValidationPolicy, clean_response
from commitment.core.runtime import timeouts
from commitment.core.runtime.errors import (
    CommandFailedError,
    MalformedResponseError,
    ProviderAPIError,
    ProviderConfigurationError,
    ProviderError,
    ProviderNotAvailableError,
    ProviderTimeoutError,
    looks_like_auth_failure,
)
from commitment.core.runtime.process import run


class CLIProvider(Provider):
    """Provider backed by an external AI command-line tool.

    Subclasses describe the tool through class attributes and override the
    hooks (``prepare_prompt``, ``build_args``, ``invoke``) only where the tool
    deviates from "args + prompt on stdin or as the last argument".
    """

    kind = ProviderKind.CLI
    default_command: str
    default_args: tuple[str, ...] = ()
    input_mode: Literal["stdin", "argument"] = "stdin"
    transforms: tuple[Transform, ...] = ()
    require_conventional_format = False
    install_hint = ""
    login_hint = ""

    def __init__(
        self,
        config: CLIProviderConfig | None = None,
        *,
        policy: ValidationPolicy | None = None,
        default_timeout_ms: int | None = None,
        probe_timeout_ms: int = timeouts.PROBE_TIMEOUT_MS,
    ) -> None:
        self.config = config or CLIProviderConfig(tool=self.name)
        if self.config.tool != self.name:
            raise ProviderConfigurationError(self.name, f"config is for tool '{self.config.tool}'")
        self.policy = policy or DEFAULT_POLICY
        self.default_timeout_ms = default_timeout_ms or timeouts.DEFAULT_CLI_TIMEOUT_MS
        self.probe_timeout_ms = probe_timeout_ms

    @property
    def command(self) -> str:
        return self.config.command or self.default_command

    @property
    def args(self) -> tuple[str, ...]:
        return self.config.args if self.config.args is not None else self.default_args

    def is_available(self) -> bool:
        return check_available(self.command, self.probe_timeout_ms)

    def prepare_prompt(self, prompt: str) -> str:
        return prompt

    def build_args(self, prompt: str, options: GenerateOptions) -> tuple[list[str], str | None]:
        prepared = self.prepare_prompt(prompt)
        if self.input_mode == "stdin":
            return list(self.args), prepared
        return [*self.args, prepared], None

    def invoke(self, prompt: str, options: GenerateOptions, timeout_ms: int) -> str:
        args, stdin = self.build_args(prompt, options)
        return run(self.command, args, cwd=options.working_directory, input=stdin, timeout_ms=timeout_ms)

    def parse_response(self, raw: str) -> str:
        return clean_response(
            raw,
            self.transforms,
            policy=self.policy,
            require_conventional=self.require_conventional_format,
        )

    def classify_failure(self, exc: CommandFailedError) -> ProviderError:
        if looks_like_auth_failure(exc.output):
            reason = f"authentication required: {exc.output}"
            if self.login_hint:
                reason = f"{reason}. {self.login_hint}"
            return ProviderNotAvailableError(self.name, reason, exc)
        return ProviderAPIError(self.name, api_message=f"exit code {exc.exit_code}: {exc.output}", cause=exc)

    def _unavailable_reason(self) -> str:
        reason = f"command '{self.command}' was not found or did not respond to --version/--help"
        if self.install_hint:
            reason = f"{reason}. Install it with: {self.install_hint}"
        return reason

    def generate_commit_message(self, prompt: str, options: GenerateOptions | None = None) -> str:
        opts = validate_request(self.name, prompt, options)
        timeout_ms = timeouts.resolve_timeout_ms(opts.timeout_ms, self.config.timeout_ms, self.default_timeout_ms)

        if not self.is_available():
            raise ProviderNotAvailableError(self.name, self._unavailable_reason())

        try:
            raw = self.invoke(prompt, opts, timeout_ms)
        except ProviderTimeoutError as exc:
            raise ProviderTimeoutError(
                self.name, timeout_ms, "generate_commit_message", cause=exc, result=exc.result
            ) from exc
        except CommandFailedError as exc:
            raise self.classify_failure(exc) from exc
        except ProviderNotAvailableError as exc:
            raise ProviderNotAvailableError(self.name, exc.reason, exc) from exc

        try:
            return self.parse_response(raw)
        except MalformedResponseError as exc:
            raise MalformedResponseError(self.name, exc.reason, output=exc.output or raw, cause=exc) from exc
