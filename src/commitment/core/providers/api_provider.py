from __future__ import annotations

from abc import abstractmethod
from typing import Any

import httpx

from commitment.core.config.schema import APIProviderConfig
from commitment.core.providers.base import GenerateOptions, Provider, ProviderKind, validate_request
from commitment.core.providers.parser import DEFAULT_POLICY, ValidationPolicy, clean_response
from commitment.core.runtime import timeouts
from commitment.core.runtime.errors import (
    MalformedResponseError,
    ProviderAPIError,
    ProviderConfigurationError,
    ProviderNotAvailableError,
    ProviderTimeoutError,
)


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text.strip()[:500]
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
        if isinstance(error, str):
            return error
    return resp.text.strip()[:500]


class APIProvider(Provider):
    """Provider backed by a single JSON POST to an HTTP API."""

    kind = ProviderKind.API
    tool: str
    default_endpoint: str
    default_model: str

    def __init__(
        self,
        config: APIProviderConfig,
        *,
        policy: ValidationPolicy | None = None,
        default_timeout_ms: int | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if config.tool != self.tool:
            raise ProviderConfigurationError(self.name, f"config is for tool '{config.tool}'")
        self.config = config
        self.policy = policy or DEFAULT_POLICY
        self.default_timeout_ms = default_timeout_ms or timeouts.DEFAULT_API_TIMEOUT_MS
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return self.config.endpoint or self.default_endpoint

    @property
    def model(self) -> str:
        return self.config.model or self.default_model

    def is_available(self) -> bool:
        return bool(self.config.resolved_credential())

    def headers(self, credential: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {credential}", "Content-Type": "application/json"}

    @abstractmethod
    def build_request(self, prompt: str) -> tuple[str, dict[str, Any]]:
        raise NotImplementedError

    @abstractmethod
    def extract_text(self, body: Any) -> str:
        raise NotImplementedError

    def request_json(self, url: str, payload: dict[str, Any], headers: dict[str, str], timeout_ms: int) -> Any:
        try:
            with httpx.Client(timeout=timeouts.to_seconds(timeout_ms), transport=self._transport) as client:
                resp = client.post(url, json=payload, headers=headers)
        except httpx.TimeoutException as exc:
            raise ProviderTimeoutError(self.name, timeout_ms, "API request", cause=exc) from exc
        except httpx.HTTPError as exc:
            raise ProviderAPIError(self.name, api_message=str(exc) or exc.__class__.__name__, cause=exc) from exc

        if not resp.is_success:
            raise ProviderAPIError(self.name, status_code=resp.status_code, api_message=_error_message(resp))
        try:
            return resp.json()
        except ValueError as exc:
            raise MalformedResponseError(self.name, "response body is not JSON", output=resp.text, cause=exc) from exc

    def generate_commit_message(self, prompt: str, options: GenerateOptions | None = None) -> str:
        opts = validate_request(self.name, prompt, options)
        credential = self.config.resolved_credential()
        if not credential:
            source = f"environment variable {self.config.credential_env}" if self.config.credential_env else "credential"
            raise ProviderNotAvailableError(self.name, f"{source} is not set")

        timeout_ms = timeouts.resolve_timeout_ms(opts.timeout_ms, self.config.timeout_ms, self.default_timeout_ms)
        url, payload = self.build_request(prompt)
        body = self.request_json(url, payload, self.headers(credential), timeout_ms)

        try:
            text = self.extract_text(body)
        except (KeyError, IndexError, TypeError) as exc:
            raise MalformedResponseError(self.name, "unexpected response shape", output=str(body)[:500], cause=exc) from exc
        if not isinstance(text, str):
            raise MalformedResponseError(self.name, "response text is not a string", output=str(body)[:500])

        try:
            return clean_response(text, policy=self.policy)
        except MalformedResponseError as exc:
            raise MalformedResponseError(self.name, exc.reason, output=exc.output, cause=exc) from exc
