from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from commitment.core.runtime.process import ExecuteResult


class ProviderError(Exception):
    """Base error for everything a provider can surface.

    Carries the originating provider's name so a failure can be logged or shown
    without re-querying the provider.
    """

    def __init__(self, provider_name: str, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.provider_name = provider_name
        self.message = message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause


class ProviderNotAvailableError(ProviderError):
    """The tool is missing, unauthenticated, or cannot be started."""

    summary = "is not available"

    def __init__(self, provider_name: str, reason: str, cause: BaseException | None = None) -> None:
        super().__init__(provider_name, f"Provider '{provider_name}' {self.summary}: {reason}", cause)
        self.reason = reason


class ProviderConfigurationError(ProviderNotAvailableError):
    """Invalid prompt, options or configuration; raised before any process or network activity."""

    summary = "is misconfigured"


class ProviderTimeoutError(ProviderError):
    def __init__(
        self,
        provider_name: str,
        timeout_ms: int,
        operation: str,
        cause: BaseException | None = None,
        result: ExecuteResult | None = None,
    ) -> None:
        super().__init__(
            provider_name,
            f"Provider '{provider_name}' operation '{operation}' timed out after {timeout_ms}ms",
            cause,
        )
        self.timeout_ms = timeout_ms
        self.operation = operation
        self.result = result


class ProviderAPIError(ProviderError):
    """Remote rejection: a non-2xx response or a non-zero exit with diagnostic text."""

    def __init__(
        self,
        provider_name: str,
        status_code: int | None = None,
        api_message: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        details = [part for part in (f"status {status_code}" if status_code is not None else None, api_message) if part]
        suffix = f": {' - '.join(details)}" if details else ""
        super().__init__(provider_name, f"Provider '{provider_name}' API error{suffix}", cause)
        self.status_code = status_code
        self.api_message = api_message


class CommandFailedError(ProviderAPIError):
    """Raised by ``run`` when a command exits non-zero."""

    def __init__(self, command: str, exit_code: int, output: str, result: ExecuteResult | None = None) -> None:
        super().__init__(command, api_message=output)
        self.message = f"Command failed with exit code {exit_code}: {output}"
        self.args = (self.message,)
        self.exit_code = exit_code
        self.output = output
        self.result = result


class MalformedResponseError(ProviderError):
    """The tool ran and exited cleanly but its output failed parsing or validation."""

    def __init__(
        self,
        provider_name: str,
        reason: str,
        output: str = "",
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(provider_name, f"Provider '{provider_name}' returned a malformed response: {reason}", cause)
        self.reason = reason
        self.output = output


class ProviderChainError(Exception):
    """Every provider of a chain failed.

    ``attempted_providers[i]`` is the provider that raised ``errors[i]``.
    """

    def __init__(self, attempted_providers: Sequence[str], errors: Sequence[ProviderError]) -> None:
        self.attempted_providers = tuple(attempted_providers)
        self.errors = tuple(errors)
        details = "; ".join(f"{name}: {err}" for name, err in zip(self.attempted_providers, self.errors))
        super().__init__(
            f"All {len(self.attempted_providers)} providers failed to generate commit message: {details}"
        )


_AUTH_MARKERS = (
    "not authenticated",
    "unauthenticated",
    "not logged in",
    "unauthorized",
    "forbidden",
    "invalid api key",
    "please login",
    "please log in",
)


def looks_like_auth_failure(text: str) -> bool:
    lowered = text.lower()
    return any(marker in lowered for marker in _AUTH_MARKERS)


@dataclass(slots=True, frozen=True)
class ErrorInfo:
    provider: str
    error_type: str
    message_signature: str
    retryable: bool
    status_code: int | None = None


def _normalize_message(message: str, max_len: int = 180) -> str:
    msg = message.lower()
    msg = re.sub(r"\s+", " ", msg)
    msg = re.sub(r"\d+", "#", msg)
    return msg.strip()[:max_len]


def _compact_message(message: str, max_len: int = 220) -> str:
    msg = re.sub(r"\s+", " ", message)
    return msg.strip()[:max_len]


def classify_error(exc: BaseException, *, provider: str) -> ErrorInfo:
    """Tell transient failures (worth another provider or a fresh call) from permanent ones."""
    normalized = _normalize_message(str(exc))
    status = getattr(exc, "status_code", None)

    if isinstance(exc, ProviderTimeoutError):
        retryable = True
    elif isinstance(exc, ProviderNotAvailableError):
        retryable = False
    elif isinstance(exc, MalformedResponseError):
        retryable = True
    elif isinstance(exc, ProviderAPIError) and status is not None:
        retryable = status in {408, 429} or status >= 500
    else:
        lowered = f"{exc.__class__.__name__.lower()} {normalized}"
        retryable = True
        if looks_like_auth_failure(lowered) or any(k in lowered for k in ("badrequest", "permission", "not found")):
            retryable = False
        if any(k in lowered for k in ("timeout", "temporar", "connection", "reset", "unavailable", "rate limit")):
            retryable = True

    return ErrorInfo(
        provider=provider,
        error_type=exc.__class__.__name__,
        message_signature=normalized,
        retryable=retryable,
        status_code=status,
    )


def compact_error_summary(exc: BaseException, max_len: int = 220) -> str:
    return f"{exc.__class__.__name__}: {_compact_message(str(exc), max_len=max_len)}"
