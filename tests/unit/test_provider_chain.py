from __future__ import annotations

import time

import pytest

from commitment.core.providers.base import GenerateOptions, Provider, ProviderKind
from commitment.core.providers.chain import ProviderChain, format_chain_error, probe_all
from commitment.core.runtime.errors import (
    ProviderChainError,
    ProviderConfigurationError,
    ProviderError,
    ProviderNotAvailableError,
    ProviderTimeoutError,
)
from commitment.core.telemetry.logging import configure_logging


class FakeProvider(Provider):
    def __init__(self, name, result=None, error=None, available=True, kind=ProviderKind.CLI):
        self.name = name
        self.kind = kind
        self.result = result
        self.error = error
        self.available = available
        self.calls: list[tuple[str, GenerateOptions | None]] = []

    def generate_commit_message(self, prompt, options=None):
        self.calls.append((prompt, options))
        if self.error is not None:
            raise self.error
        return self.result

    def is_available(self):
        if isinstance(self.available, Exception):
            raise self.available
        return self.available


def test_first_success_short_circuits():
    first = FakeProvider("a", result="feat: from a")
    second = FakeProvider("b", result="feat: from b")
    chain = ProviderChain([first, second])
    options = GenerateOptions(timeout_ms=500)

    assert chain.generate_commit_message("prompt", options) == "feat: from a"
    assert first.calls == [("prompt", options)]
    assert second.calls == []


def test_falls_back_in_order():
    first = FakeProvider("a", error=ProviderNotAvailableError("a", "missing"))
    second = FakeProvider("b", result="fix: from b")
    third = FakeProvider("c", result="fix: from c")
    assert ProviderChain([first, second, third]).generate_commit_message("prompt") == "fix: from b"
    assert len(first.calls) == 1
    assert third.calls == []


def test_all_failures_are_reported_aligned():
    providers = [
        FakeProvider("a", error=ProviderNotAvailableError("a", "missing")),
        FakeProvider("b", error=ProviderTimeoutError("b", 100, "generate_commit_message")),
        FakeProvider("c", error=RuntimeError("boom")),
    ]
    with pytest.raises(ProviderChainError) as err:
        ProviderChain(providers).generate_commit_message("prompt")

    exc = err.value
    assert exc.attempted_providers == ("a", "b", "c")
    assert len(exc.errors) == len(exc.attempted_providers)
    for name, error in zip(exc.attempted_providers, exc.errors):
        assert isinstance(error, ProviderError)
        assert error.provider_name == name
        assert name in str(exc)
    assert isinstance(exc.errors[2].cause, RuntimeError)
    assert "boom" in str(exc)


def test_empty_chain_is_a_configuration_error():
    with pytest.raises(ProviderConfigurationError):
        ProviderChain([])


def test_name_and_kind():
    chain = ProviderChain([FakeProvider("a", kind=ProviderKind.API), FakeProvider("b")])
    assert chain.name == "ProviderChain[a, b]"
    assert chain.kind is ProviderKind.API


def test_availability_is_any_and_tolerates_raising_probes():
    assert ProviderChain([FakeProvider("a", available=False), FakeProvider("b", available=True)]).is_available()
    assert not ProviderChain(
        [FakeProvider("a", available=False), FakeProvider("b", available=RuntimeError("probe crashed"))]
    ).is_available()
    assert probe_all([FakeProvider("a", available=RuntimeError("x")), FakeProvider("b")]) == [False, True]


class SlowProbeProvider(FakeProvider):
    def is_available(self):
        time.sleep(0.5)
        return self.name == "d"


def test_availability_probes_run_concurrently():
    chain = ProviderChain([SlowProbeProvider(name) for name in ("a", "b", "c", "d")])
    started = time.perf_counter()
    assert chain.is_available()
    assert time.perf_counter() - started < 1.5


def test_format_chain_error_numbers_each_provider():
    exc = ProviderChainError(["a", "b"], [ProviderError("a", "first"), ProviderError("b", "second")])
    report = format_chain_error(exc)
    assert report.splitlines()[0].startswith("All 2 providers failed")
    assert "  1. a: first" in report
    assert "  2. b: second" in report


def test_attempts_are_logged(capsys):
    configure_logging("INFO")
    try:
        providers = [FakeProvider("a", error=ProviderNotAvailableError("a", "missing")), FakeProvider("b", result="feat: x")]
        ProviderChain(providers).generate_commit_message("prompt")
        err = capsys.readouterr().err
    finally:
        configure_logging()
    assert "provider_attempt" in err
    assert "retryable=False" in err
    assert "outcome=ok" in err
