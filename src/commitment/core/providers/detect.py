from __future__ import annotations

from commitment.core.config.schema import CLIProviderConfig, TimeoutsConfig
from commitment.core.providers.base import Provider
from commitment.core.providers.chain import probe_all
from commitment.core.providers.factory import SUPPORTED_CLI_TOOLS, create_provider
from commitment.core.providers.parser import ValidationPolicy

# Order matters: earlier tools are preferred when several are installed.
DETECTION_PRIORITY = SUPPORTED_CLI_TOOLS


def _candidates(policy: ValidationPolicy | None, timeouts: TimeoutsConfig | None) -> list[Provider]:
    return [
        create_provider(CLIProviderConfig(tool=tool), policy=policy, timeouts=timeouts) for tool in DETECTION_PRIORITY
    ]


def detect_available_provider(
    *,
    policy: ValidationPolicy | None = None,
    timeouts: TimeoutsConfig | None = None,
) -> Provider | None:
    """Return the first installed CLI provider in priority order, or None."""
    for provider in _candidates(policy, timeouts):
        if provider.is_available():
            return provider
    return None


def available_providers(
    *,
    policy: ValidationPolicy | None = None,
    timeouts: TimeoutsConfig | None = None,
) -> list[Provider]:
    candidates = _candidates(policy, timeouts)
    return [provider for provider, ok in zip(candidates, probe_all(candidates)) if ok]
