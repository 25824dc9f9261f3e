from __future__ import annotations

from commitment.cli import base_parser
from commitment.core.config.loader import load_app_config
from commitment.core.providers.api_provider import APIProvider
from commitment.core.providers.base import Provider
from commitment.core.providers.cli_provider import CLIProvider
from commitment.core.providers.detect import available_providers
from commitment.core.providers.factory import create_providers, policy_from_config
from commitment.core.providers.health import check_providers
from commitment.core.telemetry.logging import configure_logging


def _describe(provider: Provider) -> str:
    if isinstance(provider, CLIProvider):
        argv = " ".join([provider.command, *provider.args])
        return f"kind=cli command={argv!r} input={provider.input_mode}"
    if isinstance(provider, APIProvider):
        return f"kind=api endpoint={provider.endpoint} model={provider.model}"
    return f"kind={provider.kind.value}"


def main() -> int:
    parser = base_parser("commitment-diag", "commitment diagnostics CLI")
    parser.add_argument("--config", default=None, help="Config file path")
    parser.add_argument("--validate-config", action="store_true")
    parser.add_argument("--list-providers", action="store_true")
    parser.add_argument("--check-providers", action="store_true")
    parser.add_argument("--auto-detect", action="store_true")
    args = parser.parse_args()

    did_work = False

    try:
        cfg = load_app_config(instance_path=args.config)
    except Exception as exc:  # noqa: BLE001
        print(f"config-invalid error={exc}")
        return 2

    configure_logging(cfg.telemetry.log_level, cfg.telemetry.json_logs)
    policy = policy_from_config(cfg)

    if args.validate_config:
        did_work = True
        print(
            f"config-valid providers={len(cfg.providers)} "
            f"cli_timeout_ms={cfg.timeouts.cli_ms} api_timeout_ms={cfg.timeouts.api_ms}"
        )

    providers: list[Provider] = []
    if args.list_providers or args.check_providers:
        try:
            providers = create_providers(cfg.providers, policy=policy, timeouts=cfg.timeouts)
        except Exception as exc:  # noqa: BLE001
            print(f"provider-invalid error={exc}")
            return 2

    if args.list_providers:
        did_work = True
        print("providers:")
        for index, provider in enumerate(providers, start=1):
            print(f"{index}. {provider.name}: {_describe(provider)}")

    if args.check_providers:
        did_work = True
        print("provider-checks:")
        for item in check_providers(providers):
            print(f"- {item.provider}: kind={item.kind} ok={item.ok} latency_ms={item.latency_ms} error={item.error}")

    if args.auto_detect:
        did_work = True
        detected = available_providers(policy=policy, timeouts=cfg.timeouts)
        print("auto-detect:")
        if not detected:
            print("- none (install claude, codex or gemini)")
        for provider in detected:
            print(f"- {provider.name}")
        print(f"selected={detected[0].name if detected else 'none'}")

    if not did_work:
        print("diag-ready (use --validate-config/--list-providers/--check-providers/--auto-detect)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
