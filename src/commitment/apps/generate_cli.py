from __future__ import annotations

import sys
from pathlib import Path

from commitment.cli import base_parser, positive_int
from commitment.core.config.loader import load_app_config
from commitment.core.config.schema import AppConfig, CLIProviderConfig
from commitment.core.git.commit import append_signature, create_commit
from commitment.core.git.staged import collect_staged_changes
from commitment.core.prompts.commit_message import CommitTask, PromptContext, build_commit_message_prompt
from commitment.core.providers.base import GenerateOptions, Provider
from commitment.core.providers.chain import ProviderChain, format_chain_error
from commitment.core.providers.factory import SUPPORTED_CLI_TOOLS, create_provider, policy_from_config
from commitment.core.providers.parser import ValidationPolicy
from commitment.core.runtime.errors import ProviderChainError, ProviderError
from commitment.core.telemetry.logging import configure_logging, get_logger

logger = get_logger("commitment.apps.generate")


def _select_providers(cfg: AppConfig, names: list[str] | None, policy: ValidationPolicy) -> list[Provider]:
    configured = [create_provider(c, policy=policy, timeouts=cfg.timeouts) for c in cfg.providers]
    if not names:
        return configured

    selected: list[Provider] = []
    for name in names:
        matches = [p for p in configured if p.name == name]
        if not matches and name in SUPPORTED_CLI_TOOLS:
            matches = [create_provider(CLIProviderConfig(tool=name), policy=policy, timeouts=cfg.timeouts)]
        if not matches:
            raise ValueError(f"unknown provider '{name}'")
        selected.extend(matches)
    return selected


def _read_prompt(args, cfg: AppConfig, policy: ValidationPolicy) -> str:
    if args.from_git:
        staged = collect_staged_changes(args.cwd)
        if staged.is_empty:
            return ""
        context = PromptContext(
            diff=staged.diff,
            stat=staged.stat,
            name_status=staged.name_status,
            task=CommitTask(title=args.title or "", description=args.description or ""),
        )
        return build_commit_message_prompt(context, cfg.prompt.max_diff_chars, policy.commit_types)
    if args.prompt_file:
        return Path(args.prompt_file).read_text(encoding="utf-8")
    return sys.stdin.read()


def main() -> int:
    parser = base_parser("commitment-generate", "Generate a commit message with the first working AI provider")
    parser.add_argument("--config", default=None, help="Config file path")
    parser.add_argument(
        "--provider",
        action="append",
        default=None,
        help="Provider to try, in order (repeatable). Defaults to the configured chain.",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--prompt-file", default=None, help="Read the prompt from a file instead of stdin")
    source.add_argument("--from-git", action="store_true", help="Build the prompt from staged git changes")
    parser.add_argument("--cwd", default=None, help="Working directory for the provider and git")
    parser.add_argument("--timeout-ms", type=positive_int, default=None, help="Per-provider timeout override")
    parser.add_argument("--title", default=None, help="Task title added to the prompt (with --from-git)")
    parser.add_argument("--description", default=None, help="Task description added to the prompt (with --from-git)")
    parser.add_argument("--signature", default=None, help="Text appended to the message after a blank line")
    parser.add_argument("--commit", action="store_true", help="Create the commit with the generated message")
    parser.add_argument(
        "--dry-run",
        "--message-only",
        dest="dry_run",
        action="store_true",
        help="Only print the message, even with --commit",
    )
    args = parser.parse_args()

    try:
        cfg = load_app_config(instance_path=args.config)
    except Exception as exc:  # noqa: BLE001
        print(f"config-invalid error={exc}", file=sys.stderr)
        return 2

    configure_logging(cfg.telemetry.log_level, cfg.telemetry.json_logs)
    policy = policy_from_config(cfg)

    try:
        chain = ProviderChain(_select_providers(cfg, args.provider, policy))
    except (ValueError, ProviderError) as exc:
        print(f"provider-invalid error={exc}", file=sys.stderr)
        return 2

    try:
        prompt = _read_prompt(args, cfg, policy)
    except (OSError, ProviderError) as exc:
        print(f"prompt-unavailable error={exc}", file=sys.stderr)
        return 1
    if not prompt.strip():
        print("prompt-empty (nothing staged or empty input)", file=sys.stderr)
        return 1

    logger.debug("generate_start", chain=chain.name, prompt_chars=len(prompt))
    try:
        message = chain.generate_commit_message(prompt, GenerateOptions(args.cwd, args.timeout_ms))
    except ProviderChainError as exc:
        print(format_chain_error(exc), file=sys.stderr)
        return 1

    message = append_signature(message, args.signature)
    if args.commit and not args.dry_run:
        try:
            create_commit(message, args.cwd)
        except ProviderError as exc:
            print(f"commit-failed error={exc}", file=sys.stderr)
            return 1
        logger.info("commit_created", chain=chain.name, cwd=args.cwd)

    print(message)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
