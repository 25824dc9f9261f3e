from __future__ import annotations

from commitment.core.providers.cli_provider import CLIProvider
from commitment.core.providers.transforms import CLAUDE_TRANSFORMS


class ClaudeProvider(CLIProvider):
    name = "claude"
    default_command = "claude"
    default_args = ("--print",)
    input_mode = "stdin"
    transforms = CLAUDE_TRANSFORMS
    install_hint = "npm install -g @anthropic-ai/claude-code"
