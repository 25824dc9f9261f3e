from __future__ import annotations

from commitment.core.providers.cli_provider import CLIProvider


class GeminiProvider(CLIProvider):
    name = "gemini"
    default_command = "gemini"
    default_args = ("-p",)
    input_mode = "argument"
    install_hint = "npm install -g @google/gemini-cli"
