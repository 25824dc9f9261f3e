from __future__ import annotations

import tempfile
from pathlib import Path

from commitment.core.providers.base import GenerateOptions
from commitment.core.providers.cli_provider import CLIProvider
from commitment.core.providers.transforms import CODEX_TRANSFORMS
from commitment.core.runtime.process import run

# Codex inspects the repository itself; a pasted diff only inflates the argv.
STAGED_CHANGES_INSTRUCTION = "Generate a conventional commit message for the staged changes in this repository"

OUTPUT_FILE_NAME = "last-message.txt"


def _contains_raw_diff(prompt: str) -> bool:
    return "diff --git" in prompt or "@@" in prompt


class CodexProvider(CLIProvider):
    name = "codex"
    default_command = "codex"
    default_args = ("exec",)
    input_mode = "argument"
    transforms = CODEX_TRANSFORMS
    require_conventional_format = True
    install_hint = "npm install -g @openai/codex"
    login_hint = "Run: codex login"

    def prepare_prompt(self, prompt: str) -> str:
        return STAGED_CHANGES_INSTRUCTION if _contains_raw_diff(prompt) else prompt

    def build_output_args(self, prompt: str, output_file: Path, options: GenerateOptions) -> list[str]:
        args = [*self.args, self.prepare_prompt(prompt), "--color", "never", "--output-last-message", str(output_file)]
        if options.working_directory is not None:
            args.extend(["-C", str(options.working_directory)])
        return args

    def invoke(self, prompt: str, options: GenerateOptions, timeout_ms: int) -> str:
        # Removed on every exit path, timeouts included.
        with tempfile.TemporaryDirectory(prefix="commitment-codex-") as tmp:
            output_file = Path(tmp) / OUTPUT_FILE_NAME
            stdout = run(
                self.command,
                self.build_output_args(prompt, output_file, options),
                cwd=options.working_directory,
                timeout_ms=timeout_ms,
            )
            if output_file.is_file():
                content = output_file.read_text(encoding="utf-8", errors="replace")
                if content.strip():
                    return content
            return stdout
