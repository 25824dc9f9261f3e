from __future__ import annotations

from dataclasses import dataclass

from commitment.core.providers.parser import COMMIT_MESSAGE_END, COMMIT_MESSAGE_START, CONVENTIONAL_COMMIT_TYPES

DEFAULT_MAX_DIFF_CHARS = 8000
TRUNCATION_MARKER = "... (diff truncated)"


@dataclass(slots=True, frozen=True)
class CommitTask:
    title: str = ""
    description: str = ""


@dataclass(slots=True, frozen=True)
class PromptContext:
    diff: str
    stat: str = ""
    name_status: str = ""
    task: CommitTask | None = None


def _truncate(diff: str, max_chars: int) -> str:
    if len(diff) <= max_chars:
        return diff
    return f"{diff[:max_chars].rstrip()}\n{TRUNCATION_MARKER}"


def build_commit_message_prompt(
    context: PromptContext,
    max_diff_chars: int = DEFAULT_MAX_DIFF_CHARS,
    commit_types: tuple[str, ...] = CONVENTIONAL_COMMIT_TYPES,
) -> str:
    """Assemble the instruction sent to a provider.

    Diff, stat and name-status text are embedded verbatim; nothing here looks
    inside them.
    """
    sections: list[str] = [
        "Write a git commit message for the staged changes below.",
        "Use the conventional commit format: type(scope): description",
        f"Allowed types: {', '.join(commit_types)}.",
        "Keep the subject line under 72 characters, imperative mood, no trailing period.",
        "Add a short body after a blank line only when the change needs explaining.",
    ]

    task = context.task
    if task is not None and (task.title.strip() or task.description.strip()):
        sections.append("")
        sections.append("Task context:")
        if task.title.strip():
            sections.append(f"Title: {task.title.strip()}")
        if task.description.strip():
            sections.append(f"Description: {task.description.strip()}")

    if context.name_status.strip():
        sections.extend(["", "Changed files:", context.name_status.strip()])
    if context.stat.strip():
        sections.extend(["", "Diff statistics:", context.stat.strip()])

    sections.extend(["", "Diff:", _truncate(context.diff, max_diff_chars)])
    sections.extend(
        [
            "",
            "Reply with the commit message only, wrapped exactly like this:",
            COMMIT_MESSAGE_START,
            "<commit message>",
            COMMIT_MESSAGE_END,
        ]
    )
    return "\n".join(sections)
