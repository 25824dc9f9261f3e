from __future__ import annotations

import re

from commitment.core.providers.parser import (
    COMMIT_MESSAGE_END,
    COMMIT_MESSAGE_START,
    CONVENTIONAL_COMMIT_TYPES,
    Transform,
    tidy,
)

_NARRATION_START = re.compile(
    r"^(?:looking|analyzing|based|from|i can see|this commit|this change|the changes|the modifications"
    r"|here|now|let me|first|next|then)\b",
    re.IGNORECASE,
)
_COMMIT_START = re.compile(
    rf"^(?:(?:{'|'.join(CONVENTIONAL_COMMIT_TYPES)})(?:\([^()]*\))?!?:"
    r"|(?:add|update|fix|remove|implement|enhance|improve|create)(?:s|d|ed)?\b)",
    re.IGNORECASE,
)

_CODEX_BANNER_LINE = re.compile(r"^[ \t]*OpenAI Codex\b.*$\n?", re.MULTILINE)
_SEPARATOR_LINE = re.compile(r"^[ \t]*-{3,}[ \t]*$\n?", re.MULTILINE)


def drop_leading_narration(text: str) -> str:
    """Drop lines before the first one that reads like the start of a commit message.

    Text without a recognisable start line is returned unchanged, as is text that
    still carries an unmatched sentinel.
    """
    if COMMIT_MESSAGE_START in text or COMMIT_MESSAGE_END in text:
        return text

    lines = text.split("\n")
    for index, line in enumerate(lines):
        stripped = line.strip()
        if len(stripped) < 5 or _NARRATION_START.match(stripped):
            continue
        if _COMMIT_START.match(stripped):
            return tidy("\n".join(lines[index:]))
    return text


def strip_codex_banner(text: str) -> str:
    cleaned = _CODEX_BANNER_LINE.sub("", text)
    cleaned = _SEPARATOR_LINE.sub("", cleaned)
    return tidy(cleaned)


CLAUDE_TRANSFORMS: tuple[Transform, ...] = (drop_leading_narration,)
CODEX_TRANSFORMS: tuple[Transform, ...] = (strip_codex_banner,)
