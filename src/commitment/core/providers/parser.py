"""Normalise raw tool output into a single clean commit message.

Tools answer in plain text, JSON envelopes, fenced blocks or sentinel-delimited
payloads, often mixed with preambles, reasoning blocks and activity logs. The
functions here strip that noise and reject output that is not a usable message.
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from functools import lru_cache

from commitment.core.runtime.errors import MalformedResponseError

COMMIT_MESSAGE_START = "<<<COMMIT_MESSAGE_START>>>"
COMMIT_MESSAGE_END = "<<<COMMIT_MESSAGE_END>>>"

STRUCTURED_TEXT_FIELDS = ("content", "message", "text", "result")

MIN_MESSAGE_LENGTH = 5
CONVENTIONAL_COMMIT_TYPES = ("feat", "fix", "docs", "style", "refactor", "perf", "test", "chore", "build", "ci")

PARSER_NAME = "response-parser"

Transform = Callable[[str], str]


@dataclass(slots=True, frozen=True)
class ValidationPolicy:
    min_length: int = MIN_MESSAGE_LENGTH
    commit_types: tuple[str, ...] = CONVENTIONAL_COMMIT_TYPES
    require_conventional: bool = False


DEFAULT_POLICY = ValidationPolicy()

_FENCE_LINE = re.compile(r"^[ \t]*```[\w+.-]*[ \t]*$\n?", re.MULTILINE)
_EXCESS_BLANK_LINES = re.compile(r"\n{3,}")
_ALNUM = re.compile(r"[0-9A-Za-z]")

_THINKING_BLOCK = re.compile(r"<(think|thinking)>.*?</\1>", re.IGNORECASE | re.DOTALL)
_THINKING_LINE = re.compile(r"^[ \t]*thinking[ \t]*:.*$\n?", re.IGNORECASE | re.MULTILINE)
_PREAMBLE_PREFIX = re.compile(
    r"^[ \t]*(?:(?:(?:here is|here's)[ \t]+(?:the[ \t]+|a[ \t]+)?commit message:?|commit message:)\s*)+",
    re.IGNORECASE | re.MULTILINE,
)
_NARRATION_LINE = re.compile(
    r"^[ \t]*(?:based on (?:the )?(?:git )?(?:diff|changes)|looking at (?:the )?changes"
    r"|analyzing (?:the )?changes|from (?:the )?changes|i can see (?:that )?this)\b.*$\n?",
    re.IGNORECASE | re.MULTILINE,
)
_ACTIVITY_LOG_LINE = re.compile(
    r"^[ \t]*\[\d{4}-\d{2}-\d{2}T[\d:.]+(?:Z|[+-]\d{2}:?\d{2})?\].*$\n?",
    re.MULTILINE,
)
_METADATA_FIELD_LINE = re.compile(
    r"^[ \t]*(?:workdir|model|provider|approval|sandbox|reasoning effort|reasoning summaries)[ \t]*:.*$\n?",
    re.IGNORECASE | re.MULTILINE,
)


def tidy(text: str) -> str:
    return _EXCESS_BLANK_LINES.sub("\n\n", text).strip()


def looks_structured(output: str) -> bool:
    return output.lstrip().startswith("{")


def parse_structured(output: str) -> str | None:
    """Return the text payload of a JSON envelope, or None when there is none."""
    try:
        parsed = json.loads(output.strip())
    except ValueError:
        return None

    if isinstance(parsed, str):
        return parsed
    if isinstance(parsed, dict):
        for field in STRUCTURED_TEXT_FIELDS:
            value = parsed.get(field)
            if isinstance(value, str):
                return value
    return None


def parse_plain_text(output: str, trim_whitespace: bool = True) -> str:
    text = output.replace("\r\n", "\n").replace("\r", "\n")
    text = _FENCE_LINE.sub("", text)
    return text.strip() if trim_whitespace else text


def extract_sentinel_payload(text: str) -> str:
    """Keep only the text between the sentinels; leave the text alone unless both are present in order."""
    start = text.find(COMMIT_MESSAGE_START)
    if start == -1:
        return text
    end = text.find(COMMIT_MESSAGE_END, start + len(COMMIT_MESSAGE_START))
    if end == -1:
        return text
    return text[start + len(COMMIT_MESSAGE_START) : end].strip()


def strip_artifacts(text: str) -> str:
    cleaned = text.replace("\r\n", "\n").replace("\r", "\n")
    cleaned = extract_sentinel_payload(cleaned)
    cleaned = _THINKING_BLOCK.sub("", cleaned)
    # Prefix removal can expose a fence or a whole noise line; line filters run after it.
    cleaned = _PREAMBLE_PREFIX.sub("", cleaned)
    cleaned = _FENCE_LINE.sub("", cleaned)
    cleaned = _THINKING_LINE.sub("", cleaned)
    cleaned = _ACTIVITY_LOG_LINE.sub("", cleaned)
    cleaned = _METADATA_FIELD_LINE.sub("", cleaned)
    cleaned = _NARRATION_LINE.sub("", cleaned)
    return tidy(cleaned)


def has_minimal_format(message: str, policy: ValidationPolicy = DEFAULT_POLICY) -> bool:
    trimmed = message.strip()
    return len(trimmed) >= policy.min_length and _ALNUM.search(trimmed) is not None


def validate_minimal_format(
    message: str,
    policy: ValidationPolicy = DEFAULT_POLICY,
    provider_name: str = PARSER_NAME,
) -> str:
    trimmed = message.strip()
    if not trimmed:
        raise MalformedResponseError(provider_name, "empty response", output=message)
    if len(trimmed) < policy.min_length:
        raise MalformedResponseError(
            provider_name, f"response shorter than {policy.min_length} characters", output=message
        )
    if _ALNUM.search(trimmed) is None:
        raise MalformedResponseError(provider_name, "response has no alphanumeric content", output=message)
    return message


@lru_cache(maxsize=16)
def _conventional_header(commit_types: tuple[str, ...]) -> re.Pattern[str]:
    types = "|".join(re.escape(t) for t in commit_types)
    return re.compile(rf"^(?:{types})(?:\((?=[^()]*[^()\s])[^()]+\))?:[ \t]*\S")


def is_conventional_commit(message: str, policy: ValidationPolicy = DEFAULT_POLICY) -> bool:
    first_line = message.strip().split("\n", 1)[0]
    return _conventional_header(tuple(policy.commit_types)).match(first_line) is not None


def validate_conventional_commit(
    message: str,
    policy: ValidationPolicy = DEFAULT_POLICY,
    provider_name: str = PARSER_NAME,
) -> str:
    if not is_conventional_commit(message, policy):
        first_line = message.strip().split("\n", 1)[0]
        raise MalformedResponseError(
            provider_name,
            f"expected 'type(scope)?: description' header, got {first_line[:100]!r}",
            output=message,
        )
    return message


def parse(
    output: str,
    *,
    expect_structured: bool = False,
    allow_empty: bool = False,
    trim_whitespace: bool = True,
    policy: ValidationPolicy = DEFAULT_POLICY,
) -> str:
    if expect_structured or looks_structured(output):
        structured = parse_structured(output)
        if structured is not None:
            output = structured

    text = parse_plain_text(output, trim_whitespace)
    if not allow_empty:
        validate_minimal_format(text, policy)
    return text


def clean_response(
    raw: str,
    transforms: Sequence[Transform] = (),
    *,
    policy: ValidationPolicy = DEFAULT_POLICY,
    require_conventional: bool = False,
    expect_structured: bool = False,
) -> str:
    """Structured extraction, shared artifact stripping, tool-specific transforms, then validation."""
    text = raw
    if expect_structured or looks_structured(raw):
        structured = parse_structured(raw)
        if structured is not None:
            text = structured

    text = strip_artifacts(text)
    for transform in transforms:
        text = transform(text)

    message = parse(text, policy=policy)
    if require_conventional or policy.require_conventional:
        validate_conventional_commit(message, policy)
    return message
