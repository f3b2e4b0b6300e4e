"""Utilities for classifying LLM output and extracting reply metadata.

The classifier is an ordered rule cascade: the first rule that matches
decides the content type.  Rules overlap (fenced JSON is both code and
JSON-ish, a pipe table is also markdown), so the order is part of the
behaviour:

1. empty reply
2. HTML ``<table>`` markup
3. whole-string JSON, or JSON-looking text that fails to parse (``raw``)
4. markdown pipe table
5. fenced code blocks, split into ``code`` and ``mixed`` by prose ratio
6. unfenced code recognised by keyword density
7. markdown with at least two distinct syntax signals
8. plain text, otherwise ``raw``

Everything here is pure; the only side effect is optional debug logging
through the logger passed to :func:`classify`.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable

from loguru import logger

from ..models.classified_reply import ClassifiedReply, ReplyMetadata
from ..models.enums import JsonKind, ResponseFormat, ResponseType

STATIC_CONFIDENCE = 0.9
MIXED_PROSE_RATIO = 0.3
MIN_KEYWORD_COUNT = 5
MIN_KEYWORD_DENSITY = 0.1
MIN_MARKDOWN_SIGNALS = 2

_HTML_TABLE_OPEN = re.compile(r"<table\b[^>]*>", re.IGNORECASE)
_HTML_TABLE_CLOSE = re.compile(r"</table\s*>", re.IGNORECASE)

_JSON_CLOSERS = {"{": "}", "[": "]"}

_TABLE_HEADER = re.compile(r"^\|?.+\|.*$")
_TABLE_SEPARATOR = re.compile(r"^\|?\s*:?-{3,}:?\s*(?:\|\s*:?-{3,}:?\s*)*\|?$")

_FENCE = re.compile(r"```[ \t]*([\w+#.-]*)[^\n`]*\n?(.*?)```", re.DOTALL)
_CODE_MARKER = re.compile(
    r"^[ \t]*CODE[ \t]*\n(.*?)\n[ \t]*CODE[ \t]*$", re.MULTILINE | re.DOTALL
)

_CODE_KEYWORDS = re.compile(
    r"\b(?:function|const|let|var|if|for|while|switch|try|catch|class|import|export"
    r"|def|async|await|public|private|protected)\b",
    re.IGNORECASE,
)
_WORD = re.compile(r"\b\w+\b")

_MARKDOWN_SIGNALS: dict[str, re.Pattern[str]] = {
    "header": re.compile(r"^[ \t]{0,3}#{1,6}[ \t]+\S", re.MULTILINE),
    "bullet_list": re.compile(r"^[ \t]*[-*+][ \t]+\S", re.MULTILINE),
    "ordered_list": re.compile(r"^[ \t]*\d+\.[ \t]+\S", re.MULTILINE),
    "link": re.compile(r"!?\[[^\[\]\n]*\]\([^()\n]*(?:\([^()\n]*\)[^()\n]*)*\)"),
    "emphasis": re.compile(
        r"\*\*(?=\S)[^*\n]+?(?<=\S)\*\*|__(?=\S)[^_\n]+?(?<=\S)__"
        r"|(?<![*\w])\*(?=[^\s*])[^*\n]+(?<=[^\s*])\*(?![*\w])"
    ),
    "inline_code": re.compile(r"(?<!`)`[^`\n]+`(?!`)"),
    "blockquote": re.compile(r"^[ \t]{0,3}>\s?\S", re.MULTILINE),
    "horizontal_rule": re.compile(r"^[ \t]{0,3}(?:-{3,}|\*{3,}|_{3,})[ \t]*$", re.MULTILINE),
}

_PLAIN_TEXT = re.compile(r"[\w\s.,!?;:'\"()\-‘’“”…–—]*")

_LANGUAGE_ALIASES = {
    "js": "javascript",
    "jsx": "javascript",
    "node": "javascript",
    "py": "python",
    "python3": "python",
    "ts": "typescript",
    "rs": "rust",
    "sh": "bash",
    "shell": "bash",
    "zsh": "bash",
    "console": "bash",
}

# Ordered; the first matching language wins.
_LANGUAGE_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    (
        "javascript",
        re.compile(
            r"\bconsole\.\w+\s*\(|\bfunction\b\s*\w*\s*\(|=>|\b(?:const|let|var)\s+\w+\s*="
            r"|\brequire\(|\bimport\s+[\w{}\s,*]+\s+from\s+['\"]|\bexport\s+(?:default|const|function)\b"
        ),
    ),
    (
        "python",
        re.compile(
            r"^[ \t]*def\s+\w+\s*\(|^[ \t]*(?:from\s+[\w.]+\s+)?import\s+\w+|\bprint\s*\(|\belif\b|\bself\.\w+",
            re.MULTILINE,
        ),
    ),
    (
        "java",
        re.compile(r"\bpublic\s+(?:static\s+)?(?:final\s+)?(?:class|void|int|String)\b|\bSystem\.out\.print"),
    ),
    (
        "rust",
        re.compile(r"\bfn\s+\w+\s*\(|\blet\s+mut\b|\bprintln!\(|\bimpl\s+\w+|\buse\s+std::"),
    ),
    (
        "sql",
        re.compile(
            r"\bSELECT\b.+?\bFROM\b|\bINSERT\s+INTO\b|\bCREATE\s+TABLE\b|\bUPDATE\s+\w+\s+SET\b|\bDELETE\s+FROM\b",
            re.IGNORECASE | re.DOTALL,
        ),
    ),
    (
        "bash",
        re.compile(
            r"^#!.*\b(?:ba|z)?sh\b|^\s*(?:sudo|echo|cd|ls|grep|chmod|mkdir|apt(?:-get)?|curl)\s",
            re.MULTILINE,
        ),
    ),
]


@dataclass(frozen=True)
class FencedBlock:
    """A fenced region of a reply: offsets into the text plus its body."""

    start: int
    end: int
    language: str | None
    code: str


# ---------------------------------------------------------------------------
# Public API


def classify(
    raw_text: str,
    requested_format: ResponseFormat | str | None = None,
    *,
    trust_format: bool = False,
    log: Any = None,
) -> ClassifiedReply:
    """Classify a model reply and attach metadata.

    Parameters
    ----------
    raw_text: str
        The text returned by the model.  May be empty.
    requested_format: ResponseFormat | str, optional
        The format the caller asked the model for.  It is advisory: the
        detected type wins unless ``trust_format`` is set.
    trust_format: bool
        When true, a supplied hint replaces the detected type for any
        non-empty reply.
    log: loguru logger, optional
        Receives debug traces of the rule decisions.  Defaults to the
        module logger.

    Returns
    -------
    ClassifiedReply
        Always returned; classification has no error outcome.
    """
    log = log or logger
    content = (raw_text or "").strip()
    content_type = detect_response_type(content, log=log)

    hint = _resolve_hint(requested_format, log)
    if hint is not None and hint is not content_type:
        if trust_format and content:
            log.debug("Trusting requested format {} over detected {}", hint.value, content_type.value)
            content_type = hint
        else:
            log.debug("Requested format {} overridden by detected {}", hint.value, content_type.value)

    metadata = extract_metadata(content, content_type)
    return ClassifiedReply(content=content, content_type=content_type, metadata=metadata)


def detect_response_type(content: str, log: Any = None) -> ResponseType:
    """Run the rule cascade over already-trimmed ``content``."""
    log = log or logger
    for name, rule in _RULES:
        verdict = rule(content)
        if verdict is not None:
            log.debug("Reply classified as {} by {} rule", verdict.value, name)
            return verdict
    verdict = ResponseType.TEXT if _PLAIN_TEXT.fullmatch(content) else ResponseType.RAW
    log.debug("Reply classified as {} by fallback rule", verdict.value)
    return verdict


def extract_metadata(content: str, content_type: ResponseType) -> ReplyMetadata:
    """Derive metadata for ``content`` classified as ``content_type``.

    JSON statistics are omitted when the content does not parse; no error
    is raised.
    """
    if not content:
        return ReplyMetadata.for_type(content_type)

    fields: dict[str, Any] = {"confidence": STATIC_CONFIDENCE}
    if content_type is ResponseType.CODE:
        language = detect_language(content)
        if language:
            fields["language"] = language
    elif content_type is ResponseType.JSON:
        parsed = _parse_json(content)
        if parsed is not _INVALID:
            fields["json_keys"] = json_keys(parsed)
            fields["json_depth"] = json_depth(parsed)
    return ReplyMetadata.for_type(content_type, **fields)


def detect_language(content: str) -> str | None:
    """Guess the programming language of a code reply.

    The first fenced block's tag wins; otherwise the keyword table is
    consulted in order.
    """
    blocks = find_fenced_blocks(content)
    if blocks and blocks[0].language:
        return _normalise_language(blocks[0].language)
    for language, pattern in _LANGUAGE_PATTERNS:
        if pattern.search(content):
            return language
    return None


def find_fenced_blocks(content: str) -> list[FencedBlock]:
    """Return backtick-fenced and ``CODE``-marked regions ordered by position."""
    blocks = [
        FencedBlock(match.start(), match.end(), match.group(1) or None, match.group(2))
        for match in _FENCE.finditer(content)
    ]
    for match in _CODE_MARKER.finditer(content):
        if not any(_overlaps(match.start(), match.end(), block) for block in blocks):
            blocks.append(FencedBlock(match.start(), match.end(), None, match.group(1)))
    return sorted(blocks, key=lambda block: block.start)


def json_kind(value: object) -> JsonKind:
    """Return the shape of a decoded JSON value."""
    if isinstance(value, dict):
        return JsonKind.OBJECT
    if isinstance(value, list):
        return JsonKind.ARRAY
    return JsonKind.SCALAR


def json_keys(value: object) -> list[str]:
    """Top-level keys of a JSON object; empty for arrays and scalars."""
    if json_kind(value) is JsonKind.OBJECT:
        return list(value)  # type: ignore[call-overload]
    return []


def json_depth(value: object) -> int:
    """Maximum nesting depth; a scalar or empty container has depth 1."""
    deepest = 1
    stack: list[tuple[object, int]] = [(value, 1)]
    while stack:
        node, level = stack.pop()
        deepest = max(deepest, level)
        for child in _json_children(node):
            if json_kind(child) is not JsonKind.SCALAR:
                stack.append((child, level + 1))
    return deepest


# ---------------------------------------------------------------------------
# Rules


def _match_empty(content: str) -> ResponseType | None:
    return ResponseType.TEXT if not content else None


def _match_html_table(content: str) -> ResponseType | None:
    opener = _HTML_TABLE_OPEN.search(content)
    if opener and _HTML_TABLE_CLOSE.search(content, opener.end()):
        return ResponseType.HTML_TABLE
    return None


def _match_json(content: str) -> ResponseType | None:
    closer = _JSON_CLOSERS.get(content[0])
    if closer is None:
        return None
    if _parse_json(content) is not _INVALID:
        return ResponseType.JSON
    if content.endswith(closer):
        return ResponseType.RAW
    return None


def _match_pipe_table(content: str) -> ResponseType | None:
    lines = [line.strip() for line in content.splitlines() if line.strip()]
    if len(lines) < 2:
        return None
    if _TABLE_HEADER.match(lines[0]) and _TABLE_SEPARATOR.match(lines[1]):
        return ResponseType.TABLE
    return None


def _match_fenced_code(content: str) -> ResponseType | None:
    blocks = find_fenced_blocks(content)
    if not blocks:
        return None
    outside = sum(len(segment.strip()) for segment in _outside_segments(content, blocks))
    if outside / len(content) > MIXED_PROSE_RATIO:
        return ResponseType.MIXED
    return ResponseType.CODE


def _match_keyword_code(content: str) -> ResponseType | None:
    words = len(_WORD.findall(content))
    if not words:
        return None
    keywords = len(_CODE_KEYWORDS.findall(content))
    if keywords >= MIN_KEYWORD_COUNT and keywords / words > MIN_KEYWORD_DENSITY:
        return ResponseType.CODE
    return None


def _match_markdown(content: str) -> ResponseType | None:
    signals = [name for name, pattern in _MARKDOWN_SIGNALS.items() if pattern.search(content)]
    if len(signals) >= MIN_MARKDOWN_SIGNALS:
        return ResponseType.MARKDOWN
    return None


_RULES: tuple[tuple[str, Callable[[str], ResponseType | None]], ...] = (
    ("empty", _match_empty),
    ("html-table", _match_html_table),
    ("json", _match_json),
    ("pipe-table", _match_pipe_table),
    ("fenced-code", _match_fenced_code),
    ("keyword-density", _match_keyword_code),
    ("markdown", _match_markdown),
)


# ---------------------------------------------------------------------------
# Helpers

_INVALID = object()


def _resolve_hint(requested_format: ResponseFormat | str | None, log: Any) -> ResponseType | None:
    if requested_format is None:
        return None
    try:
        return ResponseFormat(requested_format).as_response_type()
    except ValueError:
        log.debug("Ignoring unknown requested format {!r}", requested_format)
        return None


def _reject_constant(name: str) -> None:
    raise ValueError(f"Non-standard JSON constant: {name}")


def _parse_json(content: str) -> object:
    """Strictly decode ``content``; return the ``_INVALID`` sentinel on failure."""
    try:
        return json.loads(content, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        return _INVALID


def _json_children(value: object) -> Iterable[object]:
    kind = json_kind(value)
    if kind is JsonKind.OBJECT:
        return value.values()  # type: ignore[attr-defined]
    if kind is JsonKind.ARRAY:
        return value  # type: ignore[return-value]
    return ()


def _outside_segments(content: str, blocks: list[FencedBlock]) -> list[str]:
    segments: list[str] = []
    cursor = 0
    for block in blocks:
        segments.append(content[cursor : block.start])
        cursor = max(cursor, block.end)
    segments.append(content[cursor:])
    return segments


def _overlaps(start: int, end: int, block: FencedBlock) -> bool:
    return start < block.end and block.start < end


def _normalise_language(tag: str) -> str:
    lowered = tag.strip().lower()
    return _LANGUAGE_ALIASES.get(lowered, lowered)
