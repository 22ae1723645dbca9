"""Best-effort grammars for recovering fields from model prose.

Every function here is total: any string input terminates and yields a
(possibly empty) value. Malformed text is data, never an exception. Inputs
longer than ``MAX_EXTRACTION_CHARS`` are truncated before matching.

Grammars:
    DelimitedFieldGrammar: ``===FIELD===NAME: value===END===`` occurrences,
        matched independently per field; list fields split on ``|``.
    BlockGrammar: repeated records introduced by a start token (for example
        ``===EMAIL_START===``) holding ``KEY: value`` lines. Blocks missing a
        required key are skipped.
    JsonGrammar: direct parse, then code-fence stripping, then the span from
        the first ``{`` to the last ``}``. Yields ``None`` when all three fail.
"""

from __future__ import annotations

from collections.abc import Mapping
import dataclasses
import json
import logging
import re
from typing import Any

from aura_engine.constants import (
    MAX_EXTRACTION_CHARS,
    MIN_HEURISTIC_SECTION_CHARS,
    MIN_HEURISTIC_TEXT_CHARS,
)

log = logging.getLogger(__name__)

FIELD_OPEN = "===FIELD==="
FIELD_CLOSE = "===END==="

_FENCE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)
_SECTION_MARKER = re.compile(r"(?:Email\s*#?\s*\d|Subject\s*\d)", re.IGNORECASE)
_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")


@dataclasses.dataclass(frozen=True, slots=True)
class DelimitedFieldGrammar:
    fields: tuple[str, ...]
    list_fields: frozenset[str] = frozenset()
    open_marker: str = FIELD_OPEN
    close_marker: str = FIELD_CLOSE


@dataclasses.dataclass(frozen=True, slots=True)
class BlockGrammar:
    start: str
    end: str | None
    fields: tuple[str, ...]
    required: tuple[str, ...] = ()
    multiline: frozenset[str] = frozenset()  # captured to the end of the block


@dataclasses.dataclass(frozen=True, slots=True)
class JsonGrammar:
    pass


type Grammar = DelimitedFieldGrammar | BlockGrammar | JsonGrammar
type FieldValue = str | tuple[str, ...]


def _bounded(text: str) -> str:
    if not isinstance(text, str):
        return ""
    if len(text) > MAX_EXTRACTION_CHARS:
        log.debug(
            "Truncating reply of %d chars to %d before extraction",
            len(text),
            MAX_EXTRACTION_CHARS,
        )
        return text[:MAX_EXTRACTION_CHARS]
    return text


# --- Named field extractors ---


def extract_field(
    text: str,
    name: str,
    *,
    open_marker: str = FIELD_OPEN,
    close_marker: str = FIELD_CLOSE,
) -> str | None:
    """Value of the first ``{open}NAME: value{close}`` occurrence, stripped.

    Field names match case-insensitively. An empty value counts as absent.
    """
    text = _bounded(text)
    opener = re.compile(re.escape(open_marker) + re.escape(name) + ":", re.IGNORECASE)
    match = opener.search(text)
    if match is None:
        return None
    # Later openers cannot have a close that this one lacks.
    close = re.compile(re.escape(close_marker), re.IGNORECASE).search(text, match.end())
    if close is None:
        return None
    value = text[match.end() : close.start()].strip()
    return value or None


def split_list(value: str | None, separator: str = "|") -> tuple[str, ...]:
    """Split a list-valued field, dropping blank items."""
    if not value:
        return ()
    return tuple(item.strip() for item in value.split(separator) if item.strip())


def split_blocks(text: str, start: str, end: str | None = None) -> tuple[str, ...]:
    """Record bodies following each ``start`` token.

    Text before the first token is ignored, and each body is cut at its
    ``end`` token when one is given. Blank bodies are dropped.
    """
    text = _bounded(text)
    if not start or start not in text:
        return ()
    blocks = []
    for chunk in text.split(start)[1:]:
        if end:
            chunk = chunk.split(end, 1)[0]
        chunk = chunk.strip()
        if chunk:
            blocks.append(chunk)
    return tuple(blocks)


def extract_block_field(block: str, name: str, *, multiline: bool = False) -> str | None:
    """Value of a ``NAME: value`` line inside one block.

    Single-line fields stop at the end of their line; multiline fields run to
    the end of the block. Keys must start a line.
    """
    key = re.escape(name)
    if multiline:
        pattern = re.compile(rf"^[ \t]*{key}:\s*(.*)\Z", re.IGNORECASE | re.MULTILINE | re.DOTALL)
    else:
        pattern = re.compile(rf"^[ \t]*{key}:[ \t]*(.*)$", re.IGNORECASE | re.MULTILINE)
    match = pattern.search(block)
    if match is None:
        return None
    value = match.group(1).strip()
    return value or None


_UNPARSED = object()


def _loads(candidate: str) -> Any:
    try:
        return json.loads(candidate)
    except (ValueError, RecursionError):
        return _UNPARSED


def parse_json_with_repair(text: str) -> Any | None:
    """Parse JSON from a reply that may be fenced or wrapped in prose."""
    text = _bounded(text).strip()
    if not text:
        return None
    data = _loads(text)
    if data is not _UNPARSED:
        return data
    stripped = _FENCE.sub("", text).replace("```", "").strip()
    data = _loads(stripped)
    if data is not _UNPARSED:
        log.debug("Parsed JSON after stripping code fences")
        return data
    start, end = stripped.find("{"), stripped.rfind("}")
    if start != -1 and end > start:
        data = _loads(stripped[start : end + 1])
        if data is not _UNPARSED:
            log.debug("Parsed JSON from the outermost brace span")
            return data
    return None


def segment_prose(text: str, limit: int) -> tuple[str, ...]:
    """Heuristic sections of unstructured prose, at most ``limit`` of them.

    Splits on ``Email N`` / ``Subject N`` markers, falling back to paragraph
    breaks when no marker is present. Sections shorter than
    ``MIN_HEURISTIC_SECTION_CHARS`` are dropped, and text shorter than
    ``MIN_HEURISTIC_TEXT_CHARS`` yields nothing.
    """
    text = _bounded(text)
    if limit <= 0 or len(text) < MIN_HEURISTIC_TEXT_CHARS:
        return ()
    pieces = _SECTION_MARKER.split(text)
    if len(pieces) == 1:
        pieces = _PARAGRAPH_BREAK.split(text)
    sections = [p.strip() for p in pieces if len(p.strip()) > MIN_HEURISTIC_SECTION_CHARS]
    if not sections:
        sections = [text.strip()]
    log.debug("Segmented prose into %d section(s), keeping %d", len(sections), min(len(sections), limit))
    return tuple(sections[:limit])


# --- Grammar dispatch ---


def _extract_delimited(text: str, grammar: DelimitedFieldGrammar) -> dict[str, FieldValue]:
    found: dict[str, FieldValue] = {}
    for name in grammar.fields:
        raw = extract_field(
            text, name, open_marker=grammar.open_marker, close_marker=grammar.close_marker
        )
        if raw is None:
            continue
        if name in grammar.list_fields:
            items = split_list(raw)
            if items:
                found[name] = items
        else:
            found[name] = raw
    return found


def _extract_blocks(text: str, grammar: BlockGrammar) -> list[dict[str, str]]:
    records: list[dict[str, str]] = []
    for block in split_blocks(text, grammar.start, grammar.end):
        record = {}
        for name in grammar.fields:
            value = extract_block_field(block, name, multiline=name in grammar.multiline)
            if value is not None:
                record[name] = value
        if all(name in record for name in grammar.required):
            records.append(record)
        else:
            log.debug("Skipping block missing one of %s", grammar.required)
    return records


def extract(
    text: str, grammar: Grammar
) -> Mapping[str, FieldValue] | list[dict[str, str]] | Any | None:
    """Apply ``grammar`` to ``text``.

    Returns a field mapping for delimited grammars, a list of records for
    block grammars and the decoded value (or ``None``) for JSON.
    """
    text = _bounded(text)
    match grammar:
        case DelimitedFieldGrammar():
            return _extract_delimited(text, grammar)
        case BlockGrammar():
            return _extract_blocks(text, grammar)
        case JsonGrammar():
            return parse_json_with_repair(text)
        case _:
            raise TypeError(f"Unsupported grammar: {type(grammar).__name__}")
