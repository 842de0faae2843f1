"""
Deterministic segmenter: raw reasoning text -> ordered semantic units.

Priority order:
1. Structural locks: factor blocks > numbered lines > paragraph blocks.
2. Merge rules: open-parenthesis carry, example/consequence leaders.
3. Boundary rules: split an intro sentence off the first unit and a
   synthesis sentence off the last unit when parentheses stay balanced.
4. Minimum unit variance: units shorter than 40 characters are merged into
   a neighbour (previous preferred).

Internal whitespace, punctuation and capitalization are never normalized;
only unit edges are trimmed.
"""

from __future__ import annotations

from dataclasses import dataclass

from backend_neuprint.extraction.rules import (
    BLANK_LINE_SPLIT,
    CONCLUSION_LEADS,
    FACTOR_LEAD_RULES,
    MERGE_LEADER_RULES,
    NUMBERED_LINE_START,
    ORDINAL_LINE_START,
    PAGE_MARKER_LINE,
    any_match,
)
from backend_neuprint.neuprint_logging import get_logger

logger = get_logger(__name__)

MIN_UNIT_CHARS = 40
MIN_BOUNDARY_SENTENCE_CHARS = 40

MODE_FACTOR = "factor"
MODE_NUMBERED = "numbered"
MODE_PARAGRAPH = "paragraph"
MODE_EMPTY = "empty"

_SENTENCE_END = frozenset(".?!")
_SENTENCE_GAP = frozenset(" \n\r\t")
_OPENERS = frozenset("([{")
_CLOSERS = frozenset(")]}")


@dataclass(frozen=True)
class Sentence:
    text: str
    start: int
    """Start offset in the text that was split."""
    end: int
    """End offset (exclusive)."""


@dataclass
class SegmentationResult:
    unit_texts: list[str]
    mode: str
    """Structural lock that produced the base units: factor | numbered | paragraph | empty."""

    def to_dict(self) -> dict[str, object]:
        return {"unit_texts": list(self.unit_texts), "mode": self.mode}


def trim_edges(s: str) -> str:
    return (s or "").strip()


def strip_page_markers(text: str) -> str:
    """Remove lines consisting only of a pagination marker like '- 3 -'."""
    return PAGE_MARKER_LINE.sub("", text or "")


def split_sentences(text: str) -> list[Sentence]:
    """
    Conservative sentence splitter.

    Splits after '.', '?' or '!' when followed by a space, tab, newline or
    end of text; punctuation stays with its sentence. No abbreviation handling.
    """
    s = text or ""
    out: list[Sentence] = []
    start = 0
    n = len(s)
    for i, ch in enumerate(s):
        if ch not in _SENTENCE_END:
            continue
        if i + 1 != n and s[i + 1] not in _SENTENCE_GAP:
            continue
        out.append(Sentence(s[start : i + 1], start, i + 1))
        start = i + 1
    if start < n:
        out.append(Sentence(s[start:], start, n))
    return [x for x in out if trim_edges(x.text)]


def is_factor_lead(sentence: str) -> bool:
    s = sentence or ""
    if ORDINAL_LINE_START.search(s):
        return True
    return any_match(s, FACTOR_LEAD_RULES)


def is_merge_leader(sentence: str) -> bool:
    return any_match(sentence or "", MERGE_LEADER_RULES)


def has_numbered_lines(text: str) -> bool:
    return bool(text) and NUMBERED_LINE_START.search(text) is not None


def parenthesis_balance(s: str) -> int:
    bal = 0
    for ch in s or "":
        if ch in _OPENERS:
            bal += 1
        elif ch in _CLOSERS:
            bal -= 1
    return bal


def _first_sentence(unit: str) -> str:
    sentences = split_sentences(unit)
    return sentences[0].text if sentences else ""


# --- Step 1: structural locks ---


def _paragraph_blocks(text: str) -> list[str]:
    paras = [trim_edges(p) for p in BLANK_LINE_SPLIT.split(text or "")]
    paras = [p for p in paras if p]
    if not paras:
        t = trim_edges(text)
        return [t] if t else []
    return paras


def _factor_blocks(text: str, sentences: list[Sentence]) -> list[str]:
    """One block per factor sentence, through the sentence before the next factor sentence."""
    starts = [i for i, s in enumerate(sentences) if is_factor_lead(s.text)]
    if not starts:
        return _paragraph_blocks(text)
    blocks: list[str] = []
    for k, start_idx in enumerate(starts):
        end_idx = starts[k + 1] if k + 1 < len(starts) else len(sentences)
        blocks.append(text[sentences[start_idx].start : sentences[end_idx - 1].end])
    return blocks


def _numbered_blocks(text: str) -> list[str]:
    starts = [m.start() for m in NUMBERED_LINE_START.finditer(text)]
    if not starts:
        return _paragraph_blocks(text)
    ends = starts[1:] + [len(text)]
    return [text[a:b] for a, b in zip(starts, ends)]


def _structural_units(text: str, sentences: list[Sentence]) -> tuple[list[str], str]:
    if any(is_factor_lead(s.text) for s in sentences):
        return _factor_blocks(text, sentences), MODE_FACTOR
    if has_numbered_lines(text):
        return _numbered_blocks(text), MODE_NUMBERED
    return _paragraph_blocks(text), MODE_PARAGRAPH


# --- Step 2: merge rules ---


def _splits_open_parenthesis(left: str, right: str) -> bool:
    if parenthesis_balance(left) <= 0:
        return False
    return any(ch in _CLOSERS for ch in right or "")


def _merge_units(units: list[str]) -> list[str]:
    if len(units) <= 1:
        return units
    out = list(units)

    i = 0
    while i < len(out) - 1:
        if _splits_open_parenthesis(out[i], out[i + 1]):
            out[i] = out[i] + out[i + 1]
            del out[i + 1]
            continue
        i += 1

    i = 0
    while i < len(out) - 1:
        lead = _first_sentence(out[i + 1])
        if lead and is_merge_leader(lead):
            out[i] = out[i] + out[i + 1]
            del out[i + 1]
            continue
        i += 1
    return out


# --- Step 3: intro / conclusion ---


def _split_intro(unit: str) -> list[str]:
    sentences = split_sentences(unit)
    if len(sentences) < 2:
        return [unit]
    first, second = sentences[0].text, sentences[1].text
    if len(trim_edges(first)) < MIN_BOUNDARY_SENTENCE_CHARS:
        return [unit]
    if is_factor_lead(first) or not is_factor_lead(second):
        return [unit]
    cut = sentences[0].end
    intro, rest = unit[:cut], unit[cut:]
    if parenthesis_balance(intro) != 0:
        return [unit]
    return [intro, rest]


def _split_conclusion(unit: str) -> list[str]:
    sentences = split_sentences(unit)
    if len(sentences) < 2:
        return [unit]
    last = sentences[-1]
    last_trim = trim_edges(last.text)
    if not last_trim.lower().startswith(CONCLUSION_LEADS):
        return [unit]
    if len(last_trim) < MIN_BOUNDARY_SENTENCE_CHARS:
        return [unit]
    head, conclusion = unit[: last.start], unit[last.start :]
    if parenthesis_balance(head) != 0:
        return [unit]
    return [head, conclusion]


def _apply_boundaries(units: list[str]) -> list[str]:
    if not units:
        return units
    out = _split_intro(units[0]) + units[1:]
    return out[:-1] + _split_conclusion(out[-1])


# --- Step 4: minimum unit variance ---


def _minimize_variance(units: list[str]) -> list[str]:
    if len(units) <= 1:
        return units
    out = list(units)
    i = 0
    while i < len(out):
        size = len(trim_edges(out[i]))
        if 0 < size < MIN_UNIT_CHARS:
            if i > 0:
                out[i - 1] = out[i - 1] + out[i]
                del out[i]
                i = max(0, i - 1)
                continue
            if len(out) > 1:
                out[0] = out[0] + out[1]
                del out[1]
                continue
        i += 1
    return out


def segment_text(text: str | None) -> SegmentationResult:
    """Split raw text into semantic units. Empty input yields no units."""
    cleaned = strip_page_markers(text or "")
    sentences = split_sentences(cleaned)
    if not sentences:
        t = trim_edges(cleaned)
        return SegmentationResult(unit_texts=[t] if t else [], mode=MODE_EMPTY)

    base, mode = _structural_units(cleaned, sentences)
    units = _minimize_variance(_apply_boundaries(_merge_units(base)))
    unit_texts = [u for u in (trim_edges(x) for x in units) if u]

    logger.debug(
        "segmenter_result",
        mode=mode,
        sentences=len(sentences),
        base_units=len(base),
        units=len(unit_texts),
    )
    return SegmentationResult(unit_texts=unit_texts, mode=mode)


def compute_unit_lengths(unit_texts: list[str]) -> list[int]:
    """Character length of each edge-trimmed unit (line breaks count as one)."""
    return [len(trim_edges(u)) for u in unit_texts or []]
