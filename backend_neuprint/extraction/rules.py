"""
Locked lexical rule tables for segmentation and deterministic counting.

Every lexical rule is data: a LexicalRule carries a compiled pattern, the
category it feeds, a priority (lower wins when rules compete) and an action
value (e.g. revision depth). One generic matcher interprets all tables, so
rule sets can be tested and extended without touching control flow.

Lists are kept stable on purpose: changing them changes every downstream number.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

# Fixed output order for evidence types
EVIDENCE_TYPE_ORDER: tuple[str, ...] = (
    "example",
    "data",
    "authority",
    "analogy",
    "counterexample",
    "experience",
    "theory",
)

FACTOR_INDICATORS: tuple[str, ...] = (
    "first",
    "firstly",
    "second",
    "secondly",
    "third",
    "thirdly",
    "fourth",
    "fourthly",
    "finally",
    "in conclusion",
    "to conclude",
    "overall",
    "one reason",
    "another reason",
    "a key factor",
    "the first factor",
    "the second factor",
    "the third factor",
    "the key factor",
)

# Sentences opening with these stay attached to the preceding unit.
MERGE_LEADERS: tuple[str, ...] = (
    "for example",
    "in this case",
    "therefore",
    "thus",
    "because",
    "as a result",
    "which means",
)

CONCLUSION_LEADS: tuple[str, ...] = ("in conclusion", "to conclude", "overall")

REASON_CONNECTORS: tuple[str, ...] = (
    "because",
    "since",
    "therefore",
    "thus",
    "so that",
    "as a result",
    "which means",
)

ADJACENCY_CONNECTORS: tuple[str, ...] = (
    "because",
    "therefore",
    "thus",
    "since",
    "so that",
    "hence",
    "consequently",
    "as a result",
    "which means",
)

HEDGE_WORDS: tuple[str, ...] = ("may", "might", "could", "possibly", "likely", "suggest")

CORRECTION_MARKERS: tuple[str, ...] = (
    "however i revise",
    "on reconsideration",
    "i change",
    "correction",
    "reconsideration",
    "withdraw",
    "replace",
)

REFRAME_MARKERS: tuple[str, ...] = (
    "rather than",
    "instead of",
    "more important than",
    "less important than",
    "move away from",
    "shift from",
)

EVIDENCE_TYPE_HINTS: dict[str, tuple[str, ...]] = {
    "example": ("for example", "in this case"),
    "data": ("data", "statistics", "percent", "%"),
    "authority": ("according to", "research", "study", "report", "expert", "explanation ("),
    # "like" is too ambiguous for analogy
    "analogy": ("as if",),
    "counterexample": ("counterexample",),
    "experience": ("experienced",),
    "theory": ("principle", "theory", "framework"),
}

REVISION_DEPTH_CORRECTION = 0.5
REVISION_DEPTH_REFRAME = 0.2

# Structural regexes
PAGE_MARKER_LINE = re.compile(r"^[ \t]*-[ \t]*\d{1,4}[ \t]*-[ \t]*$\n?", re.MULTILINE)
NUMBERED_LINE_START = re.compile(r"^\s*(\d{1,3})\s*([.)]|:|-)\s+", re.MULTILINE)
ORDINAL_LINE_START = re.compile(
    r"^\s*(first|firstly|second|secondly|third|thirdly|fourth|fourthly|finally)\b",
    re.IGNORECASE | re.MULTILINE | re.ASCII,
)
BLANK_LINE_SPLIT = re.compile(r"\n\s*\n+")


@dataclass(frozen=True)
class LexicalRule:
    """One lexical rule: pattern -> category, with priority and an action value."""

    pattern: re.Pattern[str]
    category: str
    priority: int = 0
    action: float = 1.0
    """Numeric payload of the rule (e.g. revision depth); 1.0 for plain counters."""


def phrase_boundary_pattern(phrase: str) -> re.Pattern[str]:
    """Case-insensitive phrase with ASCII word boundaries on both ends."""
    return re.compile(r"\b" + re.escape(phrase) + r"\b", re.IGNORECASE | re.ASCII)


def sentence_lead_pattern(phrase: str) -> re.Pattern[str]:
    """Phrase at sentence start, optionally after an opening quote or bracket."""
    return re.compile(
        r"^\s*[\"'(\[]?\s*" + re.escape(phrase) + r"\b",
        re.IGNORECASE | re.ASCII,
    )


def substring_pattern(phrase: str) -> re.Pattern[str]:
    return re.compile(re.escape(phrase), re.IGNORECASE)


def build_rules(
    phrases: Iterable[str],
    category: str,
    *,
    builder=phrase_boundary_pattern,
    priority: int = 0,
    action: float = 1.0,
) -> tuple[LexicalRule, ...]:
    return tuple(
        LexicalRule(pattern=builder(p), category=category, priority=priority, action=action)
        for p in phrases
    )


def count_matches(text: str, rules: Sequence[LexicalRule]) -> int:
    """Total non-overlapping matches of every rule in text."""
    if not text:
        return 0
    return sum(len(rule.pattern.findall(text)) for rule in rules)


def first_match(text: str, rules: Sequence[LexicalRule]) -> LexicalRule | None:
    """Highest-priority (lowest number) rule that matches; table order breaks ties."""
    if not text:
        return None
    for rule in sorted(rules, key=lambda r: r.priority):
        if rule.pattern.search(text):
            return rule
    return None


def any_match(text: str, rules: Sequence[LexicalRule]) -> bool:
    return first_match(text, rules) is not None


# Compiled rule tables

FACTOR_LEAD_RULES: tuple[LexicalRule, ...] = build_rules(
    FACTOR_INDICATORS, "factor", builder=sentence_lead_pattern
)
MERGE_LEADER_RULES: tuple[LexicalRule, ...] = build_rules(
    MERGE_LEADERS, "merge_leader", builder=sentence_lead_pattern
)
REASON_RULES: tuple[LexicalRule, ...] = build_rules(REASON_CONNECTORS, "reason")
ADJACENCY_RULES: tuple[LexicalRule, ...] = build_rules(ADJACENCY_CONNECTORS, "adjacency")
HEDGE_RULES: tuple[LexicalRule, ...] = build_rules(HEDGE_WORDS, "hedge")

# Revision detection: at most one event per unit, lowest priority number wins.
REVISION_RULES: tuple[LexicalRule, ...] = (
    build_rules(
        CORRECTION_MARKERS,
        "correction",
        builder=substring_pattern,
        priority=10,
        action=REVISION_DEPTH_CORRECTION,
    )
    + build_rules(
        REFRAME_MARKERS,
        "reframe",
        builder=substring_pattern,
        priority=20,
        action=REVISION_DEPTH_REFRAME,
    )
    + (
        LexicalRule(
            pattern=re.compile(r"\bnot\b[\s\S]{1,80}\bbut\b", re.IGNORECASE | re.ASCII),
            category="reframe",
            priority=30,
            action=REVISION_DEPTH_REFRAME,
        ),
        LexicalRule(
            pattern=re.compile(r"\bno longer\b[\s\S]{1,80}\binstead\b", re.IGNORECASE | re.ASCII),
            category="reframe",
            priority=40,
            action=REVISION_DEPTH_REFRAME,
        ),
    )
)

EVIDENCE_RULES: dict[str, tuple[LexicalRule, ...]] = {
    etype: build_rules(hints, etype, builder=substring_pattern)
    for etype, hints in EVIDENCE_TYPE_HINTS.items()
}
