"""
Pytest tests for the deterministic segmenter (structural locks, merge rules,
minimum-variance consolidation, page markers).
"""

from __future__ import annotations

from backend_neuprint.extraction.segmenter import (
    MODE_EMPTY,
    MODE_FACTOR,
    MODE_NUMBERED,
    MODE_PARAGRAPH,
    compute_unit_lengths,
    is_factor_lead,
    parenthesis_balance,
    segment_text,
    split_sentences,
    strip_page_markers,
)


def test_split_sentences_keeps_punctuation_and_offsets():
    """Boundaries after . ? ! followed by whitespace; decimals are not split."""
    text = "Costs rose 2.5 times. Why? Demand grew!"
    sentences = split_sentences(text)
    assert [s.text for s in sentences] == ["Costs rose 2.5 times.", " Why?", " Demand grew!"]
    assert text[sentences[1].start:sentences[1].end] == " Why?"


def test_factor_lead_detection():
    """Ordinal and factor phrases at sentence start, case-insensitive, optionally after a quote."""
    assert is_factor_lead("First, costs matter.")
    assert is_factor_lead("  another reason is cost.")
    assert is_factor_lead('"Finally, we agree."')
    assert not is_factor_lead("At first we disagreed.")
    assert not is_factor_lead("Firstborn children differ.")


def test_factor_lock_drops_text_before_first_factor(essay_text):
    """Factor blocks run from each factor sentence to the next; the intro sentence is dropped."""
    result = segment_text(essay_text)
    assert result.mode == MODE_FACTOR
    assert len(result.unit_texts) == 3
    assert result.unit_texts[0].startswith("First, protected bike lanes")
    assert result.unit_texts[0].endswith("after one corridor opened.")
    assert result.unit_texts[1].startswith("Second, some residents")
    assert result.unit_texts[2] == (
        "Finally, the evidence may not transfer to every city, which means pilots should come first."
    )
    assert all("Cities face a choice" not in u for u in result.unit_texts)


def test_numbered_lines_lock():
    """Without factor leads, each numbered line becomes one unit."""
    text = (
        "1. Public transit reduces traffic congestion in dense city centers.\n"
        "2. It also lowers household transportation costs for commuters.\n"
        "3) Cleaner air follows when fewer private cars are on the road."
    )
    result = segment_text(text)
    assert result.mode == MODE_NUMBERED
    assert result.unit_texts == [
        "1. Public transit reduces traffic congestion in dense city centers.",
        "2. It also lowers household transportation costs for commuters.",
        "3) Cleaner air follows when fewer private cars are on the road.",
    ]


def test_paragraph_lock_with_short_unit_merged_into_previous():
    """Paragraph blocks; a unit shorter than 40 characters joins the previous unit."""
    text = (
        "Remote work widens the pool of candidates a company can hire from.\n\n"
        "Short note here.\n\n"
        "Teams still need deliberate rituals to keep collaboration strong over time."
    )
    result = segment_text(text)
    assert result.mode == MODE_PARAGRAPH
    assert len(result.unit_texts) == 2
    assert result.unit_texts[0].startswith("Remote work")
    assert result.unit_texts[0].endswith("Short note here.")
    assert result.unit_texts[1].startswith("Teams still need")


def test_short_first_unit_absorbs_next():
    """A short first unit has no previous neighbour, so it absorbs the next unit."""
    text = "Quick intro.\n\nThe main argument follows in this longer paragraph about budgets."
    result = segment_text(text)
    assert len(result.unit_texts) == 1
    assert result.unit_texts[0].startswith("Quick intro.")


def test_merge_leader_attaches_example_to_previous_unit():
    """A unit opening with 'For example' is merged into the unit before it."""
    text = (
        "Cities should invest in protected bike lanes on main roads.\n\n"
        "For example, Copenhagen saw cycling rates rise after building its network."
    )
    result = segment_text(text)
    assert len(result.unit_texts) == 1
    assert "Copenhagen" in result.unit_texts[0]


def test_open_parenthesis_carries_into_next_unit():
    """A unit left with an open bracket merges with the next unit containing a closer."""
    text = (
        "The survey results were mixed (see the appendix\n\n"
        "for the full breakdown) and need a careful reading before any decision."
    )
    assert parenthesis_balance("mixed (see [it") == 2
    result = segment_text(text)
    assert len(result.unit_texts) == 1
    assert "appendix" in result.unit_texts[0] and "breakdown)" in result.unit_texts[0]


def test_page_markers_are_stripped():
    """Lines like '- 2 -' never reach a unit."""
    text = "Line one of the essay is long enough to stand.\n- 2 -\nAnd the essay continues on the next page here."
    assert "- 2 -" not in strip_page_markers(text)
    result = segment_text(text)
    assert len(result.unit_texts) == 1
    assert "- 2 -" not in result.unit_texts[0]


def test_empty_and_blank_input():
    """No sentences -> no units."""
    assert segment_text("").unit_texts == []
    assert segment_text("   \n ").unit_texts == []
    assert segment_text(None).mode == MODE_EMPTY


def test_compute_unit_lengths_trims_edges():
    """Lengths are measured on edge-trimmed units."""
    assert compute_unit_lengths(["  abc  ", "de", ""]) == [3, 2, 0]
