from __future__ import annotations

import pytest

from ingestion.classify import FINANCE_EXCLUDE, FINANCE_INCLUDE, is_financial_title, matched_keywords


def test_cpi_title_passes():
    assert is_financial_title("Will CPI come in hot next month?")


def test_exclusion_beats_inclusion():
    """A sports title is rejected even when it mentions a rate."""
    assert not is_financial_title("NBA Finals: will the underdog cover at this rate?")


@pytest.mark.parametrize(
    "title",
    [
        "Who wins the presidential election?",
        "Oscar for best picture goes to a drama",
        "Hurricane makes landfall in Florida",
        "Powerball lottery jackpot above $1B",
    ],
)
def test_excluded_topics(title):
    assert not is_financial_title(title)


def test_requires_an_inclusion_keyword():
    assert not is_financial_title("Will the new phone launch on time?")


def test_matching_is_case_insensitive():
    assert is_financial_title("BITCOIN CLOSES ABOVE ATH")
    assert not is_financial_title("nfl draft: first pick a QB?")


def test_empty_and_missing_titles():
    assert not is_financial_title("")
    assert not is_financial_title(None)


def test_matched_keywords_reports_both_lists():
    included, excluded = matched_keywords("Fed rate cut before the election")
    assert {"fed", "rate", "cut"} <= set(included)
    assert excluded == ["election"]


def test_keyword_lists_are_lowercase():
    for keyword in FINANCE_INCLUDE + FINANCE_EXCLUDE:
        assert keyword == keyword.lower()
