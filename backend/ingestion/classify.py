"""Keyword heuristics restricting scraped titles to financial topics."""

from __future__ import annotations

FINANCE_INCLUDE: tuple[str, ...] = (
    # macro & econ
    "cpi", "inflation", "pce", "gdp", "unemployment", "payrolls", "nfp", "pmi", "ism",
    "retail sales", "core", "yoy", "mom",
    # rates / fixed income
    "fed", "fomc", "rate", "rates", "hike", "cut", "treasury", "bond", "yield", "bill",
    "note", "curve", "term premium",
    # equities
    "s&p", "spx", "nasdaq", "dow", "equity", "equities", "stocks", "earnings", "recession",
    # credit / banks / housing
    "credit", "cre", "commercial real estate", "bank", "lending", "mortgage", "housing",
    "builder",
    # commodities
    "oil", "wti", "brent", "gasoline", "gold", "silver", "copper",
    # fx / crypto
    "fx", "eurusd", "usdjpy", "gbpusd", "dxy", "bitcoin", "btc", "ethereum", "eth", "crypto",
    # volatility
    "vix", "volatility",
)

FINANCE_EXCLUDE: tuple[str, ...] = (
    # politics & elections
    "election", "president", "primary", "congress", "senate", "house", "governor",
    "parliament", "minister", "debate",
    # sports & entertainment
    "nfl", "nba", "mlb", "nhl", "soccer", "fifa", "olympic", "oscar", "grammy", "emmy",
    # weather & misc
    "weather", "hurricane", "storm", "earthquake", "lottery",
)


def matched_keywords(title: str | None) -> tuple[list[str], list[str]]:
    """Return the (included, excluded) keywords found in ``title``."""

    lowered = (title or "").lower()
    included = [keyword for keyword in FINANCE_INCLUDE if keyword in lowered]
    excluded = [keyword for keyword in FINANCE_EXCLUDE if keyword in lowered]
    return included, excluded


def is_financial_title(title: str | None) -> bool:
    lowered = (title or "").lower()
    if any(keyword in lowered for keyword in FINANCE_EXCLUDE):
        return False
    return any(keyword in lowered for keyword in FINANCE_INCLUDE)
