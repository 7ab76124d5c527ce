"""Denylist guard against partisan-opinion requests."""

from typing import Iterable, Optional


# Order matters: the first phrase found wins.
BLOCKED_KEYWORDS: tuple[str, ...] = (
    "who should i vote for",
    "who to vote for",
    "best candidate",
    "worst candidate",
    "political opinion",
    "vote recommendation",
    "endorse",
    "support candidate",
    "political advice",
    "bias",
    "partisan",
    "corrupt",
    "illegal voting",
    "vote buying",
    "electoral fraud",
    "rigged election",
    "manipulation",
    "fake votes",
)

REFUSAL_MESSAGE = (
    "I can't provide political opinions or voting recommendations. "
    "I'm here to provide factual election information like dates, requirements, and processes."
)


class KeywordFilter:
    """Case-insensitive substring matcher over a fixed phrase list.

    Usage:
        keyword_filter = KeywordFilter()
        keyword_filter.check("Who should I vote for?")  # "who should i vote for"
        keyword_filter.check("When is polling day?")    # None
    """

    def __init__(self, keywords: Optional[Iterable[str]] = None):
        source = BLOCKED_KEYWORDS if keywords is None else keywords
        self._keywords = tuple(k.strip().lower() for k in source if k and k.strip())

    @property
    def keywords(self) -> tuple[str, ...]:
        return self._keywords

    def check(self, text: str) -> Optional[str]:
        """Return the first denylisted phrase contained in ``text``, or None."""
        if not text:
            return None

        lowered = text.lower()
        for keyword in self._keywords:
            if keyword in lowered:
                return keyword
        return None
