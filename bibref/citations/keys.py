"""Citation key derivation from author, year and title."""

from __future__ import annotations

import re
from collections.abc import Sequence

from bibref.core.names import ParsedName

_SYMBOL_PATTERN = re.compile(r"[\W_]+", re.UNICODE)


def normalize_word(word: str) -> str:
    """Lowercase a word and strip newlines, symbols and whitespace."""
    word = word.lower().replace("\r", "").replace("\n", "")
    return _SYMBOL_PATTERN.sub("", word)


class CitationKeyGenerator:
    """Generates deterministic keys such as ``ren2020balanced``.

    A key is the lowercased family name of the first author, the year as
    given, and one normalized title word: the first word that is not an
    article and is longer than ``min_title_chars`` characters. Keys are not
    escaped or validated.
    """

    STOPWORDS = {"the", "a", "an"}

    def __init__(self, min_title_chars: int = 3, legacy_predicate: bool = False):
        """Initialize key generator.

        Args:
            min_title_chars: Title words must be longer than this
            legacy_predicate: Use the disjunctive word test, which accepts
                every word and so always picks the first title word
        """
        self.min_title_chars = min_title_chars
        self.legacy_predicate = legacy_predicate

    def generate(
        self,
        authors: Sequence[ParsedName],
        year: int | str | None,
        title: str | None,
    ) -> str:
        """Generate citation key.

        Args:
            authors: Parsed author names in order
            year: Publication year, appended verbatim
            title: Entry title

        Returns:
            Generated citation key
        """
        key = ""
        if authors:
            key += authors[0].family.lower()

        if year is not None:
            key += str(year)

        key += self._extract_title(title)
        return key

    def is_significant(self, word: str) -> bool:
        """Check whether a title word may contribute to the key."""
        lowered = word.lower()
        if self.legacy_predicate:
            return (
                lowered != "the"
                or lowered != "a"
                or lowered != "an"
                or len(word) <= self.min_title_chars
            )
        return lowered not in self.STOPWORDS and len(word) > self.min_title_chars

    def _extract_title(self, title: str | None) -> str:
        """Return the normalized first significant title word."""
        if not title:
            return ""

        for word in title.split():
            if self.is_significant(word):
                return normalize_word(word)
        return ""
