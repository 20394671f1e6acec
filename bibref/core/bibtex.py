"""BibTeX encoding of canonical citations.

This module turns CanonicalCitation objects into BibTeX entry text and
provides the pieces of the math-preserving escape protocol: inline math in
titles is swapped for placeholder tokens before encoding, LaTeX special
characters are escaped over the encoded text, and the math is put back
afterwards so it never passes through the escape step.

Key components:
- BibtexEncoder: Converts citations to BibTeX entries
- MathProtector: Stashes and restores ``$...$`` spans
- escape_latex: Escapes ``&``, ``%`` and ``#``
"""

import re
import uuid
from typing import TYPE_CHECKING

from .models import CitationType

if TYPE_CHECKING:
    from .models import CanonicalCitation
    from .names import ParsedName

LATEX_SPECIAL_CHARS = {
    "&": "\\&",
    "%": "\\%",
    "#": "\\#",
}

_LATEX_SPECIAL_PATTERN = re.compile(r"(?<!\\)[&%#]")


def escape_latex(text: str) -> str:
    """Escape LaTeX special characters.

    Characters that are already backslash-escaped are left alone.

    Args:
        text: Text to escape.

    Returns:
        Text with ``&``, ``%`` and ``#`` escaped.
    """
    if not text:
        return text
    return _LATEX_SPECIAL_PATTERN.sub(lambda m: LATEX_SPECIAL_CHARS[m.group(0)], text)


class MathProtector:
    """Replace inline math spans with placeholders and restore them later.

    Every span gets its own token built from a per-instance nonce and the
    span's position, so tokens never collide with each other, with BibTeX
    syntax or with text already present in the entry.
    """

    MATH_PATTERN = re.compile(r"\$(.*?)\$", re.DOTALL)

    def __init__(self, nonce: str | None = None):
        self.nonce = (nonce or uuid.uuid4().hex[:8]).upper()
        self.spans: list[str] = []
        self._token_pattern = re.compile(rf"MATHENV{self.nonce}N(\d+)X")

    def token(self, index: int) -> str:
        """Return the placeholder token for span ``index``."""
        return f"MATHENV{self.nonce}N{index}X"

    def protect(self, text: str) -> str:
        """Replace each ``$...$`` span in ``text`` with a placeholder."""
        if not text or "$" not in text:
            return text
        return self.MATH_PATTERN.sub(self._stash, text)

    def _stash(self, match: re.Match) -> str:
        self.spans.append(match.group(0))
        return self.token(len(self.spans) - 1)

    def restore(self, text: str) -> str:
        """Put the original spans back in place of their placeholders."""
        if not self.spans:
            return text

        def _replace(match: re.Match) -> str:
            index = int(match.group(1))
            if index < len(self.spans):
                return self.spans[index]
            return match.group(0)

        return self._token_pattern.sub(_replace, text)


class BibtexEncoder:
    """Encode canonical citations to BibTeX format.

    Field values are written verbatim inside braces; escaping of LaTeX
    special characters is left to the caller so it can run over the whole
    body at once.
    """

    ENTRY_TYPES = {
        CitationType.ARTICLE: "article",
        CitationType.CONFERENCE_PAPER: "inproceedings",
        CitationType.BOOK: "book",
    }

    CONTAINER_FIELDS = {
        "article": "journal",
        "inproceedings": "booktitle",
        "book": "series",
    }

    FIELD_ORDER = [
        "author",
        "title",
        "journal",
        "booktitle",
        "series",
        "volume",
        "number",
        "pages",
        "publisher",
        "year",
        "doi",
    ]

    def format_authors(self, authors: "tuple[ParsedName, ...]") -> str:
        """Join names as ``Family, Given and Family, Given``."""
        names = []
        for name in authors:
            if name.is_empty():
                continue
            if name.given:
                names.append(f"{name.family}, {name.given}")
            else:
                names.append(name.family)
        return " and ".join(names)

    def format_pages(self, pages: str) -> str:
        """Use the BibTeX double dash for page ranges."""
        if not pages:
            return pages
        return re.sub(r"\s*[-–—]+\s*", "--", pages)

    def encode_entry(self, citation: "CanonicalCitation") -> str:
        """Encode a single citation to BibTeX format.

        Args:
            citation: Citation to encode.

        Returns:
            BibTeX formatted string.
        """
        entry_type = self.ENTRY_TYPES.get(citation.type, "article")
        lines = [f"@{entry_type}{{{citation.citation_key},"]

        data = {
            "author": self.format_authors(citation.authors),
            "title": citation.title,
            self.CONTAINER_FIELDS[entry_type]: citation.container_title,
            "volume": citation.volume,
            "number": citation.issue,
            "pages": self.format_pages(citation.pages),
            "publisher": citation.publisher,
            "year": "" if citation.issued_year is None else str(citation.issued_year),
            "doi": citation.doi,
        }

        for field in self.FIELD_ORDER:
            value = data.get(field)
            if not value:
                continue
            lines.append(f"    {field} = {{{value}}},")

        if lines[-1].endswith(","):
            lines[-1] = lines[-1][:-1]

        lines.append("}")
        return "\n".join(lines)

    def encode(self, citations: "list[CanonicalCitation]") -> str:
        """Encode citations, separating entries with a blank line."""
        return "\n\n".join(self.encode_entry(citation) for citation in citations)
