"""Plain-text bibliography styles.

The three built-in styles (``apa``, ``vancouver``, ``harvard1``) are
rendered in process. Any other style is a CSL template loaded by the style
registry and rendered through citeproc-py.
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from citeproc import (
    Citation,
    CitationItem,
    CitationStylesBibliography,
    formatter,
)
from citeproc.source.json import CiteProcJSON

from bibref.core.models import CanonicalCitation, CitationType
from bibref.core.names import ParsedName

if TYPE_CHECKING:
    from citeproc import CitationStylesStyle


@dataclass
class StyleOptions:
    """Configuration options for built-in styles."""

    # Et al. rules
    et_al_min: int = 21
    et_al_use_first: int = 19

    # Names
    initial_period: bool = True
    initial_space: bool = True
    and_separator: str = "&"

    # Page formatting
    page_prefix: str = ""
    page_separator: str = "–"  # en-dash

    include_doi: bool = True

    def __post_init__(self):
        """Validate options."""
        if self.et_al_use_first > self.et_al_min:
            raise ValueError("et_al_use_first must be <= et_al_min")


class BibliographyStyle(Protocol):
    """Protocol for styles that render a list of citations."""

    def format_bibliography(self, citations: list[CanonicalCitation]) -> list[str]:
        """Render one line per citation."""
        ...


class AuthorFormatter:
    """Formats parsed author names according to style rules."""

    def __init__(self, period: bool = True, space: bool = True):
        """Initialize formatter.

        Args:
            period: Follow each initial with a period
            space: Separate initials with a space
        """
        self.period = period
        self.space = space

    def format(self, name: ParsedName, format: str = "last-first") -> str:
        """Format a single name.

        Args:
            name: Parsed name
            format: last-first, last-initials (no comma) or last-only

        Returns:
            Formatted author name
        """
        if not name.given:
            return name.family

        match format:
            case "last-first":
                return f"{name.family}, {self.initials(name.given)}"
            case "last-initials":
                return f"{name.family} {self.initials(name.given)}"
            case "last-only":
                return name.family
            case _:
                return f"{name.given} {name.family}"

    def format_multiple(
        self,
        names: list[ParsedName],
        format: str = "last-first",
        and_sep: str = "&",
        delimiter: str = ", ",
        et_al_min: int = 99,
        et_al_use_first: int = 1,
    ) -> str:
        """Format multiple authors."""
        names = [n for n in names if not n.is_empty()]
        if not names:
            return ""

        if len(names) >= et_al_min:
            shown = [self.format(n, format) for n in names[:et_al_use_first]]
            return f"{delimiter.join(shown)}{delimiter}et al."

        formatted = [self.format(n, format) for n in names]

        if len(formatted) == 1:
            return formatted[0]
        if not and_sep:
            return delimiter.join(formatted)
        if len(formatted) == 2:
            if delimiter == ", " and and_sep == "&":
                return f"{formatted[0]}, {and_sep} {formatted[1]}"
            return f"{formatted[0]} {and_sep} {formatted[1]}"
        return f"{delimiter.join(formatted[:-1])}{delimiter}{and_sep} {formatted[-1]}"

    def initials(self, given: str) -> str:
        """Get initials from a given name, keeping hyphens."""
        if _is_cjk(given):
            return given

        initials = []
        for part in given.split():
            pieces = [p for p in part.split("-") if p]
            if not pieces:
                continue
            suffix = "." if self.period else ""
            initials.append("-".join(p[0].upper() + suffix for p in pieces))

        separator = " " if self.space else ""
        return separator.join(initials)


def _is_cjk(text: str) -> bool:
    return any(
        unicodedata.name(c, "").startswith(("CJK", "HANGUL", "HIRAGANA", "KATAKANA"))
        for c in text
    )


class BaseStyle:
    """Base class for built-in styles."""

    key = ""
    name = ""

    def __init__(self, options: StyleOptions | None = None):
        """Initialize style with options."""
        self.options = options or self._get_default_options()
        self.author_formatter = AuthorFormatter(
            period=self.options.initial_period,
            space=self.options.initial_space,
        )

    def _get_default_options(self) -> StyleOptions:
        """Get default options for this style."""
        return StyleOptions()

    def format_entry(self, citation: CanonicalCitation, number: int | None = None) -> str:
        """Format a bibliography entry."""
        raise NotImplementedError

    def format_bibliography(self, citations: list[CanonicalCitation]) -> list[str]:
        """Format all citations in bibliography order."""
        return [self.format_entry(c) for c in self.sort_entries(citations)]

    def sort_entries(self, citations: list[CanonicalCitation]) -> list[CanonicalCitation]:
        """Sort citations by first author, year and title."""
        return sorted(citations, key=self._get_sort_key)

    def _get_sort_key(self, citation: CanonicalCitation) -> tuple:
        author = citation.authors[0].family.lower() if citation.authors else "zzz"
        return (author, str(citation.issued_year or 9999), citation.title.lower())

    def _format_year(self, citation: CanonicalCitation) -> str:
        if citation.issued_year is None or str(citation.issued_year).strip() == "":
            return "n.d."
        return str(citation.issued_year)

    def _format_pages(self, pages: str) -> str:
        """Format page range."""
        if not pages:
            return ""

        pages = re.sub(r"\s*[-–—]+\s*", self.options.page_separator, pages)
        if self.options.page_prefix:
            return f"{self.options.page_prefix} {pages}"
        return pages

    def _format_doi(self, doi: str) -> str:
        if not doi or not self.options.include_doi:
            return ""
        if not doi.startswith("http"):
            doi = f"https://doi.org/{doi}"
        return doi

    @staticmethod
    def _join(parts: list[str]) -> str:
        """Join parts with periods, avoiding doubled punctuation."""
        result = ""
        for i, part in enumerate(p for p in parts if p):
            if i > 0:
                if result.endswith((".", "?", "!")):
                    result += " "
                else:
                    result += ". "
            result += part

        if result and not result.endswith((".", "?", "!")):
            result += "."
        return result


class APAStyle(BaseStyle):
    """APA (American Psychological Association) style."""

    key = "apa"
    name = "American Psychological Association"

    def format_entry(self, citation: CanonicalCitation, number: int | None = None) -> str:
        """Format APA bibliography entry."""
        authors = self.author_formatter.format_multiple(
            list(citation.authors),
            format="last-first",
            and_sep="&",
            et_al_min=self.options.et_al_min,
            et_al_use_first=self.options.et_al_use_first,
        )

        year = f"({self._format_year(citation)})"
        if authors:
            parts = [f"{authors} {year}", citation.title]
        else:
            # Title takes the author position
            parts = [citation.title, year]

        match citation.type:
            case CitationType.ARTICLE:
                source = citation.container_title
                if citation.volume:
                    volume = citation.volume
                    if citation.issue:
                        volume += f"({citation.issue})"
                    source = f"{source}, {volume}" if source else volume
                elif citation.issue:
                    source = f"{source}, ({citation.issue})" if source else f"({citation.issue})"
                if citation.pages:
                    pages = self._format_pages(citation.pages)
                    source = f"{source}, {pages}" if source else pages
                parts.append(source)

            case CitationType.CONFERENCE_PAPER:
                if citation.container_title:
                    container = f"In {citation.container_title}"
                    if citation.pages:
                        container += f" (pp. {self._format_pages(citation.pages)})"
                    parts.append(container)
                parts.append(citation.publisher)

            case CitationType.BOOK:
                parts.append(citation.publisher)

        parts.append(self._format_doi(citation.doi))
        result = self._join(parts)
        # DOI URLs end the entry without a trailing period
        if citation.doi and self.options.include_doi:
            result = result.removesuffix(".")
        return result


class VancouverStyle(BaseStyle):
    """Vancouver (numbered, ICMJE) style."""

    key = "vancouver"
    name = "Vancouver"

    def _get_default_options(self) -> StyleOptions:
        return StyleOptions(
            et_al_min=7,
            et_al_use_first=6,
            initial_period=False,
            initial_space=False,
            and_separator="",
            page_separator="-",
        )

    def format_bibliography(self, citations: list[CanonicalCitation]) -> list[str]:
        """Number entries in citation order."""
        return [self.format_entry(c, i) for i, c in enumerate(citations, 1)]

    def format_entry(self, citation: CanonicalCitation, number: int | None = None) -> str:
        """Format Vancouver bibliography entry."""
        authors = self.author_formatter.format_multiple(
            list(citation.authors),
            format="last-initials",
            and_sep="",
            et_al_min=self.options.et_al_min,
            et_al_use_first=self.options.et_al_use_first,
        )

        parts = [authors, citation.title]

        year = "" if citation.issued_year is None else str(citation.issued_year)
        match citation.type:
            case CitationType.ARTICLE:
                parts.append(citation.container_title)
                detail = year
                if citation.volume:
                    detail += f";{citation.volume}"
                if citation.issue:
                    detail += f"({citation.issue})"
                if citation.pages:
                    detail += f":{self._format_pages(citation.pages)}"
                parts.append(detail)

            case CitationType.CONFERENCE_PAPER:
                if citation.container_title:
                    parts.append(f"In: {citation.container_title}")
                publisher = citation.publisher
                if year:
                    publisher = f"{publisher}; {year}" if publisher else year
                parts.append(publisher)
                if citation.pages:
                    parts.append(f"p. {self._format_pages(citation.pages)}")

            case CitationType.BOOK:
                publisher = citation.publisher
                if year:
                    publisher = f"{publisher}; {year}" if publisher else year
                parts.append(publisher)

        result = self._join(parts)
        if citation.doi and self.options.include_doi:
            result += f" doi:{citation.doi}"

        if number is not None:
            return f"{number}. {result}"
        return result


class HarvardStyle(BaseStyle):
    """Harvard author-date style."""

    key = "harvard1"
    name = "Harvard1"

    def _get_default_options(self) -> StyleOptions:
        return StyleOptions(
            initial_space=False,
            and_separator="and",
            page_prefix="pp.",
        )

    def format_entry(self, citation: CanonicalCitation, number: int | None = None) -> str:
        """Format Harvard bibliography entry."""
        authors = self.author_formatter.format_multiple(
            list(citation.authors),
            format="last-first",
            and_sep="and",
            et_al_min=self.options.et_al_min,
            et_al_use_first=self.options.et_al_use_first,
        )
        year = f"({self._format_year(citation)})"
        head = f"{authors} {year}" if authors else year

        if citation.type == CitationType.BOOK:
            segments = [f"{head} {citation.title}" if citation.title else head]
            if citation.publisher:
                segments.append(citation.publisher)
            return ", ".join(segments) + "."

        segments = [f"{head} ‘{citation.title}’" if citation.title else head]
        if citation.container_title:
            prefix = "in " if citation.type == CitationType.CONFERENCE_PAPER else ""
            segments.append(f"{prefix}{citation.container_title}")
        if citation.volume:
            volume = citation.volume
            if citation.issue:
                volume += f"({citation.issue})"
            segments.append(volume)
        if citation.pages:
            segments.append(self._format_pages(citation.pages))

        result = ", ".join(segments) + "."
        if citation.doi and self.options.include_doi:
            result += f" doi: {citation.doi}."
        return result


BUILTIN_STYLES: dict[str, type[BaseStyle]] = {
    "apa": APAStyle,
    "vancouver": VancouverStyle,
    "harvard1": HarvardStyle,
}


class CSLTemplateStyle:
    """Renders citations through a compiled CSL template with citeproc-py."""

    def __init__(self, style: CitationStylesStyle):
        self.style = style

    def format_bibliography(self, citations: list[CanonicalCitation]) -> list[str]:
        """Render one plain-text line per citation, in citation order.

        Items are keyed by position so that records sharing an id, or ids
        differing only in case, still render as separate entries.
        """
        items = []
        for index, citation in enumerate(citations):
            item = citation.to_csl()
            item.pop("citation-key", None)
            item["id"] = f"item-{index}"
            items.append(item)

        source = CiteProcJSON(items)
        bibliography = CitationStylesBibliography(self.style, source, formatter.plain)
        for item in items:
            bibliography.register(Citation([CitationItem(item["id"])]))

        return [str(entry) for entry in bibliography.bibliography()]


class BibliographyFormatter:
    """Formatting delegate for plain-text bibliographies.

    Dispatches on the resolved style: built-in keys are rendered in
    process, CSL templates through citeproc-py.
    """

    def __init__(self):
        self._builtins: dict[str, BaseStyle] = {}

    def get_builtin(self, key: str) -> BaseStyle:
        """Get a built-in style instance by key."""
        if key not in BUILTIN_STYLES:
            raise ValueError(f"Unknown built-in style: {key}")
        if key not in self._builtins:
            self._builtins[key] = BUILTIN_STYLES[key]()
        return self._builtins[key]

    def format(
        self,
        citations: list[CanonicalCitation],
        template: str | CitationStylesStyle,
    ) -> str:
        """Format citations with a built-in key or a compiled CSL template."""
        if not citations:
            return ""

        if isinstance(template, str):
            style: BibliographyStyle = self.get_builtin(template)
        else:
            style = CSLTemplateStyle(template)

        return "\n".join(style.format_bibliography(list(citations)))
