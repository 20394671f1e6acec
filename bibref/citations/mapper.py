"""Conversion of bibliographic records into canonical citations."""

from __future__ import annotations

from collections.abc import Iterable

from bibref.citations.keys import CitationKeyGenerator
from bibref.core.models import BibliographicRecord, CanonicalCitation, CitationType
from bibref.core.names import NameParser


class CitationMapper:
    """Maps records to CanonicalCitation objects.

    Pure conversion: no I/O and no failure path for degenerate content.
    """

    def __init__(self, key_generator: CitationKeyGenerator | None = None):
        self.key_generator = key_generator or CitationKeyGenerator()

    def map(
        self, source: BibliographicRecord | Iterable[BibliographicRecord]
    ) -> CanonicalCitation | list[CanonicalCitation]:
        """Map one record or a sequence of records, keeping the shape."""
        if isinstance(source, BibliographicRecord):
            return self.map_one(source)
        return self.map_many(source)

    def map_many(
        self, records: Iterable[BibliographicRecord]
    ) -> list[CanonicalCitation]:
        """Map records in order."""
        return [self.map_one(record) for record in records]

    def map_one(self, record: BibliographicRecord) -> CanonicalCitation:
        """Map a single record."""
        authors = NameParser.parse(record.authors)
        key = self.key_generator.generate(authors, record.pub_time, record.title)

        return CanonicalCitation(
            id=str(record.id),
            type=CitationType.from_code(record.pub_type),
            citation_key=key,
            title=record.title,
            authors=tuple(authors),
            issued_year=record.pub_time,
            container_title=record.publication,
            publisher=record.publisher,
            pages=record.pages,
            volume=record.volume,
            issue=record.number,
            doi=record.doi,
        )
