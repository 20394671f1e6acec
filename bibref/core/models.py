"""Core data models for bibliographic records and citations.

This module defines the records handed to the engine by its caller and the
canonical, style-agnostic citation representation they are converted into
before rendering. The canonical form mirrors CSL-JSON so that it can be fed
to CSL processors unchanged.

Key components:
- BibliographicRecord: Immutable input record owned by the caller
- CanonicalCitation: CSL-JSON-like pivot representation, one per record
- ExportFormat: Closed set of output formats
"""

import enum
from pathlib import Path
from typing import Any

import msgspec
import yaml

from ..exceptions import RecordFormatError, UnsupportedFormatError
from .names import ParsedName


class CitationType(enum.Enum):
    """CSL item types produced by the mapper."""

    ARTICLE = "article"
    CONFERENCE_PAPER = "paper-conference"
    BOOK = "book"

    @classmethod
    def from_code(cls, code: int | None) -> "CitationType":
        """Map a numeric publication type code to a citation type.

        Codes 0 and 2 are articles, 1 is a conference paper and 3 a book.
        Unknown codes default to an article.
        """
        mapping = {
            0: cls.ARTICLE,
            1: cls.CONFERENCE_PAPER,
            2: cls.ARTICLE,
            3: cls.BOOK,
        }
        return mapping.get(code, cls.ARTICLE)


class ExportFormat(enum.Enum):
    """Supported export formats."""

    BIBTEX = "BibTex"
    BIBTEX_KEY = "BibTex-Key"
    PLAIN_TEXT = "PlainText"

    @classmethod
    def parse(cls, value: "str | ExportFormat") -> "ExportFormat":
        """Parse a format from its value or member name, ignoring case."""
        if isinstance(value, cls):
            return value

        normalized = str(value).strip().lower()
        for member in cls:
            if normalized in (member.value.lower(), member.name.lower()):
                return member
        raise UnsupportedFormatError(str(value))


class BibliographicRecord(msgspec.Struct, frozen=True, kw_only=True):
    """Immutable bibliographic record supplied by the caller.

    The engine never modifies a record; rewrites produce new instances.
    ``codes`` being set marks the object as a paper record.
    """

    id: str = ""
    authors: str = ""
    title: str = ""
    publication: str = ""
    publisher: str = ""
    pub_time: int | str | None = None
    pages: str = ""
    volume: str = ""
    number: str = ""
    doi: str = ""
    pub_type: int = 0
    codes: tuple[str, ...] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, excluding None values."""
        data = msgspec.to_builtins(self)
        return {k: v for k, v in data.items() if v is not None}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BibliographicRecord":
        """Create a record from a plain mapping.

        Unknown keys are ignored. ``year`` is accepted for ``pub_time`` and
        ``_id`` for ``id``.

        Args:
            data: Mapping with record fields.

        Returns:
            New record instance.

        Raises:
            RecordFormatError: If a field has an unusable type.
        """
        if not isinstance(data, dict):
            raise RecordFormatError(f"expected a mapping, got {type(data).__name__}")

        data = dict(data)
        if "year" in data and "pub_time" not in data:
            data["pub_time"] = data.pop("year")
        if "_id" in data and "id" not in data:
            data["id"] = data.pop("_id")
        if "id" in data and data["id"] is not None:
            data["id"] = str(data["id"])
        for field in ("pages", "volume", "number"):
            if isinstance(data.get(field), int):
                data[field] = str(data[field])
        if data.get("codes") is not None:
            data["codes"] = tuple(data["codes"])

        try:
            return msgspec.convert(data, type=cls)
        except msgspec.ValidationError as e:
            raise RecordFormatError(str(e)) from e

    @classmethod
    def coerce(cls, value: "BibliographicRecord | dict[str, Any]") -> "BibliographicRecord":
        """Return ``value`` as a record, converting mappings."""
        if isinstance(value, cls):
            return value
        return cls.from_dict(value)


class CanonicalCitation(msgspec.Struct, frozen=True, kw_only=True):
    """Canonical citation, the pivot between records and output formats."""

    id: str
    type: CitationType = CitationType.ARTICLE
    citation_key: str = ""
    title: str = ""
    authors: tuple[ParsedName, ...] = ()
    issued_year: int | str | None = None
    container_title: str = ""
    publisher: str = ""
    pages: str = ""
    volume: str = ""
    issue: str = ""
    doi: str = ""

    def to_csl(self) -> dict[str, Any]:
        """Convert to a CSL-JSON item, omitting empty fields."""
        data: dict[str, Any] = {
            "id": self.id,
            "type": self.type.value,
            "citation-key": self.citation_key,
            "title": self.title,
            "author": [name.to_csl() for name in self.authors],
            "container-title": self.container_title,
            "publisher": self.publisher,
            "page": self.pages,
            "volume": self.volume,
            "issue": self.issue,
            "DOI": self.doi,
        }
        year = issued_year_as_int(self.issued_year)
        if year is not None:
            data["issued"] = {"date-parts": [[year]]}

        return {k: v for k, v in data.items() if k == "id" or v not in ("", [], None)}


def issued_year_as_int(value: int | str | None) -> int | None:
    """Return the year as an integer when it is numeric."""
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def load_records(path: Path | str) -> list[BibliographicRecord]:
    """Load records from a JSON or YAML file holding a list of mappings.

    Args:
        path: File to read. ``.yaml``/``.yml`` files are read with PyYAML,
            everything else is decoded as JSON.

    Returns:
        Records in file order.

    Raises:
        RecordFormatError: If the file does not hold a list of records.
    """
    path = Path(path)
    raw = path.read_bytes()

    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(raw) or []
        else:
            data = msgspec.json.decode(raw)
    except (yaml.YAMLError, msgspec.DecodeError) as e:
        raise RecordFormatError(f"{path}: {e}") from e

    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        raise RecordFormatError(f"{path}: expected a list of records")

    return [BibliographicRecord.from_dict(item) for item in data]
