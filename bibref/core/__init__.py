"""Core data models, name parsing and BibTeX encoding."""

# BibTeX encoding
from bibref.core.bibtex import (
    BibtexEncoder,
    MathProtector,
    escape_latex,
)

# Models
from bibref.core.models import (
    BibliographicRecord,
    CanonicalCitation,
    CitationType,
    ExportFormat,
    load_records,
)

# Name parsing
from bibref.core.names import (
    NameParser,
    ParsedName,
    parse_authors,
)

__all__ = [
    # BibTeX processing
    "BibtexEncoder",
    "MathProtector",
    "escape_latex",
    # Models
    "BibliographicRecord",
    "CanonicalCitation",
    "CitationType",
    "ExportFormat",
    "load_records",
    # Name parsing
    "NameParser",
    "ParsedName",
    "parse_authors",
]
