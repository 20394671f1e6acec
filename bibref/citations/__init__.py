"""Citation key derivation, record mapping and bibliography styles.

This module converts records into canonical citations and provides the
style machinery for plain-text bibliographies: three built-in styles
(APA, Vancouver, Harvard) and user-supplied CSL styles discovered on disk.
"""

from bibref.citations.keys import (
    CitationKeyGenerator,
    normalize_word,
)
from bibref.citations.mapper import CitationMapper
from bibref.citations.registry import (
    BUILTIN_DESCRIPTORS,
    StyleDescriptor,
    StyleRegistry,
    StyleResolution,
    StyleTemplate,
    TemplateCache,
    parse_style_file,
)
from bibref.citations.styles import (
    APAStyle,
    AuthorFormatter,
    BibliographyFormatter,
    CSLTemplateStyle,
    HarvardStyle,
    StyleOptions,
    VancouverStyle,
)

__all__ = [
    # Keys
    "CitationKeyGenerator",
    "normalize_word",
    # Mapping
    "CitationMapper",
    # Registry
    "BUILTIN_DESCRIPTORS",
    "StyleDescriptor",
    "StyleRegistry",
    "StyleResolution",
    "StyleTemplate",
    "TemplateCache",
    "parse_style_file",
    # Styles
    "APAStyle",
    "VancouverStyle",
    "HarvardStyle",
    "CSLTemplateStyle",
    "BibliographyFormatter",
    "AuthorFormatter",
    "StyleOptions",
]
