"""Output renderers over canonical citations.

Three strategies exist, selected by ExportFormat:

- BibTeX body: full entries, with inline math protected from escaping
- BibTeX keys: comma-separated citation keys
- Plain text: a bibliography in the selected style

The ``encode_*``/``format`` methods raise on failure so internal callers see
errors; the ``render_*`` methods are boundary entry points that log and
return an empty string instead.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence

import msgspec.structs

from bibref.citations.registry import StyleRegistry
from bibref.citations.styles import BibliographyFormatter
from bibref.core.bibtex import BibtexEncoder, MathProtector, escape_latex
from bibref.core.models import CanonicalCitation, ExportFormat
from bibref.logs import LogService, catch_and_log

from .results import OperationResult, ResultStatus

logger = logging.getLogger(__name__)


class BibtexRenderer:
    """Renders BibTeX bodies and key lists."""

    def __init__(
        self,
        encoder: BibtexEncoder | None = None,
        log_service: LogService | None = None,
    ):
        self.encoder = encoder or BibtexEncoder()
        self.log_service = log_service or LogService()

    def encode_keys(self, citations: Sequence[CanonicalCitation]) -> str:
        """Join citation keys with ``", "``, unescaped."""
        return ", ".join(citation.citation_key for citation in citations)

    def encode_body(self, citations: Sequence[CanonicalCitation]) -> str:
        """Encode citations as BibTeX with LaTeX special characters escaped.

        Math spans in titles are replaced by placeholders before encoding and
        restored after the escape pass, so they come out byte-for-byte
        unchanged.
        """
        protector = MathProtector()
        drafts = [
            msgspec.structs.replace(citation, title=protector.protect(citation.title))
            for citation in citations
        ]

        body = escape_latex(self.encoder.encode(drafts))
        return protector.restore(body)

    @catch_and_log("Failed to convert cite object to BibTex Key.", "BibtexRenderer", "")
    def render_keys(self, citations: Sequence[CanonicalCitation]) -> str:
        """Render citation keys, returning ``""`` on failure."""
        return self.encode_keys(citations)

    @catch_and_log("Failed to convert cite object to BibTex string.", "BibtexRenderer", "")
    def render_body(self, citations: Sequence[CanonicalCitation]) -> str:
        """Render a BibTeX body, returning ``""`` on failure."""
        return self.encode_body(citations)


class PlainTextRenderer:
    """Renders plain-text bibliographies in built-in or CSL styles."""

    def __init__(
        self,
        registry: StyleRegistry,
        formatter: BibliographyFormatter | None = None,
        log_service: LogService | None = None,
    ):
        self.registry = registry
        self.formatter = formatter or BibliographyFormatter()
        self.log_service = log_service or registry.log_service

    def selected_style(self) -> str:
        """Style key chosen in preferences."""
        return self.registry.preferences.get("selected_csl_style") or "apa"

    def format(
        self,
        citations: Sequence[CanonicalCitation],
        style_key: str | None = None,
    ) -> str:
        """Format a bibliography.

        Args:
            citations: Citations to render
            style_key: Style to use; defaults to the selected style

        Returns:
            One entry per line.
        """
        resolution = self.registry.resolve(style_key or self.selected_style())
        if resolution.builtin:
            return self.formatter.format(list(citations), resolution.key)
        return self.formatter.format(list(citations), resolution.template.style)

    @catch_and_log("Failed to convert cite object to plain text.", "PlainTextRenderer", "")
    def render(
        self,
        citations: Sequence[CanonicalCitation],
        style_key: str | None = None,
    ) -> str:
        """Render a bibliography, returning ``""`` on failure."""
        return self.format(citations, style_key)


class ExportRenderer:
    """Dispatches an ExportFormat to its renderer."""

    def __init__(self, bibtex: BibtexRenderer, plain_text: PlainTextRenderer):
        self.bibtex = bibtex
        self.plain_text = plain_text

    def render(
        self,
        format: ExportFormat,
        citations: Sequence[CanonicalCitation],
        style_key: str | None = None,
    ) -> str:
        """Render citations in ``format``; errors propagate."""
        match format:
            case ExportFormat.BIBTEX:
                return self.bibtex.encode_body(citations)
            case ExportFormat.BIBTEX_KEY:
                return self.bibtex.encode_keys(citations)
            case ExportFormat.PLAIN_TEXT:
                return self.plain_text.format(citations, style_key)

    def try_render(
        self,
        format: ExportFormat,
        citations: Sequence[CanonicalCitation],
        style_key: str | None = None,
    ) -> OperationResult:
        """Render citations and wrap the outcome in an OperationResult."""
        start = time.monotonic()
        try:
            output = self.render(format, citations, style_key)
        except Exception as e:
            logger.debug(f"Rendering {format.value} failed: {e}")
            return OperationResult(
                status=ResultStatus.ERROR,
                message=f"Failed to render {format.value}",
                errors=[str(e)],
            )

        return OperationResult(
            status=ResultStatus.SUCCESS if citations else ResultStatus.EMPTY,
            message=f"Rendered {len(citations)} entries as {format.value}",
            data={"output": output, "count": len(citations), "format": format.value},
            duration_ms=int((time.monotonic() - start) * 1000),
        )
