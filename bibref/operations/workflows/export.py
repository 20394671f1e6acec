"""Export workflow: records in, formatted text out to a sink."""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from bibref.citations.mapper import CitationMapper
from bibref.citations.registry import StyleRegistry, TemplateCache
from bibref.config import Preferences
from bibref.core.models import BibliographicRecord, ExportFormat
from bibref.logs import LogService

from ..renderers import BibtexRenderer, ExportRenderer, PlainTextRenderer
from ..results import OperationResult, ResultStatus
from ..rewrite import PublicationRewriter
from ..sinks import MemorySink, Sink

logger = logging.getLogger(__name__)

RecordLike = BibliographicRecord | dict[str, Any]


@dataclass
class ExportWorkflowConfig:
    """Configuration for export workflow."""

    format: ExportFormat = ExportFormat.BIBTEX
    style: str | None = None
    dry_run: bool = False


class ExportWorkflow:
    """Orchestrates the export process.

    Steps: copy each record into a draft, rewrite publication names, map to
    citations, render in the requested format, deliver to the sink. Any
    failure is logged and suppressed; the sink then receives nothing.
    """

    ERROR_MESSAGE = "Failed to export paper entities."
    SOURCE = "ExportWorkflow"

    def __init__(
        self,
        preferences: Preferences | None = None,
        sink: Sink | None = None,
        log_service: LogService | None = None,
        registry: StyleRegistry | None = None,
        mapper: CitationMapper | None = None,
        cache: TemplateCache | None = None,
    ):
        self.preferences = preferences or Preferences()
        self.sink = sink if sink is not None else MemorySink()
        self.log_service = log_service or LogService()
        self.registry = registry or StyleRegistry(
            self.preferences, cache=cache, log_service=self.log_service
        )
        self.mapper = mapper or CitationMapper()
        self.rewriter = PublicationRewriter(self.preferences, self.log_service)
        self.renderer = ExportRenderer(
            BibtexRenderer(log_service=self.log_service),
            PlainTextRenderer(self.registry, log_service=self.log_service),
        )

    def execute(
        self,
        records: Iterable[RecordLike],
        format: ExportFormat | str | None = None,
        config: ExportWorkflowConfig | None = None,
    ) -> OperationResult:
        """Export records and write the result to the sink.

        Args:
            records: Records or record mappings, in output order
            format: Export format; defaults to ``config.format``
            config: Optional style and dry-run settings

        Returns:
            Result whose ``output`` is the delivered text. Failures yield an
            ERROR result and nothing is delivered.
        """
        config = config or ExportWorkflowConfig()

        try:
            export_format = ExportFormat.parse(format or config.format)
            output = self._render(records, export_format, config.style)
            if not config.dry_run:
                self.sink.write_text(output.text)
        except Exception as e:
            self.log_service.error(self.ERROR_MESSAGE, e, True, self.SOURCE)
            return OperationResult(
                status=ResultStatus.ERROR,
                message=self.ERROR_MESSAGE,
                errors=[str(e)],
            )

        count = output.count
        return OperationResult(
            status=ResultStatus.SUCCESS if count else ResultStatus.EMPTY,
            message=f"Exported {count} entries as {export_format.value}",
            data={
                "output": output.text,
                "count": count,
                "format": export_format.value,
            },
        )

    def export_string(
        self,
        records: Iterable[RecordLike],
        format: ExportFormat | str = ExportFormat.BIBTEX,
        style: str | None = None,
    ) -> str:
        """Render records without touching the sink; ``""`` on failure."""
        result = self.execute(
            records, format, ExportWorkflowConfig(style=style, dry_run=True)
        )
        return result.output

    def _render(
        self,
        records: Iterable[RecordLike],
        export_format: ExportFormat,
        style: str | None,
    ) -> _RenderedExport:
        drafts = [
            copy.deepcopy(BibliographicRecord.coerce(record)) for record in records
        ]
        drafts = [self.rewriter.rewrite(draft) for draft in drafts]
        citations = self.mapper.map_many(drafts)

        logger.debug(f"Rendering {len(citations)} citations as {export_format.value}")
        text = self.renderer.render(export_format, citations, style)
        return _RenderedExport(text=text, count=len(citations))


@dataclass
class _RenderedExport:
    text: str
    count: int
