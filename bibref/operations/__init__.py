"""Export operations: rewriting, rendering and delivery."""

from bibref.operations.renderers import (
    BibtexRenderer,
    ExportRenderer,
    PlainTextRenderer,
)
from bibref.operations.results import OperationResult, ResultStatus
from bibref.operations.rewrite import PublicationRewriter
from bibref.operations.sinks import EchoSink, MemorySink, Sink
from bibref.operations.workflows import ExportWorkflow, ExportWorkflowConfig

__all__ = [
    # Renderers
    "BibtexRenderer",
    "ExportRenderer",
    "PlainTextRenderer",
    # Results
    "OperationResult",
    "ResultStatus",
    # Rewriting
    "PublicationRewriter",
    # Sinks
    "Sink",
    "MemorySink",
    "EchoSink",
    # Workflows
    "ExportWorkflow",
    "ExportWorkflowConfig",
]
