"""High-level workflows."""

from .export import ExportWorkflow, ExportWorkflowConfig

__all__ = ["ExportWorkflow", "ExportWorkflowConfig"]
