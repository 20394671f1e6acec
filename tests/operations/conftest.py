"""Shared fixtures for operations tests."""

import pytest

from bibref.citations.mapper import CitationMapper
from bibref.citations.registry import StyleRegistry
from bibref.operations.renderers import BibtexRenderer, ExportRenderer, PlainTextRenderer
from bibref.operations.sinks import MemorySink
from bibref.operations.workflows import ExportWorkflow


@pytest.fixture
def sink():
    """In-memory clipboard stand-in."""
    return MemorySink()


@pytest.fixture
def registry(preferences, csl_dir, log_service):
    """Registry that can see the ``minimal`` custom style."""
    preferences.set("imported_csl_styles_path", str(csl_dir))
    return StyleRegistry(preferences, log_service=log_service)


@pytest.fixture
def workflow(preferences, sink, log_service, registry):
    """Export workflow writing to a MemorySink."""
    return ExportWorkflow(
        preferences=preferences,
        sink=sink,
        log_service=log_service,
        registry=registry,
    )


@pytest.fixture
def bibtex_renderer(log_service):
    """BibTeX renderer with a mock log service."""
    return BibtexRenderer(log_service=log_service)


@pytest.fixture
def export_renderer(bibtex_renderer, registry, log_service):
    """Renderer dispatching on ExportFormat."""
    return ExportRenderer(
        bibtex_renderer, PlainTextRenderer(registry, log_service=log_service)
    )


@pytest.fixture
def mapper():
    """Mapper with the default key generator."""
    return CitationMapper()


@pytest.fixture
def citations(mapper, sample_records):
    """Canonical citations for all sample records, in insertion order."""
    return mapper.map_many(sample_records.values())
