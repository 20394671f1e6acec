"""Shared fixtures for citation tests."""

import pytest

from bibref.citations.mapper import CitationMapper


@pytest.fixture
def mapper():
    """Mapper with the default key generator."""
    return CitationMapper()


@pytest.fixture
def sample_citations(mapper, sample_records):
    """Canonical citations for every sample record, by name."""
    return {name: mapper.map_one(record) for name, record in sample_records.items()}
