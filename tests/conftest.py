"""Pytest configuration and fixtures."""

import os
from unittest.mock import Mock

import pytest

from bibref.config import Preferences
from bibref.core.models import BibliographicRecord
from bibref.logs import LogService

MINIMAL_CSL = """<?xml version="1.0" encoding="utf-8"?>
<style xmlns="http://purl.org/net/xbiblio/csl" class="in-text" version="1.0" default-locale="en-US">
  <info>
    <title>{title}</title>
    <id>http://example.org/styles/{key}</id>
    <updated>2024-01-01T00:00:00+00:00</updated>
  </info>
  <citation>
    <layout>
      <text variable="title"/>
    </layout>
  </citation>
  <bibliography>
    <layout>
      <text variable="title"/>
    </layout>
  </bibliography>
</style>
"""

AUTHOR_DATE_CSL = """<?xml version="1.0" encoding="utf-8"?>
<style xmlns="http://purl.org/net/xbiblio/csl" class="in-text" version="1.0" default-locale="en-US">
  <info>
    <title>{title}</title>
    <id>http://example.org/styles/{key}</id>
    <updated>2024-01-01T00:00:00+00:00</updated>
  </info>
  <citation>
    <layout>
      <text variable="title"/>
    </layout>
  </citation>
  <bibliography>
    <layout suffix=".">
      <group delimiter=" ">
        <names variable="author">
          <name/>
        </names>
        <date variable="issued" prefix="(" suffix=")">
          <date-part name="year"/>
        </date>
        <text variable="title"/>
      </group>
    </layout>
  </bibliography>
</style>
"""


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """Isolate environment variables for each test.

    This prevents test pollution where one test's environment
    changes affect other tests.
    """
    original_env = os.environ.copy()

    monkeypatch.delenv("BIBREF_CSL_STYLE", raising=False)
    monkeypatch.delenv("BIBREF_CSL_STYLES_PATH", raising=False)

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def log_service():
    """Mock logging collaborator."""
    return Mock(spec=LogService)


@pytest.fixture
def preferences():
    """Fresh preferences with defaults only."""
    return Preferences()


@pytest.fixture
def write_csl():
    """Write a minimal CSL style file whose bibliography prints titles."""

    def _write(directory, key, title="Minimal Test Style", template=MINIMAL_CSL):
        path = directory / f"{key}.csl"
        path.write_text(template.format(key=key, title=title), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def csl_dir(tmp_path, write_csl):
    """Directory holding the custom styles ``minimal`` and ``author-date``."""
    directory = tmp_path / "styles"
    directory.mkdir()
    write_csl(directory, "minimal", "Minimal Test Style")
    write_csl(directory, "author-date", "Author Date Test Style", AUTHOR_DATE_CSL)
    return directory


@pytest.fixture
def sample_records():
    """Provide diverse sample records for testing."""
    return {
        "conference_paper": BibliographicRecord(
            id="rec-1",
            authors="Jiawei Ren, Cunjun Yu, Shunan Sheng",
            title="Balanced Meta-Softmax for Long-Tailed Visual Recognition",
            publication="NeurIPS",
            publisher="Curran Associates",
            pub_time=2020,
            pages="4175-4186",
            volume="33",
            pub_type=1,
            codes=(),
        ),
        "journal_article": BibliographicRecord(
            id="rec-2",
            authors="Jane Doe; John A. Smith",
            title="The Structure of Scientific Revolutions & Beyond",
            publication="Nature",
            pub_time="2021",
            pages="1-10",
            volume="12",
            number="3",
            doi="10.1038/s41567-021-0001",
            pub_type=0,
            codes=(),
        ),
        "math_title": BibliographicRecord(
            id="rec-3",
            authors="Donald E. Knuth",
            title="A $O(n \\log n)$ Algorithm",
            publication="Journal of Algorithms #5",
            pub_time=1997,
            pub_type=0,
            codes=(),
        ),
        "book": BibliographicRecord(
            id="rec-4",
            authors="Thomas S. Kuhn",
            title="The Structure of Scientific Revolutions",
            publisher="University of Chicago Press",
            pub_time=1962,
            pub_type=3,
            codes=(),
        ),
        "no_author": BibliographicRecord(
            id="rec-5",
            title="Anonymous Report on Climate Change",
            pub_time=2024,
        ),
    }
