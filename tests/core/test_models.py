"""Tests for records, canonical citations and export formats."""

import json

import msgspec
import pytest

from bibref.core.models import (
    BibliographicRecord,
    CanonicalCitation,
    CitationType,
    ExportFormat,
    load_records,
)
from bibref.core.names import ParsedName
from bibref.exceptions import RecordFormatError, UnsupportedFormatError


class TestCitationType:
    """Test mapping of numeric publication type codes."""

    @pytest.mark.parametrize(
        "code,expected",
        [
            (0, CitationType.ARTICLE),
            (1, CitationType.CONFERENCE_PAPER),
            (2, CitationType.ARTICLE),
            (3, CitationType.BOOK),
        ],
    )
    def test_known_codes(self, code, expected):
        """Test the fixed code table."""
        assert CitationType.from_code(code) is expected

    @pytest.mark.parametrize("code", [4, -1, 99, None])
    def test_unknown_codes_default_to_article(self, code):
        """Test that unrecognized codes fall back to the first type."""
        assert CitationType.from_code(code) is CitationType.ARTICLE


class TestExportFormat:
    """Test export format parsing."""

    def test_parse_values(self):
        """Test parsing by value."""
        assert ExportFormat.parse("BibTex") is ExportFormat.BIBTEX
        assert ExportFormat.parse("BibTex-Key") is ExportFormat.BIBTEX_KEY
        assert ExportFormat.parse("PlainText") is ExportFormat.PLAIN_TEXT

    def test_parse_is_case_insensitive_and_accepts_names(self):
        """Test parsing by member name in any case."""
        assert ExportFormat.parse("bibtex_key") is ExportFormat.BIBTEX_KEY
        assert ExportFormat.parse("plaintext") is ExportFormat.PLAIN_TEXT

    def test_parse_member_passthrough(self):
        """Test that members are returned as-is."""
        assert ExportFormat.parse(ExportFormat.BIBTEX) is ExportFormat.BIBTEX

    def test_parse_unknown(self):
        """Test that unknown formats raise."""
        with pytest.raises(UnsupportedFormatError, match="Unsupported format: RIS"):
            ExportFormat.parse("RIS")


class TestBibliographicRecord:
    """Test record construction and normalisation."""

    def test_records_are_immutable(self):
        """Test that records are frozen."""
        record = BibliographicRecord(id="1", title="Title")

        with pytest.raises(AttributeError):
            record.title = "Other"

    def test_from_dict_aliases(self):
        """Test that ``year`` and ``_id`` are accepted."""
        record = BibliographicRecord.from_dict(
            {"_id": 42, "title": "T", "year": 2020, "volume": 3, "unknown": "x"}
        )

        assert record.id == "42"
        assert record.pub_time == 2020
        assert record.volume == "3"

    def test_from_dict_codes_become_tuple(self):
        """Test that list fields are stored as tuples."""
        record = BibliographicRecord.from_dict({"codes": ["a", "b"]})

        assert record.codes == ("a", "b")

    def test_from_dict_rejects_bad_types(self):
        """Test that unusable field types raise RecordFormatError."""
        with pytest.raises(RecordFormatError):
            BibliographicRecord.from_dict({"pub_type": "conference"})

        with pytest.raises(RecordFormatError, match="expected a mapping"):
            BibliographicRecord.from_dict(["not", "a", "mapping"])

    def test_coerce(self):
        """Test coercion of records and mappings."""
        record = BibliographicRecord(id="1")

        assert BibliographicRecord.coerce(record) is record
        assert BibliographicRecord.coerce({"id": "2"}).id == "2"

    def test_to_dict_excludes_none(self):
        """Test dictionary conversion."""
        data = BibliographicRecord(id="1", title="T").to_dict()

        assert data["title"] == "T"
        assert "pub_time" not in data
        assert "codes" not in data


class TestCanonicalCitation:
    """Test CSL-JSON conversion."""

    def test_to_csl(self):
        """Test a fully populated citation."""
        citation = CanonicalCitation(
            id="1",
            type=CitationType.CONFERENCE_PAPER,
            citation_key="ren2020balanced",
            title="Balanced Meta-Softmax",
            authors=(ParsedName("Jiawei", "Ren"),),
            issued_year=2020,
            container_title="NeurIPS",
            pages="1-2",
            doi="10.1/x",
        )

        csl = citation.to_csl()

        assert csl["type"] == "paper-conference"
        assert csl["citation-key"] == "ren2020balanced"
        assert csl["author"] == [{"given": "Jiawei", "family": "Ren"}]
        assert csl["issued"] == {"date-parts": [[2020]]}
        assert csl["container-title"] == "NeurIPS"
        assert csl["page"] == "1-2"
        assert csl["DOI"] == "10.1/x"
        assert "volume" not in csl
        assert "publisher" not in csl

    def test_string_year(self):
        """Test that numeric string years become integers."""
        assert CanonicalCitation(id="1", issued_year="2021").to_csl()["issued"] == {
            "date-parts": [[2021]]
        }
        assert "issued" not in CanonicalCitation(id="1", issued_year="n.d.").to_csl()

    def test_empty_id_kept(self):
        """Test that the id survives even when empty."""
        assert CanonicalCitation(id="").to_csl() == {"id": "", "type": "article"}


class TestLoadRecords:
    """Test loading records from files."""

    def test_load_json(self, tmp_path):
        """Test loading a JSON list."""
        path = tmp_path / "records.json"
        path.write_text(json.dumps([{"id": "1", "title": "A"}, {"id": "2"}]))

        records = load_records(path)

        assert [r.id for r in records] == ["1", "2"]
        assert records[0].title == "A"

    def test_load_yaml(self, tmp_path):
        """Test loading a YAML list."""
        path = tmp_path / "records.yaml"
        path.write_text("- id: '1'\n  authors: Jane Doe\n  year: 2020\n")

        (record,) = load_records(path)

        assert record.authors == "Jane Doe"
        assert record.pub_time == 2020

    def test_single_mapping(self, tmp_path):
        """Test that a single mapping is treated as one record."""
        path = tmp_path / "record.json"
        path.write_bytes(msgspec.json.encode({"id": "solo"}))

        assert [r.id for r in load_records(path)] == ["solo"]

    def test_invalid_file(self, tmp_path):
        """Test that malformed files raise RecordFormatError."""
        path = tmp_path / "broken.json"
        path.write_text("{not json")

        with pytest.raises(RecordFormatError):
            load_records(path)

        path.write_text('"just a string"')
        with pytest.raises(RecordFormatError, match="list of records"):
            load_records(path)
