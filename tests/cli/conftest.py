"""Pytest configuration and fixtures for CLI tests."""

import json

import pytest
from click.testing import CliRunner


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep user and working-directory config files out of CLI runs."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def cli_runner():
    """Click CLI test runner with custom invoke method."""

    class BibrefCliRunner(CliRunner):
        def invoke(self, args, **kwargs):  # type: ignore
            """Invoke the bibref group when given an argument list."""
            from bibref.cli.main import cli

            if isinstance(args, list):
                return super().invoke(cli, args, **kwargs)
            return super().invoke(args, **kwargs)

    return BibrefCliRunner()


@pytest.fixture
def records_file(tmp_path):
    """JSON file with a conference paper and a journal article."""
    path = tmp_path / "records.json"
    path.write_text(
        json.dumps(
            [
                {
                    "id": "rec-1",
                    "authors": "Jiawei Ren, Cunjun Yu, Shunan Sheng",
                    "title": "Balanced Meta-Softmax for Long-Tailed Visual Recognition",
                    "publication": "NeurIPS",
                    "year": 2020,
                    "pages": "4175-4186",
                    "pub_type": 1,
                },
                {
                    "id": "rec-2",
                    "authors": "Jane Doe; John A. Smith",
                    "title": "The Structure of Scientific Revolutions",
                    "publication": "Nature",
                    "year": "2021",
                    "pub_type": 0,
                },
            ]
        )
    )
    return path
