"""End-to-end tests for the phpscope CLI.

Runs every command against a small PHP project on disk.
"""

from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from phpscope.cli.main import app

runner = CliRunner()


def _clean_project(tmp_path: Path) -> Path:
    project_dir = tmp_path / "clean"
    project_dir.mkdir()
    (project_dir / "Shapes.php").write_text(
        """<?php
namespace Shapes;

interface Shape
{
    public function area();
}

class Square implements Shape
{
    public function area()
    {
        return 4;
    }
}
""",
        encoding="utf-8",
    )
    return project_dir


class TestCliHelp:
    """Test CLI help and basic commands."""

    def test_main_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "reflection" in result.output.lower()
        for command in ("parse", "show", "validate", "export"):
            assert command in result.output

    def test_missing_path_rejected(self, tmp_path):
        result = runner.invoke(app, ["parse", str(tmp_path / "missing")])
        assert result.exit_code != 0


class TestParseCommand:
    """Test the parse command."""

    def test_parse_project(self, sample_project):
        result = runner.invoke(app, ["parse", str(sample_project)])
        assert result.exit_code == 0
        assert "Processed Sources" in result.output
        assert "All files processed successfully" in result.output

    def test_parse_with_failures(self, sample_project):
        (sample_project / "Broken.php").write_text("<?php\nnamespace Broken\nclass Lost {}\n", encoding="utf-8")
        result = runner.invoke(app, ["parse", str(sample_project)])
        assert result.exit_code == 1
        assert "could not be processed" in result.output


class TestShowCommand:
    """Test the show command."""

    def test_show_class(self, sample_project):
        result = runner.invoke(app, ["show", "App\\Model\\User", str(sample_project)])
        assert result.exit_code == 0
        assert "touch" in result.output
        assert "count" in result.output

    def test_show_unknown_class(self, sample_project):
        result = runner.invoke(app, ["show", "App\\Nope", str(sample_project)])
        assert result.exit_code == 1
        assert "Class not found" in result.output

    def test_show_conflicting_class(self, tmp_path):
        (tmp_path / "a.php").write_text("<?php\nclass Dup {}\n", encoding="utf-8")
        (tmp_path / "b.php").write_text("<?php\nclass Dup {}\n", encoding="utf-8")
        result = runner.invoke(app, ["show", "Dup", str(tmp_path)])
        assert result.exit_code == 1
        assert "Class not found" in result.output
        assert "already" in result.output


class TestValidateCommand:
    """Test the validate command."""

    def test_validate_clean_project(self, tmp_path):
        result = runner.invoke(app, ["validate", str(_clean_project(tmp_path))])
        assert result.exit_code == 0
        assert "No problems found" in result.output

    def test_validate_reports_unresolved_interface(self, sample_project):
        result = runner.invoke(app, ["validate", str(sample_project)])
        assert result.exit_code == 1
        assert "Validation failed with 1 error(s)" in result.output


class TestExportCommand:
    """Test the export command."""

    def test_export_to_file(self, tmp_path):
        project_dir = _clean_project(tmp_path)
        output = tmp_path / "snapshot.json"
        result = runner.invoke(app, ["export", str(project_dir), "-o", str(output)])
        assert result.exit_code == 0
        assert "Exported to" in result.output

        data = json.loads(output.read_text(encoding="utf-8"))
        assert set(data["classes"]) == {"Shapes\\Shape", "Shapes\\Square"}
        assert data["classes"]["Shapes\\Square"]["interfaces"] == ["Shapes\\Shape"]
        assert data["conflicts"] == []
