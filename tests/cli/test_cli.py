"""Tests for the campaignflow CLI commands."""

import json

import pytest
from typer.testing import CliRunner

from campaignflow.cli.main import app
from campaignflow.constants import (
    ENV_FORM_CACHE_ENABLED,
    ENV_FORM_CACHE_SIZE,
    ENV_HELPER_FIELDS,
    ENV_LOG_LEVEL,
    ENV_SCHEMA_PATH,
    ENV_STANDARD_PATH,
)

runner = CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        ENV_SCHEMA_PATH,
        ENV_STANDARD_PATH,
        ENV_HELPER_FIELDS,
        ENV_FORM_CACHE_ENABLED,
        ENV_FORM_CACHE_SIZE,
        ENV_LOG_LEVEL,
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def invalid_document(valid_document):
    valid_document["measurement_location"][0]["latitude_ddeg"] = 95
    return valid_document


class TestValidateCommand:
    """Test suite for the validate CLI command."""

    def test_valid_document(self, document_file):
        result = runner.invoke(app, ["validate", str(document_file())])

        assert result.exit_code == 0
        assert "Document is valid" in result.output
        assert "basic_info" in result.output

    def test_invalid_document(self, document_file, invalid_document):
        result = runner.invoke(app, ["validate", str(document_file(invalid_document))])

        assert result.exit_code == 1
        assert "1 error(s)" in result.output

    def test_json_output(self, document_file, invalid_document):
        result = runner.invoke(app, ["validate", str(document_file(invalid_document)), "--json"])

        assert result.exit_code == 1
        report = json.loads(result.stdout)
        assert report["valid"] is False
        assert [issue["data_path"] for issue in report["issues"]] == [
            "measurement_location[0].latitude_ddeg"
        ]
        assert report["steps"]["measurement_location"]["status"] == "blocked"

    def test_single_step(self, document_file, invalid_document):
        path = str(document_file(invalid_document))

        result = runner.invoke(app, ["validate", path, "--step", "basic_info", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.stdout) == {
            "step": "basic_info",
            "status": "ready",
            "valid": True,
            "issues": [],
        }

    def test_unknown_step(self, document_file):
        result = runner.invoke(app, ["validate", str(document_file()), "-s", "nope"])

        assert result.exit_code == 1
        assert "Unknown step" in result.output

    def test_yaml_document(self, tmp_path):
        path = tmp_path / "campaign.yaml"
        path.write_text("author: Jane\n")

        result = runner.invoke(app, ["validate", str(path), "--json"])

        assert result.exit_code == 1
        report = json.loads(result.stdout)
        assert report["steps"]["basic_info"]["status"] == "incomplete"

    def test_missing_document(self, tmp_path):
        result = runner.invoke(app, ["validate", str(tmp_path / "missing.json")])

        assert result.exit_code == 1
        assert "Document not found" in result.output

    def test_undecodable_document(self, tmp_path):
        path = tmp_path / "latin1.json"
        path.write_bytes(b'{"author": "\xe9t\xe9"}')

        result = runner.invoke(app, ["validate", str(path)])

        assert result.exit_code == 1
        assert "Cannot decode document" in result.output

    def test_verbose(self, document_file):
        result = runner.invoke(app, ["--verbose", "validate", str(document_file())])

        assert result.exit_code == 0
        assert "Engine loaded" in result.output

    def test_broken_schema_option(self, document_file, tmp_path):
        schema = tmp_path / "schema.json"
        schema.write_text(json.dumps({"type": "object", "properties": {"author": {"type": "string"}}}))

        result = runner.invoke(app, ["--schema", str(schema), "validate", str(document_file())])

        assert result.exit_code == 1
        assert "Failed to load engine" in result.output


class TestExportCommand:
    """Test suite for the export CLI command."""

    def test_export_to_stdout_strips_helpers(self, document_file, valid_document):
        data = json.loads(json.dumps(valid_document))
        data["campaignStatus"] = "complete"
        data["measurement_location"][0]["measurement_point"][0]["unit"] = "m/s"

        result = runner.invoke(app, ["export", str(document_file(data))])

        assert result.exit_code == 0
        assert json.loads(result.stdout) == valid_document

    def test_export_to_file(self, document_file, valid_document, tmp_path):
        output = tmp_path / "out" / "export.json"

        result = runner.invoke(app, ["export", str(document_file()), "-o", str(output)])

        assert result.exit_code == 0
        assert "Ready for export" in result.output
        assert json.loads(output.read_text()) == valid_document

    def test_json_report(self, document_file):
        result = runner.invoke(app, ["export", str(document_file()), "--json"])

        assert result.exit_code == 0
        report = json.loads(result.stdout)
        assert report["can_export"] is True
        assert report["state"] == "ready"
        assert report["document"]["author"] == "Jane Doe"

    def test_blocked_export(self, document_file, valid_document, tmp_path):
        del valid_document["author"]
        output = tmp_path / "export.json"

        result = runner.invoke(app, ["export", str(document_file(valid_document)), "-o", str(output)])

        assert result.exit_code == 1
        assert "Export blocked by 1 issue(s)" in result.output
        assert "author" in result.output
        assert not output.exists()

    def test_blocked_export_json(self, document_file, invalid_document):
        result = runner.invoke(app, ["export", str(document_file(invalid_document)), "--json"])

        assert result.exit_code == 1
        report = json.loads(result.stdout)
        assert report["can_export"] is False
        assert report["state"] == "blocked"
        assert [issue["data_path"] for issue in report["blocking_issues"]] == [
            "measurement_location[0].latitude_ddeg"
        ]


class TestFormCommand:
    """Test suite for the form CLI command."""

    def test_form_json(self, document_file, reanalysis_document):
        result = runner.invoke(app, ["form", "station_config", str(document_file(reanalysis_document)), "--json"])

        assert result.exit_code == 0
        model = json.loads(result.stdout)
        paths = [field["data_path"] for field in model["fields"]]
        assert "measurement_location[0].model_config" in paths
        assert "measurement_location[0].mast_properties" not in paths

    def test_form_table(self, document_file):
        result = runner.invoke(app, ["form", "basic_info", str(document_file())])

        assert result.exit_code == 0
        assert "Step: basic_info" in result.output

    def test_unknown_step(self, document_file):
        result = runner.invoke(app, ["form", "nope", str(document_file())])

        assert result.exit_code == 1
        assert "Failed to build form" in result.output


class TestSchemaCommand:
    """Test suite for the schema CLI command."""

    def test_enum_values(self):
        result = runner.invoke(app, ["schema", "measurement_location[0].measurement_station_type_id", "--json"])

        assert result.exit_code == 0
        info = json.loads(result.stdout)
        assert info["path"] == "measurement_location.items.properties.measurement_station_type_id"
        assert info["kind"] == "enum"
        assert info["required"] is True
        assert "reanalysis" in info["enum"]

    def test_human_output(self):
        result = runner.invoke(app, ["schema", "author"])

        assert result.exit_code == 0
        assert "Required: yes" in result.output

    def test_unknown_path(self):
        result = runner.invoke(app, ["schema", "colour"])

        assert result.exit_code == 1
        assert "Schema lookup failed" in result.output


class TestStatsCommand:
    """Test suite for the stats CLI command."""

    def test_stats_json(self, document_file):
        result = runner.invoke(app, ["stats", str(document_file()), "--json"])

        assert result.exit_code == 0
        assert json.loads(result.stdout) == {
            "total_locations": 2,
            "total_measurement_points": 2,
            "station_types": {"mast": 1, "reanalysis": 1},
            "data_completeness": 100.0,
            "required_fields_complete": True,
        }

    def test_stats_table(self, document_file):
        result = runner.invoke(app, ["stats", str(document_file())])

        assert result.exit_code == 0
        assert "Campaign statistics" in result.output
