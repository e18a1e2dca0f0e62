"""Tests for the wiring-analyst CLI commands."""

import json
from unittest.mock import patch

import pytest
import yaml
from openpyxl import load_workbook
from typer.testing import CliRunner

from src.cli.main import app
from src.services.assistant_client import TextPart
from tests.helpers import FakeAssistantService

runner = CliRunner()


@pytest.fixture
def config_file(clean_env):
    """Config file with both assistants and instant polling."""
    path = clean_env / "wiring-analyst.yaml"
    path.write_text(yaml.safe_dump({
        "openai": {
            "api_key": "sk-cli-test-98765",
            "analyze_assistant_id": "asst_analyze",
            "chat_assistant_id": "asst_chat",
        },
        "runs": {"poll_interval_seconds": 0, "max_poll_attempts": 3},
    }))
    return path


class TestBasics:

    def test_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "Wiring Analyst" in result.output

    def test_help_lists_commands(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("serve", "analyze", "chat", "export", "config"):
            assert command in result.output

    def test_missing_config_file(self, clean_env):
        result = runner.invoke(app, ["--config", str(clean_env / "none.yaml"), "config", "show"])
        assert result.exit_code == 1
        assert "Config file not found" in result.output

    def test_config_show_masks_key(self, config_file):
        result = runner.invoke(app, ["--config", str(config_file), "config", "show"])
        assert result.exit_code == 0
        assert "****8765" in result.output
        assert "sk-cli-test-98765" not in result.output
        assert "asst_analyze" in result.output


class TestExport:

    def test_writes_workbook(self, clean_env, sample_table):
        table_file = clean_env / "table.json"
        table_file.write_text(json.dumps(sample_table))
        output = clean_env / "out.xlsx"

        result = runner.invoke(app, ["export", str(table_file), "-o", str(output)])

        assert result.exit_code == 0, result.output
        assert "2 row(s)" in result.output
        assert load_workbook(output).active.max_row == 3

    def test_default_output_name(self, clean_env, sample_table):
        table_file = clean_env / "plant.json"
        table_file.write_text(json.dumps(sample_table))

        result = runner.invoke(app, ["export", str(table_file)])

        assert result.exit_code == 0, result.output
        assert (clean_env / "terminal_assignment_plant.xlsx").exists()

    def test_rejects_non_table(self, clean_env):
        table_file = clean_env / "x.json"
        table_file.write_text(json.dumps({"rows": []}))
        result = runner.invoke(app, ["export", str(table_file)])
        assert result.exit_code == 1

    def test_rejects_invalid_json(self, clean_env):
        table_file = clean_env / "x.json"
        table_file.write_text("{not json")
        result = runner.invoke(app, ["export", str(table_file)])
        assert result.exit_code == 1
        assert "Cannot read table" in result.output


class TestConversationCommands:

    def test_chat_json_output(self, config_file):
        service = FakeAssistantService(reply_parts=[TextPart("Use terminal B2.")])
        with patch("src.cli.main.OpenAIAssistantService", return_value=service):
            result = runner.invoke(
                app,
                ["--config", str(config_file), "chat", "Where is S2?", "-t", "thread_9", "--json"],
            )

        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == {"threadId": "thread_9", "reply": "Use terminal B2."}
        assert service.count("close") == 1

    def test_analyze_writes_xlsx(self, config_file, sample_table):
        doc = config_file.parent / "schema.pdf"
        doc.write_bytes(b"%PDF-1.4")
        output = config_file.parent / "result.xlsx"
        service = FakeAssistantService(
            reply_parts=[TextPart(f"```json\n{json.dumps(sample_table)}\n```")]
        )
        with patch("src.cli.main.OpenAIAssistantService", return_value=service):
            result = runner.invoke(
                app, ["--config", str(config_file), "analyze", str(doc), "--xlsx", str(output)]
            )

        assert result.exit_code == 0, result.output
        assert output.exists()
        upload = next(call for call in service.calls if call[0] == "upload_file")
        assert upload[1:3] == ("schema.pdf", "application/pdf")

    def test_analyze_missing_file(self, config_file):
        result = runner.invoke(
            app, ["--config", str(config_file), "analyze", str(config_file.parent / "none.pdf")]
        )
        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_run_failure_exits_nonzero(self, config_file):
        service = FakeAssistantService(run_statuses=["failed"])
        with patch("src.cli.main.OpenAIAssistantService", return_value=service):
            result = runner.invoke(app, ["--config", str(config_file), "chat", "hi"])
        assert result.exit_code == 1
        assert "E-3001" in result.output
