import json
from pathlib import Path

from typer.testing import CliRunner

from mdlint_engine.cli import app
from tests.utils import write_markdown

runner = CliRunner()

TAB_DOCUMENT = "# Title\n\nSome\ttext\n"


def test_cli_analyze_outputs_json(tmp_path: Path):
    """analyze returns a JSON document listing each file's violations."""
    clean = write_markdown(tmp_path, "clean.md", "# Clean\n\nNothing to see.\n")
    tabbed = write_markdown(tmp_path, "tabbed.md", TAB_DOCUMENT)
    result = runner.invoke(app, ["analyze", str(clean), str(tabbed)])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert [Path(doc["path"]).name for doc in payload["documents"]] == ["clean.md", "tabbed.md"]
    assert payload["documents"][0]["violations"] == []
    violation = payload["documents"][1]["violations"][0]
    assert violation["rule_id"] == "MD010"
    assert violation["line"] == 2
    assert violation["severity"] == "warning"


def test_cli_analyze_text_format(tmp_path: Path):
    """Text output uses one-based path:line:column prefixes."""
    path = write_markdown(tmp_path, "doc.md", TAB_DOCUMENT)
    result = runner.invoke(app, ["analyze", str(path), "--format", "text"])
    assert result.exit_code == 0
    assert result.stdout.strip() == f"{path}:3:5: MD010 Hard tabs"


def test_cli_analyze_respects_editorconfig(tmp_path: Path):
    """Per-file .editorconfig properties reach the engine."""
    (tmp_path / ".editorconfig").write_text(
        "root = true\n\n[*.md]\nmd_no-hard-tabs = false\n", encoding="utf-8"
    )
    path = write_markdown(tmp_path, "doc.md", TAB_DOCUMENT)
    result = runner.invoke(app, ["analyze", str(path)])
    assert result.exit_code == 0
    assert json.loads(result.stdout)["documents"][0]["violations"] == []


def test_cli_analyze_with_config_file(tmp_path: Path):
    """--config loads global rule switches from YAML."""
    path = write_markdown(tmp_path, "doc.md", TAB_DOCUMENT)
    config_path = tmp_path / "mdlint.yaml"
    config_path.write_text("rules:\n  no-hard-tabs: false\n", encoding="utf-8")
    result = runner.invoke(app, ["analyze", str(path), "--config", str(config_path)])
    assert result.exit_code == 0
    assert json.loads(result.stdout)["documents"][0]["violations"] == []


def test_cli_analyze_rejects_bad_input(tmp_path: Path):
    """Directories, unknown formats and malformed configs are usage errors."""
    path = write_markdown(tmp_path, "doc.md", TAB_DOCUMENT)
    assert runner.invoke(app, ["analyze", str(tmp_path)]).exit_code != 0
    assert runner.invoke(app, ["analyze", str(path), "--format", "xml"]).exit_code == 2

    bad_config = tmp_path / "bad.yaml"
    bad_config.write_text("- just\n- a list\n", encoding="utf-8")
    result = runner.invoke(app, ["analyze", str(path), "--config", str(bad_config)])
    assert result.exit_code == 2


def test_cli_rules_lists_catalog():
    """rules prints one tab-separated line per catalog entry."""
    result = runner.invoke(app, ["rules"])
    assert result.exit_code == 0
    lines = result.stdout.strip().splitlines()
    assert len(lines) == 51
    assert lines[0].split("\t") == ["MD001", "heading-increment", "warning", "enabled"]
    assert any(line.startswith("MD043\t") and line.endswith("disabled") for line in lines)


def test_cli_print_config():
    """print-config dumps the default options."""
    result = runner.invoke(app, ["print-config"])
    assert result.exit_code == 0
    assert "linting_enabled" in result.stdout
    assert "settings_cache_ttl" in result.stdout
