"""Test CLI functionality."""

import json

import pytest
from click.testing import CliRunner

from promptor.cli import cli

SCHEMA = {
    "title": "Standup",
    "template": "Yesterday: {{yesterday}}\nToday: {{today}}\n{{sign_off}}",
    "fragments": {"sign_off": "Thanks!"},
    "ui": {
        "update": {
            "header": "Update",
            "components": [
                {"type": "textarea", "label": "Yesterday", "required": True},
                {"type": "textarea", "label": "Today"},
            ],
        }
    },
}


@pytest.fixture
def env(tmp_path, monkeypatch):
    monkeypatch.setenv("PROMPTOR_DATABASE__PATH", str(tmp_path / "promptor.db"))
    monkeypatch.setenv("PROMPTOR_LOG__FILE", str(tmp_path / "promptor.log"))
    monkeypatch.setenv("PROMPTOR_LOG__LEVEL", "WARNING")
    monkeypatch.setenv("PROMPTOR_EXPORT__DIRECTORY", str(tmp_path / "exports"))
    return tmp_path


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def schema_file(tmp_path):
    path = tmp_path / "standup.json"
    path.write_text(json.dumps(SCHEMA), encoding="utf-8")
    return path


@pytest.fixture
def bad_schema_file(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text(
        json.dumps(dict(SCHEMA, template="Hello {{yesterday}}, {{unknown}}!")),
        encoding="utf-8",
    )
    return path


# ========== Storage commands ==========


def test_init_db(runner, env):
    result = runner.invoke(cli, ["init-db"])

    assert result.exit_code == 0
    assert "Database ready" in result.output
    assert (env / "promptor.db").exists()


def test_list_empty(runner, env):
    result = runner.invoke(cli, ["list"])

    assert result.exit_code == 0
    assert "No schemas stored." in result.output


def test_import_and_list(runner, env, schema_file):
    result = runner.invoke(cli, ["import", str(schema_file)])
    assert result.exit_code == 0
    assert "Saved schema: standup" in result.output

    result = runner.invoke(cli, ["list"])
    assert result.exit_code == 0
    assert "standup\tStandup\t1" in result.output


def test_import_with_key(runner, env, schema_file):
    result = runner.invoke(cli, ["import", str(schema_file), "--key", "daily"])

    assert result.exit_code == 0
    assert "Saved schema: daily" in result.output


def test_import_unpublishable(runner, env, bad_schema_file):
    result = runner.invoke(cli, ["import", str(bad_schema_file)])

    assert result.exit_code == 1
    assert "Unresolvable ref: {{unknown}}" in result.output
    assert "Schema 'broken' was not saved" in result.output

    result = runner.invoke(cli, ["list"])
    assert "No schemas stored." in result.output


def test_import_invalid_file(runner, env, tmp_path):
    path = tmp_path / "invalid.json"
    path.write_text("{not json", encoding="utf-8")

    result = runner.invoke(cli, ["import", str(path)])

    assert result.exit_code == 1
    assert "Invalid JSON syntax" in result.output


def test_export_toml(runner, env, schema_file):
    runner.invoke(cli, ["import", str(schema_file)])
    output = env / "out" / "standup.toml"

    result = runner.invoke(
        cli, ["export", "standup", "--format", "toml", "--output", str(output)]
    )

    assert result.exit_code == 0
    content = output.read_text(encoding="utf-8")
    assert 'title = "Standup"' in content
    assert "[ui.update]" in content


def test_export_unknown_key(runner, env):
    result = runner.invoke(cli, ["export", "missing"])

    assert result.exit_code == 1
    assert "Schema not found: missing" in result.output


# ========== Checking ==========


def test_check_publishable_file(runner, env, schema_file):
    result = runner.invoke(cli, ["check", "--file", str(schema_file)])

    assert result.exit_code == 0
    assert "Schema is publishable" in result.output


def test_check_unpublishable_file(runner, env, bad_schema_file):
    result = runner.invoke(cli, ["check", "--file", str(bad_schema_file)])

    assert result.exit_code == 1
    assert "Unresolvable refs: unknown" in result.output
    assert "Schema is not publishable" in result.output


def test_check_reports_blocking_issue(runner, env, tmp_path):
    path = tmp_path / "clash.json"
    path.write_text(
        json.dumps(dict(SCHEMA, fragments={"sign_off": "x", "today": "clash"})),
        encoding="utf-8",
    )

    result = runner.invoke(cli, ["check", "--file", str(path)])

    assert result.exit_code == 1
    assert "[REF_COLLISION]" in result.output


def test_check_unknown_key(runner, env):
    result = runner.invoke(cli, ["check", "nope"])

    assert result.exit_code == 1
    assert "No UI found for: nope" in result.output


def test_check_requires_key_or_file(runner, env):
    result = runner.invoke(cli, ["check"])

    assert result.exit_code == 2
    assert "Give a schema KEY or --file" in result.output


def test_highlight_stored_schema(runner, env, schema_file):
    runner.invoke(cli, ["import", str(schema_file)])

    result = runner.invoke(cli, ["highlight", "standup"])

    assert result.exit_code == 0
    assert SCHEMA["template"] in result.output


# ========== Generation ==========


def test_generate_blocked(runner, env, schema_file):
    result = runner.invoke(cli, ["generate", "--file", str(schema_file)])

    assert result.exit_code == 1
    assert "Missing required field: yesterday" in result.output
    assert "Generation is disabled" in result.output


def test_generate_prints_content(runner, env, schema_file):
    result = runner.invoke(
        cli, ["generate", "--file", str(schema_file), "--set", "yesterday=Shipped a=b"]
    )

    assert result.exit_code == 0
    assert "Yesterday: Shipped a=b\nToday: {{today}}\nThanks!" in result.output


def test_generate_blank_policy_from_env(runner, env, schema_file, monkeypatch):
    monkeypatch.setenv("PROMPTOR_GENERATION__UNRESOLVED", "blank")

    result = runner.invoke(
        cli, ["generate", "--file", str(schema_file), "-s", "yesterday=Shipped"]
    )

    assert result.exit_code == 0
    assert "Yesterday: Shipped\nToday: \nThanks!" in result.output


def test_generate_bad_assignment(runner, env, schema_file):
    result = runner.invoke(cli, ["generate", "--file", str(schema_file), "--set", "oops"])

    assert result.exit_code == 2
    assert "Expected ref=value" in result.output


def test_generate_writes_exports(runner, env, schema_file):
    runner.invoke(cli, ["import", str(schema_file)])
    out_dir = env / "out"

    result = runner.invoke(
        cli,
        [
            "generate",
            "standup",
            "--set",
            "yesterday=Shipped",
            "--set",
            "today=Review",
            "--output",
            str(out_dir),
            "--save-input",
        ],
    )

    assert result.exit_code == 0
    assert "Prompt saved:" in result.output
    assert (out_dir / "standup_prompt.md").read_text(encoding="utf-8") == (
        "Yesterday: Shipped\nToday: Review\nThanks!"
    )
    saved = json.loads((out_dir / "standup_input.json").read_text(encoding="utf-8"))
    assert saved == {"yesterday": "Shipped", "today": "Review"}


def test_generate_save_uses_export_directory(runner, env, schema_file):
    result = runner.invoke(
        cli, ["generate", "--file", str(schema_file), "-s", "yesterday=x", "--save"]
    )

    assert result.exit_code == 0
    assert (env / "exports" / "standup_prompt.md").exists()


def test_generate_from_input_file(runner, env, schema_file, tmp_path):
    answers = tmp_path / "answers.json"
    answers.write_text(json.dumps({"yesterday": "Old", "today": "Plan"}), encoding="utf-8")

    result = runner.invoke(
        cli,
        [
            "generate",
            "--file",
            str(schema_file),
            "--input",
            str(answers),
            "--set",
            "yesterday=New",
        ],
    )

    assert result.exit_code == 0
    assert "Yesterday: New\nToday: Plan" in result.output


def test_invalid_config_file(runner, env, tmp_path):
    config = tmp_path / "config.toml"
    config.write_text('timezone = "Nowhere/Special"\n', encoding="utf-8")

    result = runner.invoke(cli, ["--config", str(config), "list"])

    assert result.exit_code == 1
    assert "Configuration validation failed" in result.output


def test_generate_save_input_alone_writes_both_exports(runner, env, schema_file):
    result = runner.invoke(
        cli, ["generate", "--file", str(schema_file), "-s", "yesterday=x", "--save-input"]
    )

    assert result.exit_code == 0
    assert (env / "exports" / "standup_prompt.md").exists()
    saved = json.loads((env / "exports" / "standup_input.json").read_text(encoding="utf-8"))
    assert saved == {"yesterday": "x"}


def test_generate_unreadable_input_file(runner, env, schema_file, tmp_path):
    answers = tmp_path / "answers.json"
    answers.write_bytes(b'{"yesterday": "\xff\xfe"}')

    result = runner.invoke(
        cli, ["generate", "--file", str(schema_file), "--input", str(answers)]
    )

    assert result.exit_code == 2
    assert "--input" in result.output
    assert "--set" not in result.output


def test_config_toml_in_working_directory_is_used(runner, env, schema_file):
    with runner.isolated_filesystem():
        with open("config.toml", "w", encoding="utf-8") as f:
            f.write('[generation]\nunresolved = "blank"\n')

        result = runner.invoke(
            cli, ["generate", "--file", str(schema_file), "-s", "yesterday=Shipped"]
        )

    assert result.exit_code == 0
    assert "Yesterday: Shipped\nToday: \nThanks!" in result.output
