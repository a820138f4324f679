"""Tests for CLI commands."""

import json

from rootline.cli.app import app

ACTOR = "+15550001111"


def apply(cli_runner, config_file, operations):
    return cli_runner.invoke(
        app,
        ["apply", ACTOR, "-", "--config", str(config_file)],
        input=json.dumps(operations),
    )


class TestInitCommand:
    def test_creates_database(self, cli_runner, config_file, tmp_path):
        result = cli_runner.invoke(app, ["init", "--config", str(config_file)])
        assert result.exit_code == 0
        assert "Database ready" in result.stdout
        assert (tmp_path / "cli.db").exists()

    def test_missing_config(self, cli_runner, tmp_path):
        result = cli_runner.invoke(
            app, ["init", "--config", str(tmp_path / "missing.toml")]
        )
        assert result.exit_code == 1
        assert "not found" in result.stdout


class TestApplyCommand:
    def test_apply_and_confirm(self, cli_runner, config_file):
        result = apply(
            cli_runner,
            config_file,
            [
                {"op": "new_tree", "name": "Smith Family"},
                {"op": "add_person", "name": "Alicia", "dob": "1951"},
            ],
        )
        assert result.exit_code == 0
        assert "Join code:" in result.stdout

        result = apply(
            cli_runner, config_file, [{"op": "add_person", "name": "Alice", "dob": "1950"}]
        )
        assert "Alicia" in result.stdout

        result = cli_runner.invoke(
            app, ["confirm", ACTOR, "yes", "--config", str(config_file)]
        )
        assert result.exit_code == 0
        assert "Added *Alice (1950)*." in result.stdout

    def test_accepts_operations_object(self, cli_runner, config_file):
        result = cli_runner.invoke(
            app,
            ["apply", ACTOR, "-", "--config", str(config_file)],
            input=json.dumps({"operations": [{"op": "help"}]}),
        )
        assert result.exit_code == 0
        assert "Family Tree Help" in result.stdout

    def test_invalid_json(self, cli_runner, config_file):
        result = cli_runner.invoke(
            app, ["apply", ACTOR, "-", "--config", str(config_file)], input="[oops"
        )
        assert result.exit_code == 1
        assert "Invalid JSON" in result.stdout

    def test_reads_file(self, cli_runner, config_file, tmp_path):
        ops_file = tmp_path / "ops.json"
        ops_file.write_text(json.dumps([{"op": "menu"}]))
        result = cli_runner.invoke(
            app, ["apply", ACTOR, str(ops_file), "--config", str(config_file)]
        )
        assert result.exit_code == 0
        assert "Family Tree Menu" in result.stdout


class TestPeopleCommand:
    def test_lists_people(self, cli_runner, config_file):
        result = apply(
            cli_runner,
            config_file,
            [
                {"op": "new_tree", "name": "Smith Family"},
                {"op": "add_person", "name": "Tom", "dob": "1975"},
                {"op": "add_person", "name": "Mary", "dob": "1950"},
            ],
        )
        code = result.stdout.split("Join code: ")[1].split()[0]

        result = cli_runner.invoke(app, ["people", code, "--config", str(config_file)])

        assert result.exit_code == 0
        assert "Smith Family (2)" in result.stdout
        assert result.stdout.index("Mary") < result.stdout.index("Tom")

    def test_unknown_code(self, cli_runner, config_file):
        result = cli_runner.invoke(app, ["people", "ZZZZZZ", "--config", str(config_file)])
        assert result.exit_code == 1
        assert "No tree" in result.stdout


class TestDateCommand:
    def test_recognized(self, cli_runner):
        result = cli_runner.invoke(app, ["date", "circa 1875"])
        assert result.exit_code == 0
        assert "display: circa 1875" in result.stdout
        assert "1875-01-01 .. 1875-12-31" in result.stdout

    def test_unrecognized(self, cli_runner):
        result = cli_runner.invoke(app, ["date", "long ago"])
        assert result.exit_code == 0
        assert "Not recognized" in result.stdout
