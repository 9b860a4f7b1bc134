# tests/unit/test_cli.py
"""
CLI unit tests.

Tests each command via typer's CliRunner against a temporary SQLite database;
load_config is patched so nothing touches the user config directory.
"""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from gofast_planner.cli import app
from gofast_planner.config.schema import PlannerConfig

runner = CliRunner()

ATHLETE = "athlete-1"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def config(tmp_path):
    cfg = PlannerConfig(storage={"db_path": str(tmp_path / "cli.db")})
    with patch("gofast_planner.cli.load_config", return_value=cfg):
        yield cfg


def _invoke(args, **kwargs):
    return runner.invoke(app, args, env={"GOFAST_ATHLETE": None}, **kwargs)


def _create(tmp_path, kind: str, payload: dict) -> str:
    """Create an artifact through the CLI and return its id."""
    path = tmp_path / f"{kind}.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    result = _invoke(["artifacts", "create", kind, str(path)])
    assert result.exit_code == 0, result.output
    return result.output.split()[2]


def _add_race() -> str:
    result = _invoke(["races", "add", "Brooklyn Half", "half", "2026-04-26", "-l", "Brooklyn"])
    assert result.exit_code == 0, result.output
    return result.output.split()[1].rstrip(":")


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

class TestHelp:
    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert "training plans" in result.output

    def test_help_flag(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("artifacts", "races", "plans", "generate", "serve"):
            assert command in result.output


class TestArtifacts:
    def test_create_yaml_and_list(self, config, tmp_path):
        path = tmp_path / "role.yaml"
        path.write_text(
            "title: Marathon Coach\nsystem_instructions: You coach {raceName}.\n",
            encoding="utf-8",
        )

        created = _invoke(["artifacts", "create", "role", str(path)])
        assert created.exit_code == 0
        assert created.output.startswith("Created role ")
        assert "(v1)" in created.output

        listed = _invoke(["artifacts", "list", "role"])
        assert listed.exit_code == 0
        assert "Marathon Coach" in listed.output

    def test_same_name_creates_new_version(self, config, tmp_path):
        _create(tmp_path, "rule_set", {"name": "Base rules", "rules": ["Run easy."]})
        path = tmp_path / "rules2.json"
        path.write_text(json.dumps({"name": "Base rules", "rules": ["Run easier."]}))

        result = _invoke(["artifacts", "create", "rule-set", str(path)])

        assert result.exit_code == 0
        assert "(v2)" in result.output

    def test_show_artifact_json(self, config, tmp_path):
        artifact_id = _create(tmp_path, "must_haves", {"fields": ["phases[].name"]})

        result = _invoke(["artifacts", "show", "must_haves", artifact_id])

        assert result.exit_code == 0
        item = json.loads(result.output)
        assert item["id"] == artifact_id
        assert item["fields"] == {"phases[].name": ""}

    def test_list_empty(self, config):
        result = _invoke(["artifacts", "list", "return_format"])
        assert result.exit_code == 0
        assert "No artifacts found" in result.output

    def test_invalid_payload_errors(self, config, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("name: Empty\nrules: []\n", encoding="utf-8")

        result = _invoke(["artifacts", "create", "rule_set", str(path)])

        assert result.exit_code == 1
        assert "(400)" in result.output

    def test_unknown_kind_errors(self, config):
        result = _invoke(["artifacts", "list", "persona"])
        assert result.exit_code == 1


class TestRaces:
    def test_add_and_search(self, config):
        race_id = _add_race()

        result = _invoke(["races", "search", "brooklyn"])

        assert result.exit_code == 0
        assert race_id in result.output
        assert "13.1" in result.output

    def test_add_duplicate_returns_existing(self, config):
        first = _add_race()
        assert _add_race() == first

    def test_add_unknown_type(self, config):
        result = _invoke(["races", "add", "Ultra", "50k", "2026-10-11"])
        assert result.exit_code == 1
        assert "Unknown race type" in result.output

    def test_search_no_results(self, config):
        result = _invoke(["races", "search", "boston"])
        assert result.exit_code == 0
        assert "No races found" in result.output


class TestPlans:
    def test_list_requires_athlete(self, config):
        result = _invoke(["plans", "list"])
        assert result.exit_code == 1
        assert "(401)" in result.output

    def test_list_empty(self, config):
        result = _invoke(["plans", "list", "--athlete", ATHLETE])
        assert result.exit_code == 0
        assert "No plans found" in result.output

    def test_show_not_found(self, config):
        result = _invoke(["plans", "show", "abcdef123456", "-a", ATHLETE])
        assert result.exit_code == 1
        assert "(404)" in result.output


class TestGenerate:
    def _setup(self, tmp_path, return_format) -> list[str]:
        role_id = _create(tmp_path, "role", {"title": "Coach", "system_instructions": "Coach."})
        rules_id = _create(tmp_path, "rule_set", {"name": "Rules", "rules": ["Be safe."]})
        must_id = _create(tmp_path, "must_haves", {"fields": ["phases[].weeks[].runs[].type"]})
        format_id = _create(
            tmp_path, "return_format", {"name": "Plan", "schema": return_format.json_schema}
        )
        race_id = _add_race()
        return [
            "generate", race_id, "1:45:00",
            "--start", "2026-03-02",
            "--role", role_id,
            "--rules", rules_id,
            "--must-haves", must_id,
            "--return-format", format_id,
            "-a", ATHLETE,
        ]

    @staticmethod
    def _client(text: str) -> MagicMock:
        client = MagicMock()
        client.model = "test-model"
        client.generate = AsyncMock(return_value=text)
        return client

    def test_generate_saves_plan(self, config, tmp_path, return_format, plan_json):
        args = self._setup(tmp_path, return_format)

        with patch(
            "gofast_planner.lifecycle.create_llm_client", return_value=self._client(plan_json())
        ):
            result = _invoke(args + ["--weeks", "8", "--days", "2,7"])

        assert result.exit_code == 0, result.output
        assert "Brooklyn Half Training Plan" in result.output
        assert "BASE" in result.output
        assert "TAPER" in result.output
        plan_id = result.output.strip().splitlines()[-1].split()[-1]

        listed = _invoke(["plans", "list", "-a", ATHLETE])
        assert plan_id in listed.output

        archived = _invoke(["plans", "archive", plan_id, "-a", ATHLETE])
        assert archived.exit_code == 0
        assert f"Plan {plan_id} is now archived." in archived.output

        shown = _invoke(["plans", "show", plan_id, "-a", ATHLETE, "--json"])
        assert json.loads(shown.output)["status"] == "archived"

    def test_generate_rejected_plan_reports_stage(self, config, tmp_path, return_format, plan_json):
        args = self._setup(tmp_path, return_format)
        bad = plan_json(phases=["base", "peak", "build", "taper"])

        with patch("gofast_planner.lifecycle.create_llm_client", return_value=self._client(bad)):
            result = _invoke(args)

        assert result.exit_code == 1
        assert "[validate]" in result.output
        assert "phase_order" in result.output

        listed = _invoke(["plans", "list", "-a", ATHLETE])
        assert "No plans found" in listed.output
