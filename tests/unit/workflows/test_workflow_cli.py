from __future__ import annotations

import re
from pathlib import Path

import pytest
from typer.testing import CliRunner

from skillpack import cli as top_cli
from skillpack.config.settings import (
    AppSettings,
    OrchestratorSettings,
    SkillCatalogSettings,
)
from skillpack.workflows import cli as workflow_cli

runner = CliRunner()


def _settings(tmp_path: Path, **orchestrator_overrides) -> AppSettings:
    return AppSettings(
        catalog=SkillCatalogSettings(
            skills_roots=(),
            include_builtin_catalog=True,
            claude_home=str(tmp_path / "home"),
        ),
        orchestrator=OrchestratorSettings(
            runs_root=str(tmp_path / "runs"),
            handoff_root=str(tmp_path / "handoffs"),
            **orchestrator_overrides,
        ),
    )


@pytest.fixture
def app_settings(tmp_path, monkeypatch) -> AppSettings:
    cfg = _settings(tmp_path)
    monkeypatch.setattr(workflow_cli, "default_settings", cfg)
    monkeypatch.setattr(top_cli, "settings", cfg)
    return cfg


def test_run_show_skill_includes_body(app_settings):
    payload = workflow_cli.run_show_skill("security-audit")

    assert payload["name"] == "security-audit"
    assert "security-report" in payload["requires"]
    assert payload["body"]


def test_run_show_unknown_skill(app_settings):
    with pytest.raises(workflow_cli.CliError, match="ghost"):
        workflow_cli.run_show_skill("ghost")


def test_invalid_catalog_is_reported(tmp_path, write_skill):
    write_skill("broken", extra="requires: [missing]\n")
    cfg = AppSettings(
        catalog=SkillCatalogSettings(
            skills_roots=(str(tmp_path / "skills"),), include_builtin_catalog=False
        ),
    )

    with pytest.raises(workflow_cli.CliError, match="Skill catalog is invalid"):
        workflow_cli.run_validate(cfg)


def test_start_advance_directive_status(app_settings, tmp_path):
    run = workflow_cli.run_start(target="security-audit")
    assert (tmp_path / "runs" / f"{run.run_id}.json").is_file()

    run, result = workflow_cli.run_advance(run.run_id)
    assert result.paused is True
    request = tmp_path / "handoffs" / run.run_id / "01-security-threat-model.md"
    assert request.is_file()

    run, decision = workflow_cli.run_directive(run.run_id, "adjust: security-report")
    assert decision.replacement == ("security-report",)

    workflow_cli.run_advance(run.run_id)
    status = workflow_cli.run_status(run.run_id)

    assert status["run"]["status"] == "completed"
    assert status["summary"]["completed"] == [
        "security-threat-model",
        "security-report",
    ]
    assert status["summary"]["skipped"] == [
        "security-static-analysis",
        "security-code-review",
        "dependency-audit",
    ]


def test_advance_at_checkpoint_is_a_cli_error(app_settings):
    run = workflow_cli.run_start(target="security-audit")
    workflow_cli.run_advance(run.run_id)

    with pytest.raises(workflow_cli.CliError, match="apply a directive"):
        workflow_cli.run_advance(run.run_id)


def test_unavailable_tool_halt_is_persisted(tmp_path, monkeypatch):
    cfg = _settings(tmp_path, available_tools=("github",))
    monkeypatch.setattr(workflow_cli, "default_settings", cfg)
    run = workflow_cli.run_start(target="stripe-integration")

    with pytest.raises(workflow_cli.CliError, match="skill_unavailable"):
        workflow_cli.run_advance(run.run_id)

    status = workflow_cli.run_status(run.run_id)
    assert status["run"]["status"] == "halted"
    assert "stripe" in status["run"]["steps"][0]["error"]


def test_bad_directive_is_a_cli_error(app_settings):
    run = workflow_cli.run_start(target="security-audit")
    workflow_cli.run_advance(run.run_id)

    with pytest.raises(workflow_cli.CliError, match="Unrecognized directive"):
        workflow_cli.run_directive(run.run_id, "whatever")


def test_unknown_run_id(app_settings):
    with pytest.raises(workflow_cli.CliError, match="Run not found"):
        workflow_cli.run_status("deadbeef")


def test_skills_list_command(app_settings):
    result = runner.invoke(top_cli.app, ["skills", "list", "--orchestrators"])

    assert result.exit_code == 0
    assert "nextjs-security [10 steps]" in result.output
    assert not any(line.startswith("nextjs-csrf") for line in result.output.splitlines())


def test_skills_validate_command(app_settings):
    result = runner.invoke(top_cli.app, ["skills", "validate"])

    assert result.exit_code == 0
    assert "27 skill(s) valid." in result.output


def test_skills_index_command_writes_default_location(app_settings, tmp_path):
    result = runner.invoke(top_cli.app, ["skills", "index"])

    assert result.exit_code == 0
    assert (tmp_path / "home" / "SKILLS_INDEX.json").is_file()


def test_run_commands_end_to_end(app_settings):
    started = runner.invoke(
        top_cli.app, ["run", "start", "security-audit", "--input", "Run static analysis"]
    )
    assert started.exit_code == 0
    assert "(targeted)" in started.output
    run_id = re.search(r"Run (\w+) started", started.output).group(1)

    advanced = runner.invoke(top_cli.app, ["run", "advance", run_id])
    assert advanced.exit_code == 0
    assert "Run completed." in advanced.output


def test_run_start_unknown_target_exits_nonzero(app_settings):
    result = runner.invoke(top_cli.app, ["run", "start", "ghost"])

    assert result.exit_code == 1


def test_uninstall_command_requires_confirmation(app_settings, tmp_path):
    skills_dir = tmp_path / "home" / "skills" / "nextjs-auth"
    skills_dir.mkdir(parents=True)

    declined = runner.invoke(top_cli.app, ["uninstall"], input="n\n")
    assert declined.exit_code == 0
    assert "Nothing was removed" in declined.output
    assert skills_dir.exists()

    accepted = runner.invoke(top_cli.app, ["uninstall", "--yes"])
    assert accepted.exit_code == 0
    assert "Removed Skills (1 entries)" in accepted.output
    assert not (tmp_path / "home" / "skills").exists()


def test_uninstall_with_nothing_installed(app_settings):
    result = runner.invoke(top_cli.app, ["uninstall"])

    assert result.exit_code == 0
    assert "Nothing to remove" in result.output


def test_run_list_runs_newest_first_and_skips_unreadable(
    app_settings, tmp_path, caplog
):
    first = workflow_cli.run_start(target="nextjs-csrf")
    second = workflow_cli.run_start(target="security-audit")
    workflow_cli.run_advance(first.run_id)
    (tmp_path / "runs" / "garbled.json").write_bytes(b"\xff\xfe")

    with caplog.at_level("WARNING", logger="skillpack.workflows.cli"):
        runs = workflow_cli.run_list_runs()

    assert [run.run_id for run in runs] == [first.run_id, second.run_id]
    assert "garbled" in caplog.text


def test_run_list_command(app_settings):
    empty = runner.invoke(top_cli.app, ["run", "list"])
    assert empty.exit_code == 0
    assert "No runs stored." in empty.output

    run = workflow_cli.run_start(target="security-audit")
    workflow_cli.run_advance(run.run_id)

    result = runner.invoke(top_cli.app, ["run", "list"])

    assert result.exit_code == 0
    assert f"{run.run_id}  security-audit  awaiting_checkpoint  1/5 done" in result.output
