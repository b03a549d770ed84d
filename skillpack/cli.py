"""Top-level skillpack CLI."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

from skillpack.config.logging import configure_logging
from skillpack.config.settings import settings
from skillpack.pack import installed_components
from skillpack.schemas.run_models import StepStatus
from skillpack.workflows import cli as workflow_cli

app = typer.Typer(help="Skill registry and checkpoint-gated orchestrator.")
skills_app = typer.Typer(help="Inspect and validate skill documents.")
run_app = typer.Typer(help="Start and drive orchestrator runs.")
app.add_typer(skills_app, name="skills")
app.add_typer(run_app, name="run")


@app.callback()
def _configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    configure_logging(
        level="DEBUG" if verbose else settings.log_level,
        structured=settings.structured_logs or None,
        default_fields={"service": "skillpack"},
    )


def _fail(exc: workflow_cli.CliError) -> typer.Exit:
    typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
    return typer.Exit(code=1)


def _echo_json(payload: object) -> None:
    typer.echo(json.dumps(payload, indent=2, default=str))


@skills_app.command("list", help="List registered skills.")
def skills_list(
    orchestrators_only: bool = typer.Option(
        False, "--orchestrators", help="Only show skills that sequence sub-skills."
    ),
) -> None:
    try:
        skills = workflow_cli.run_list_skills()
    except workflow_cli.CliError as exc:
        raise _fail(exc) from exc
    for skill in skills:
        if orchestrators_only and not skill.is_orchestrator:
            continue
        marker = f" [{len(skill.requires)} steps]" if skill.is_orchestrator else ""
        typer.echo(f"{skill.name}{marker}: {skill.purpose}")


@skills_app.command("show", help="Show one skill's metadata and guidance.")
def skills_show(name: str = typer.Argument(..., help="Skill name.")) -> None:
    try:
        payload = workflow_cli.run_show_skill(name)
    except workflow_cli.CliError as exc:
        raise _fail(exc) from exc
    _echo_json(payload)


@skills_app.command("validate", help="Load every skill root and check references.")
def skills_validate() -> None:
    try:
        count = workflow_cli.run_validate()
    except workflow_cli.CliError as exc:
        raise _fail(exc) from exc
    typer.secho(f"{count} skill(s) valid.", fg=typer.colors.GREEN)


@skills_app.command("index", help="Write the skills index JSON.")
def skills_index(
    output: Optional[Path] = typer.Option(
        None, "--output", help="Destination path (default: <claude home>/SKILLS_INDEX.json)."
    ),
) -> None:
    try:
        path = workflow_cli.run_write_index(output)
    except workflow_cli.CliError as exc:
        raise _fail(exc) from exc
    typer.secho(f"Skills index written to {path}", fg=typer.colors.GREEN)


@run_app.command("start", help="Start a run for an orchestrator skill.")
def run_start(
    target: str = typer.Argument(..., help="Target skill name."),
    user_input: Optional[str] = typer.Option(
        None, "--input", help="Free-text request; naming one concern runs only that step."
    ),
    auto_accept: Optional[bool] = typer.Option(
        None, "--auto-accept/--checkpoints", help="Suppress or keep checkpoints."
    ),
) -> None:
    try:
        run = workflow_cli.run_start(
            target=target, user_input=user_input, auto_accept=auto_accept
        )
    except workflow_cli.CliError as exc:
        raise _fail(exc) from exc
    typer.secho(f"Run {run.run_id} started ({run.mode.value}).", fg=typer.colors.GREEN)
    for step in run.steps:
        typer.echo(f"  {step.position:2d}. {step.skill}")


@run_app.command("advance", help="Execute the next step of a run.")
def run_advance(run_id: str = typer.Argument(..., help="Run identifier.")) -> None:
    try:
        run, result = workflow_cli.run_advance(run_id)
    except workflow_cli.CliError as exc:
        raise _fail(exc) from exc
    typer.echo(f"Step {result.position} ({result.skill}) done.")
    if result.message:
        typer.echo(result.message)
    if result.completed:
        typer.secho("Run completed.", fg=typer.colors.GREEN)
    elif result.paused:
        typer.secho(
            "Checkpoint: reply with confirm, adjust: <skills>, auto-accept, or abort.",
            fg=typer.colors.YELLOW,
        )


@run_app.command("directive", help="Answer a checkpoint or halted step.")
def run_directive(
    run_id: str = typer.Argument(..., help="Run identifier."),
    text: str = typer.Argument(..., help="confirm | adjust: <skills> | auto-accept | abort"),
) -> None:
    try:
        run, decision = workflow_cli.run_directive(run_id, text)
    except workflow_cli.CliError as exc:
        raise _fail(exc) from exc
    typer.echo(f"Applied {decision.kind.value}; run is {run.status.value}.")


@run_app.command("status", help="Print a run's steps and summary.")
def run_status(run_id: str = typer.Argument(..., help="Run identifier.")) -> None:
    try:
        payload = workflow_cli.run_status(run_id)
    except workflow_cli.CliError as exc:
        raise _fail(exc) from exc
    _echo_json(payload)


@run_app.command("list", help="List stored runs, most recent first.")
def run_list() -> None:
    runs = workflow_cli.run_list_runs()
    if not runs:
        typer.echo("No runs stored.")
        return
    for run in runs:
        done = len(run.names_with_status(StepStatus.DONE))
        typer.echo(
            f"{run.run_id}  {run.target}  {run.status.value}  "
            f"{done}/{len(run.steps)} done"
        )


@app.command("uninstall", help="Remove the skills pack from the assistant home.")
def uninstall(
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    home = settings.catalog.claude_home_path
    present = installed_components(home)
    if not present:
        typer.echo(f"Nothing to remove under {home}.")
        return
    typer.echo("What will be removed:")
    for label, path in present:
        typer.echo(f"  - {label} ({path})")
    typer.echo("Settings and MCP configuration are left intact.")
    if not yes and not typer.confirm("Remove the skills pack?", default=False):
        typer.echo("Cancelled. Nothing was removed.")
        return
    try:
        removed = workflow_cli.run_uninstall()
    except workflow_cli.CliError as exc:
        raise _fail(exc) from exc
    for component in removed:
        detail = f" ({component.entries} entries)" if component.entries is not None else ""
        typer.secho(f"  Removed {component.label}{detail}", fg=typer.colors.GREEN)
    typer.echo(f"Removed {len(removed)} component(s).")


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
