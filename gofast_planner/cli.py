# gofast_planner/cli.py
"""
CLI interface for gofast-planner.

Thin presentation layer over the tools/ service layer.
All commands delegate to the same functions that MCP wraps.
"""

import asyncio
import json
from pathlib import Path

import typer
import yaml
from rich.console import Console
from rich.table import Table

from gofast_planner.config.loader import get_db_path, load_config
from gofast_planner.logging_config import configure_cli_logging

app = typer.Typer(
    name="gofast-planner",
    help="Generate validated running training plans with a local LLM.",
    no_args_is_help=True,
)
artifacts_app = typer.Typer(help="Manage roles, rule sets, must-haves and return formats.")
races_app = typer.Typer(help="Search and add races.")
plans_app = typer.Typer(help="View and archive training plans.")
app.add_typer(artifacts_app, name="artifacts")
app.add_typer(races_app, name="races")
app.add_typer(plans_app, name="plans")

console = Console()

_ATHLETE_OPTION = typer.Option(
    None, "--athlete", "-a", envvar="GOFAST_ATHLETE", help="Athlete id (owner of plans)"
)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show info logs")):
    configure_cli_logging(verbose)


def _run(coro):
    """Run async function from sync CLI context."""
    return asyncio.run(coro)


async def _open_stores():
    """Open the SQLite stores directly (no LLM client needed)."""
    from gofast_planner.models.sqlite_store import (
        SQLiteConfigRegistry,
        SQLitePlanStore,
        SQLiteRaceRegistry,
    )

    db_path = get_db_path(load_config())
    registry = SQLiteConfigRegistry(db_path)
    await registry.initialize()
    return registry, SQLiteRaceRegistry(db_path), SQLitePlanStore(db_path)


def _check(result: dict) -> dict:
    """Print a failure envelope and exit non-zero, or pass success through."""
    if result.get("success"):
        return result
    stage = f" [{result['stage']}]" if result.get("stage") else ""
    typer.echo(
        typer.style(f"Error{stage} ({result.get('status')}): {result.get('error')}", fg=typer.colors.RED),
        err=True,
    )
    details = result.get("details")
    if isinstance(details, dict):
        for key in ("path", "invariant", "value", "reason"):
            if details.get(key) is not None:
                typer.echo(f"  {key}: {details[key]}", err=True)
    raise typer.Exit(1)


def _status_color(status: str) -> str:
    return typer.colors.GREEN if status == "active" else typer.colors.BRIGHT_BLACK


# Artifacts


@artifacts_app.command("list")
def artifacts_list(kind: str = typer.Argument(..., help="role, rule_set, must_haves, return_format")):
    """List artifacts of one kind, newest first."""
    from gofast_planner.tools.artifacts import list_artifacts

    async def _list():
        registry, _, _ = await _open_stores()
        try:
            return await list_artifacts(kind, registry=registry)
        finally:
            await registry.close()

    result = _check(_run(_list()))
    if not result["items"]:
        typer.echo("No artifacts found.")
        return

    table = Table()
    table.add_column("ID")
    table.add_column("NAME")
    table.add_column("VERSION", justify="right")
    table.add_column("CREATED")
    for item in result["items"]:
        table.add_row(
            item["id"],
            item.get("name") or item.get("title", ""),
            str(item["version"]),
            item["created_at"][:19],
        )
    console.print(table)


@artifacts_app.command("show")
def artifacts_show(
    kind: str = typer.Argument(..., help="Artifact kind"),
    artifact_id: str = typer.Argument(..., help="Artifact id"),
):
    """Print one artifact as JSON."""
    from gofast_planner.tools.artifacts import get_artifact

    async def _show():
        registry, _, _ = await _open_stores()
        try:
            return await get_artifact(kind, artifact_id, registry=registry)
        finally:
            await registry.close()

    result = _check(_run(_show()))
    typer.echo(json.dumps(result["item"], indent=2))


@artifacts_app.command("create")
def artifacts_create(
    kind: str = typer.Argument(..., help="Artifact kind"),
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="YAML or JSON payload file"),
):
    """Create an artifact from a YAML/JSON file (same name = new version)."""
    from gofast_planner.tools.artifacts import create_artifact

    with file.open("r", encoding="utf-8") as f:
        payload = yaml.safe_load(f)

    async def _create():
        registry, _, _ = await _open_stores()
        try:
            return await create_artifact(kind, payload, registry=registry)
        finally:
            await registry.close()

    item = _check(_run(_create()))["item"]
    typer.echo(f"Created {item['kind']} {item['id']} (v{item['version']})")


# Races


@races_app.command("search")
def races_search(query: str = typer.Argument(..., help="Part of the race name")):
    """Search races by name."""
    from gofast_planner.tools.races import search_races

    async def _search():
        registry, races, _ = await _open_stores()
        try:
            return await search_races(query, races=races)
        finally:
            await registry.close()

    result = _check(_run(_search()))
    if not result["races"]:
        typer.echo("No races found.")
        return

    table = Table()
    for column in ("ID", "NAME", "TYPE", "MILES", "DATE", "LOCATION"):
        table.add_column(column)
    for race in result["races"]:
        table.add_row(
            race["id"],
            race["name"],
            race["race_type"],
            f"{race['miles']:g}",
            race["date"],
            race.get("location") or "",
        )
    console.print(table)


@races_app.command("add")
def races_add(
    name: str = typer.Argument(..., help="Race name"),
    race_type: str = typer.Argument(..., help="marathon, half, 10k, 5k or 10m"),
    race_date: str = typer.Argument(..., help="Race day (YYYY-MM-DD)"),
    miles: float = typer.Option(None, "--miles", help="Distance (defaults to the race type's)"),
    location: str = typer.Option(None, "--location", "-l", help="City or venue"),
):
    """Add a race (returns the existing one if name and date match)."""
    from gofast_planner.tools.races import create_race

    async def _add():
        registry, races, _ = await _open_stores()
        try:
            return await create_race(
                name, race_type, race_date, races=races, miles=miles, location=location
            )
        finally:
            await registry.close()

    race = _check(_run(_add()))["race"]
    typer.echo(f"Race {race['id']}: {race['name']} ({race['race_type']}, {race['date']})")


# Plans


@plans_app.command("list")
def plans_list(athlete: str = _ATHLETE_OPTION):
    """List an athlete's plans."""
    from gofast_planner.tools.plans import list_plans

    async def _list():
        registry, _, plans = await _open_stores()
        try:
            return await list_plans(athlete, plans=plans)
        finally:
            await registry.close()

    result = _check(_run(_list()))
    if not result["plans"]:
        typer.echo("No plans found.")
        return

    typer.echo(f"{'PLAN ID':<14} {'STATUS':<10} {'WEEKS':<6} {'START':<11} NAME")
    typer.echo("-" * 80)
    for p in result["plans"]:
        typer.echo(
            typer.style(f"{p['id']:<14} {p['status']:<10} ", fg=_status_color(p["status"]))
            + f"{p['total_weeks']:<6} {p['start_date']:<11} {p['name']}"
        )


def _fmt_run(run: dict) -> str:
    if run["mileage"] is None:
        return run["type"]
    return f"{run['type']} {run['mileage']:g}mi"


def _print_plan(plan: dict) -> None:
    typer.echo(typer.style(plan["name"], bold=True))
    typer.echo(
        f"Plan {plan['id']}  status={plan['status']}  goal={plan['goal_time']}  "
        f"weeks={plan['total_weeks']}  start={plan['start_date']}"
    )
    for phase in plan["phases"]:
        enabled = ", ".join(k for k, v in phase["run_types"].items() if v)
        typer.echo("")
        typer.echo(
            typer.style(
                f"{phase['name'].upper()}  {phase['start_date']} -> {phase['end_date']}  ({enabled})",
                fg=typer.colors.CYAN,
            )
        )
        for week in phase["weeks"]:
            runs = "  ".join(_fmt_run(run) for run in week["runs"])
            typer.echo(f"  Week {week['week_index']:>2} ({week['start_date']}): {runs}")


@plans_app.command("show")
def plans_show(
    plan_id: str = typer.Argument(..., help="Plan id"),
    athlete: str = _ATHLETE_OPTION,
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON"),
):
    """Show a plan with its phases, weeks and runs."""
    from gofast_planner.tools.plans import get_plan

    async def _show():
        registry, _, plans = await _open_stores()
        try:
            return await get_plan(athlete, plan_id, plans=plans)
        finally:
            await registry.close()

    plan = _check(_run(_show()))["plan"]
    if as_json:
        typer.echo(json.dumps(plan, indent=2))
    else:
        _print_plan(plan)


def _set_status(plan_id: str, athlete: str | None, status: str) -> None:
    from gofast_planner.tools.plans import update_plan_status

    async def _update():
        registry, _, plans = await _open_stores()
        try:
            return await update_plan_status(athlete, plan_id, status, plans=plans)
        finally:
            await registry.close()

    plan = _check(_run(_update()))["plan"]
    typer.echo(f"Plan {plan['id']} is now {plan['status']}.")


@plans_app.command("archive")
def plans_archive(plan_id: str = typer.Argument(..., help="Plan id"), athlete: str = _ATHLETE_OPTION):
    """Archive a plan."""
    _set_status(plan_id, athlete, "archived")


@plans_app.command("activate")
def plans_activate(plan_id: str = typer.Argument(..., help="Plan id"), athlete: str = _ATHLETE_OPTION):
    """Re-activate an archived plan."""
    _set_status(plan_id, athlete, "active")


# Generation


@app.command()
def generate(
    race_id: str = typer.Argument(..., help="Race id (see 'races search')"),
    goal_time: str = typer.Argument(..., help="Goal finish time, H:MM:SS or MM:SS"),
    start: str = typer.Option(..., "--start", "-s", help="Plan start date (YYYY-MM-DD)"),
    role: str = typer.Option(..., "--role", help="Role artifact id"),
    rules: str = typer.Option(..., "--rules", help="RuleSet artifact id"),
    must_haves: str = typer.Option(..., "--must-haves", help="MustHaves artifact id"),
    return_format: str = typer.Option(..., "--return-format", help="ReturnFormat artifact id"),
    athlete: str = _ATHLETE_OPTION,
    weeks: int = typer.Option(None, "--weeks", "-w", help="Plan length (default: until race day)"),
    mileage: float = typer.Option(None, "--mileage", help="Current weekly mileage"),
    days: str = typer.Option(None, "--days", help="Preferred days, e.g. 1,3,6 (Monday=1)"),
    five_k_pace: str = typer.Option(None, "--5k-pace", help="Recent 5K pace (m:ss)"),
):
    """Generate, validate and save a training plan."""
    from gofast_planner.lifecycle import ServerLifecycle
    from gofast_planner.tools.generate_plan import generate_plan

    async def _generate():
        lifecycle = ServerLifecycle(load_config())
        await lifecycle.startup(check_backend=False)
        try:
            with console.status("Generating plan..."):
                return await generate_plan(
                    athlete,
                    role,
                    rules,
                    must_haves,
                    return_format,
                    race_id,
                    goal_time,
                    start,
                    pipeline=lifecycle.pipeline,
                    races=lifecycle.races,
                    total_weeks=weeks,
                    current_weekly_mileage=mileage,
                    preferred_days=days,
                    five_k_pace=five_k_pace,
                )
        finally:
            await lifecycle.shutdown()

    try:
        result = _run(_generate())
    except KeyboardInterrupt:
        typer.echo("\nCancelled.", err=True)
        raise typer.Exit(130)

    plan = _check(result)["plan"]
    _print_plan(plan)
    typer.echo("")
    typer.echo(typer.style(f"Saved plan {plan['id']}", fg=typer.colors.GREEN))


@app.command()
def serve():
    """Start the MCP server (stdio transport)."""
    from gofast_planner.__main__ import main as server_main

    asyncio.run(server_main())


if __name__ == "__main__":
    app()
