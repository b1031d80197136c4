"""
buildlogic CLI.

Command-line interface for resolving convention identifiers into a target's
final build configuration.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import typer
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .conventions import build_default_registry
from .core.config import get_config
from .core.exceptions import BuildLogicError
from .core.logging import setup_logging
from .engine.resolver import CompositionResolver
from .models.final import FinalConfiguration
from .models.request import ResolutionRequest, TargetModule
from .versions import VersionTable, load_version_table

app = typer.Typer(
    name="buildlogic",
    help="Compose build-configuration conventions for project modules",
    add_completion=False,
)

console = Console()


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        from . import __version__
        console.print(f"buildlogic v{__version__}")
        raise typer.Exit()


@app.callback()
def callback(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """buildlogic: composable build conventions for project modules."""
    setup_logging(get_config())


def _parse_value(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def _parse_pairs(pairs: list[str], option: str) -> dict[str, str]:
    parsed: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"expected KEY=VALUE, got '{pair}'", param_hint=option)
        parsed[key.strip()] = value.strip()
    return parsed


def parse_overrides(assignments: list[str]) -> dict[str, dict[str, Any]]:
    """Parse ``concern.field=value`` assignments into request overrides.

    Values are read as JSON when possible (34, true, ["a"]) and as plain
    strings otherwise.
    """
    overrides: dict[str, dict[str, Any]] = {}
    for name, raw in _parse_pairs(assignments, "--set").items():
        concern, dot, field = name.partition(".")
        if not dot or not field:
            raise typer.BadParameter(f"expected CONCERN.FIELD=VALUE, got '{name}'", param_hint="--set")
        overrides.setdefault(concern, {})[field] = _parse_value(raw)
    return overrides


def _build_resolver(versions_path: Path | None, lenient: bool, verbose: bool) -> CompositionResolver:
    config = get_config()
    if verbose:
        config = config.model_copy(update={"log_level": "DEBUG"})
    setup_logging(config)

    path = versions_path or config.engine.version_table_path
    versions = load_version_table(path) if path else VersionTable()
    return CompositionResolver(
        build_default_registry(),
        versions,
        config=config,
        strict=False if lenient else None,
    )


def _print_final(final: FinalConfiguration) -> None:
    console.print(f"\n[bold green]✓ Resolved {final.target}[/bold green]")
    console.print(f"[bold]Shape:[/bold] {final.shape.value if final.shape else 'none'}")
    console.print(f"[bold]Capabilities:[/bold] {', '.join(final.capabilities)}\n")

    table = Table(title="Build Concerns")
    table.add_column("Concern", style="cyan")
    table.add_column("Settings")

    for key, concern in final.concerns().items():
        if key == "dependencies":
            settings = "\n".join(d.declaration for d in concern.declarations)  # type: ignore[attr-defined]
        else:
            values = concern.model_dump(mode="json", exclude_defaults=True)
            settings = "\n".join(f"{name} = {value}" for name, value in values.items())
        table.add_row(key, escape(settings) if settings else "[dim]defaults[/dim]")

    console.print(table)


@app.command()
def resolve(
    target: str = typer.Argument(..., help="Project path of the target (e.g., :core:ui)"),
    modules: list[str] = typer.Option(
        ...,
        "--module",
        "-m",
        help="Convention identifier to apply; repeat in declared order",
    ),
    versions: Optional[Path] = typer.Option(
        None,
        "--versions",
        help="Version table (.properties, .env or libs.versions.toml)",
        exists=True,
        dir_okay=False,
    ),
    assignments: Optional[list[str]] = typer.Option(
        None,
        "--set",
        "-s",
        help="Override a field, e.g. compile_options.target_sdk=34",
    ),
    properties: Optional[list[str]] = typer.Option(
        None,
        "--property",
        "-P",
        help="Project property, e.g. warningsAsErrors=true",
    ),
    project_dir: Optional[str] = typer.Option(None, "--project-dir", help="Target directory"),
    as_json: bool = typer.Option(False, "--json", help="Print the final configuration as JSON"),
    lenient: bool = typer.Option(False, "--lenient", help="Warn instead of failing on conflicting writes"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose logging"),
) -> None:
    """Resolve conventions for one target and print its final configuration."""
    try:
        request = ResolutionRequest(
            target=TargetModule(
                path=target,
                project_dir=project_dir,
                properties=_parse_pairs(properties or [], "--property"),
            ),
            identifiers=modules,
            overrides=parse_overrides(assignments or []),
        )
        final = _build_resolver(versions, lenient, verbose).resolve(request)
    except PydanticValidationError as e:
        console.print(f"[bold red]✗ Invalid request:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)
    except BuildLogicError as e:
        console.print(f"[bold red]✗ Resolution failed![/bold red]\n{escape(str(e))}")
        raise typer.Exit(1)

    if as_json:
        typer.echo(final.model_dump_json(indent=2))
    else:
        _print_final(final)


@app.command()
def batch(
    requests_file: Path = typer.Argument(
        ...,
        help="JSON file holding a list of resolution requests",
        exists=True,
        dir_okay=False,
        resolve_path=True,
    ),
    versions: Optional[Path] = typer.Option(None, "--versions", exists=True, dir_okay=False),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", min=1, help="Parallel resolutions"),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Directory to write one <target>.json per resolved target",
        file_okay=False,
    ),
) -> None:
    """Resolve many independent targets in parallel."""
    try:
        requests = TypeAdapter(list[ResolutionRequest]).validate_json(requests_file.read_bytes())
        resolver = _build_resolver(versions, False, False)
    except PydanticValidationError as e:
        console.print(f"[bold red]✗ Invalid requests file:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)
    except BuildLogicError as e:
        console.print(f"[bold red]✗ {escape(str(e))}[/bold red]")
        raise typer.Exit(1)

    results = resolver.resolve_many(requests, max_workers=workers)

    table = Table(title="Batch Results")
    table.add_column("Target", style="cyan")
    table.add_column("Status")
    table.add_column("Modules")
    table.add_column("Duration")

    for request, result in zip(requests, results):
        status = "[green]OK[/green]" if result.success else f"[red]FAILED[/red] {escape(result.error or '')}"
        applied = result.metadata.get("applied", [])
        table.add_row(request.target.path, status, ", ".join(applied), f"{result.duration_ms:.1f}ms")
        if output and result.success and result.data is not None:
            output.mkdir(parents=True, exist_ok=True)
            name = request.target.path.strip(":").replace(":", "_") or "root"
            (output / f"{name}.json").write_text(result.data.model_dump_json(indent=2))

    console.print(table)
    if not all(r.success for r in results):
        raise typer.Exit(1)


@app.command()
def plan(
    identifiers: list[str] = typer.Argument(..., help="Convention identifiers, in declared order"),
) -> None:
    """Show the order conventions would be applied in, without applying them."""
    registry = build_default_registry()
    resolver = CompositionResolver(registry, VersionTable())
    try:
        order = resolver.plan(identifiers)
    except BuildLogicError as e:
        console.print(f"[bold red]✗ {escape(str(e))}[/bold red]")
        raise typer.Exit(1)

    for position, identifier in enumerate(order, start=1):
        requested = "" if identifier in identifiers else " [dim](prerequisite)[/dim]"
        console.print(f"  {position}. {identifier}{requested}")


@app.command()
def modules() -> None:
    """List the built-in conventions."""
    registry = build_default_registry()

    table = Table(title="Conventions")
    table.add_column("Identifier", style="cyan")
    table.add_column("Prerequisites")
    table.add_column("Shapes")
    table.add_column("Description")

    for module in registry:
        if module.shape is not None:
            shapes = f"establishes {module.shape.value}"
        elif module.allowed_shapes is not None:
            shapes = ", ".join(sorted(s.value for s in module.allowed_shapes))
        else:
            shapes = "any"
        table.add_row(module.identifier, ", ".join(module.prerequisites) or "-", shapes, module.description)

    console.print(table)


@app.command()
def config() -> None:
    """Show current configuration."""
    cfg = get_config()

    table = Table(title="Current Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("Log Level", cfg.log_level)
    table.add_row("Version Table", str(cfg.engine.version_table_path or "built-in defaults"))
    table.add_row("Strict Overwrites", str(cfg.engine.strict_overwrites))
    table.add_row("Max Workers", str(cfg.engine.max_workers))
    for name, value in cfg.project.as_properties().items():
        table.add_row(name, value)

    console.print(table)

    console.print("\n[dim]Configure via environment variables:[/dim]")
    console.print("  BUILDLOGIC_LOG_LEVEL, BUILDLOGIC_VERSION_TABLE, BUILDLOGIC_STRICT_OVERWRITES")
    console.print("  BUILDLOGIC_MAX_WORKERS, BUILDLOGIC_WARNINGS_AS_ERRORS")
    console.print("  BUILDLOGIC_COMPOSE_METRICS, BUILDLOGIC_COMPOSE_REPORTS")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
