#!/usr/bin/env python3

"""Command line entry point: `gozilla generate module NAME`."""

from pathlib import Path
from typing import NoReturn

import typer
from jinja2 import StrictUndefined, Template
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax

from gozilla.config import load_config
from gozilla.exceptions import AnchorError, GozillaError
from gozilla.project import detect_project
from gozilla.utils.log import add_file_handler, logger
from gozilla.wiring import ContainerUpdater, ModuleNames, Outcome, validate_module_name

_console = Console(highlight=False)
_err_console = Console(stderr=True, highlight=False)

_HELP_TEXT = """Keep the dependency container of a gozilla Go project wired."""

_MODULE_HELP_TEXT = """Wire a feature module into [bold]container.go[/bold].

Adds the module import, the container field, the constructor entry and the
route registration, whichever of them are missing. Running it again for the
same module changes nothing.

Examples:

[bold green]gozilla generate module users[/bold green]

[bold green]gozilla g mod orders --depends=users[/bold green]

[bold green]gozilla g m products --depends=users,categories --dry-run[/bold green]
"""

_CONFIG_SPEC_HELP_TEXT = """Config files or key-value pairs, merged over [bold]gozilla.yaml[/bold].

Examples: [bold green]-c wiring.strict=false[/bold green], [bold green]-c wiring.route_group=v1[/bold green]
"""

_OUTCOME_STYLE = {
    Outcome.INSERTED: "green",
    Outcome.ALREADY_PRESENT: "dim",
    Outcome.ANCHOR_NOT_FOUND: "yellow",
    Outcome.SHAPE_MISMATCH: "yellow",
}

app = typer.Typer(rich_markup_mode="rich", add_completion=False, help=_HELP_TEXT, no_args_is_help=True)
generate_app = typer.Typer(rich_markup_mode="rich", help="Generate code components", no_args_is_help=True)
app.add_typer(generate_app, name="generate")
app.add_typer(generate_app, name="g", hidden=True)


def _fail(error: Exception) -> NoReturn:
    logger.debug("Command failed", exc_info=error)
    _err_console.print(f"[bold red]Error:[/bold red] {escape(str(error))}")
    raise typer.Exit(code=1)


def _parse_dependencies(depends: list[str]) -> list[str]:
    names = [part for value in depends for part in value.split(",") if part.strip()]
    return [validate_module_name(name) for name in names]


# fmt: off
@generate_app.command("module", help=_MODULE_HELP_TEXT)
def generate_module(
    name: str = typer.Argument(..., help="Module name, e.g. 'orders'"),
    depends: list[str] = typer.Option([], "--depends", help="Modules this one depends on (comma-separated)"),
    project_dir: Path = typer.Option(Path("."), "--project-dir", "-p", help="Project root", rich_help_panel="Advanced"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show the change without writing it"),
    config_spec: list[str] = typer.Option([], "-c", "--config", help=_CONFIG_SPEC_HELP_TEXT, rich_help_panel="Advanced"),
    log_file: Path | None = typer.Option(None, "--log-file", help="Also write a debug log here", rich_help_panel="Advanced"),
) -> None:
    # fmt: on
    if log_file is not None:
        add_file_handler(log_file)
    try:
        module = validate_module_name(name)
        dependencies = _parse_dependencies(depends)
        config = load_config(project_dir, config_spec)
        project = detect_project(project_dir, config.project)
        updater = ContainerUpdater(config.wiring)
        names = ModuleNames.derive(module, project.module_path, config.project.modules_dir)

        _console.print(f"Generating module: [bold]{module}[/bold]")
        if dependencies:
            _console.print(f"Dependencies: {', '.join(dependencies)}")
            try:
                wired = set(updater.registered_modules(project.container_path))
            except AnchorError as e:
                if config.wiring.strict:
                    raise
                _console.print(f"  [yellow]WARN[/yellow]  cannot check dependencies: {escape(str(e))}")
            else:
                for dependency in dependencies:
                    if ModuleNames.derive(dependency, project.module_path).field not in wired:
                        _console.print(
                            f"  [yellow]WARN[/yellow]  dependency '{dependency}' is not wired into the container yet"
                        )

        report = updater.add_module(
            project.container_path,
            module,
            module_path=project.module_path,
            modules_dir=config.project.modules_dir,
            dry_run=dry_run,
        )
    except (GozillaError, OSError, ValueError) as e:
        _fail(e)

    for result in report.results:
        style = _OUTCOME_STYLE[result.outcome]
        _console.print(f"  [{style}]{result.outcome.value:<16}[/{style}] {result.anchor.value:<12} {escape(result.key)}")
    if dry_run and report.changed:
        _console.print(Syntax(report.diff(), "diff", theme="ansi_dark"))
    summary = Template(config.summary_template, undefined=StrictUndefined).render(
        report=report,
        names=names,
        modules_dir=config.project.modules_dir,
    )
    _console.print()
    _console.print(escape(summary))


generate_app.command("mod", hidden=True)(generate_module)
generate_app.command("m", hidden=True)(generate_module)


@app.command("modules", help="List the modules wired into the container")
def list_modules(
    project_dir: Path = typer.Option(Path("."), "--project-dir", "-p", help="Project root"),
    config_spec: list[str] = typer.Option([], "-c", "--config", help=_CONFIG_SPEC_HELP_TEXT),
) -> None:
    try:
        config = load_config(project_dir, config_spec)
        project = detect_project(project_dir, config.project)
        fields = ContainerUpdater(config.wiring).registered_modules(project.container_path)
    except (GozillaError, OSError, ValueError) as e:
        _fail(e)
    for field_name in fields:
        if field_name.endswith("Module"):
            _console.print(field_name)


if __name__ == "__main__":
    app()
