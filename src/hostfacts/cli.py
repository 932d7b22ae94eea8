"""
hostfacts CLI - command-line interface for inspecting plugins.

Commands discover plugin files, load them the way the collector does, and
show which plugin provides which attributes.
"""

from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from hostfacts.logging_config import setup_logging

app = typer.Typer(
    name="hostfacts",
    help="hostfacts - host fact collection through file-based plugins",
    no_args_is_help=True,
)

console = Console()


def _plugin_table(plugin_types) -> Table:
    table = Table(title="Plugins")
    table.add_column("Plugin", style="bold")
    table.add_column("Provides")
    table.add_column("Sources")
    for plugin_type in plugin_types:
        table.add_row(
            plugin_type.plugin_name,
            ", ".join(plugin_type.provides_attrs),
            "\n".join(plugin_type.sources),
        )
    return table


@app.command()
def discover(
    path: Optional[List[str]] = typer.Option(
        None, "--path", "-p", help="Plugin directory (repeatable, defaults to plugin_path)"
    ),
    log_level: Optional[str] = typer.Option(None, help="Log level (defaults to HOSTFACTS_LOG_LEVEL)"),
) -> None:
    """List plugin files found under the plugin directories."""
    from hostfacts.system import System

    setup_logging(level=log_level)

    system = System()
    plugin_files = system.loader.plugin_files_by_dir(path or None)

    if not plugin_files:
        console.print("[yellow]No plugin files found[/yellow]")
        raise typer.Exit(0)

    console.print(f"Found {len(plugin_files)} plugin file(s)\n")
    for plugin_file in plugin_files:
        console.print(f"  {plugin_file.path}  [dim](root: {plugin_file.plugin_root})[/dim]")


@app.command()
def plugins(
    path: Optional[List[str]] = typer.Option(
        None, "--path", "-p", help="Extra plugin directory to load (repeatable)"
    ),
    log_level: Optional[str] = typer.Option(None, help="Log level (defaults to HOSTFACTS_LOG_LEVEL)"),
) -> None:
    """
    Load all plugins and show what each one provides.

    Extra directories given with --path are loaded on top of the configured
    plugin_path.
    """
    from hostfacts.system import System

    setup_logging(level=log_level)

    system = System()
    system.load_plugins()
    if path:
        system.loader.load_additional(path)

    plugin_types = system.loader.plugin_types
    if not plugin_types:
        console.print("[yellow]No plugins loaded[/yellow]")
        raise typer.Exit(0)

    console.print(_plugin_table(plugin_types))
    console.print(f"\nInstances registered: {len(system.provides_map.all_plugins())}")


@app.command("load-plugin")
def load_plugin(
    path: str = typer.Argument(..., help="Path to a single plugin file"),
    log_level: Optional[str] = typer.Option(None, help="Log level (defaults to HOSTFACTS_LOG_LEVEL)"),
) -> None:
    """Load one plugin file outside normal discovery and report the result."""
    from hostfacts.exceptions import IllegalPluginType
    from hostfacts.system import System

    setup_logging(level=log_level)

    system = System()
    try:
        plugin = system.loader.load_plugin(path)
    except IllegalPluginType as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if plugin is None:
        console.print(f"[bold red]Error:[/bold red] No plugin loaded from {path}")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] Loaded {type(plugin).plugin_name}")
    console.print(f"  Provides: {', '.join(type(plugin).provides_attrs) or 'N/A'}")
    console.print(f"  Depends: {', '.join(type(plugin).depends_attrs) or 'N/A'}")


def main() -> None:
    """Entry point for the hostfacts console script."""
    app()


if __name__ == "__main__":
    main()
