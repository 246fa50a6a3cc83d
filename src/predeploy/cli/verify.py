"""Verification commands"""

import sys
from pathlib import Path

import click
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from predeploy.installer.errors import BootstrapAbort
from predeploy.installer.probe import probe_environment
from predeploy.installer.tools import TOOL_ORDER

console = Console()
err_console = Console(stderr=True)


@click.command()
@click.option("--format", type=click.Choice(["table", "json", "yaml"]), default="table")
def verify(format):
    """Report which workshop tools are on PATH"""
    import shutil

    tools = [
        {"tool": tool.command, "name": tool.display_name, "path": shutil.which(tool.command)}
        for tool in TOOL_ORDER
    ]
    missing = [t["tool"] for t in tools if not t["path"]]

    if format == "json":
        console.print_json(data=tools)
    elif format == "yaml":
        console.print(yaml.dump(tools, default_flow_style=False))
    else:
        table = Table(title="Workshop Tools")
        table.add_column("Tool", style="cyan")
        table.add_column("Name")
        table.add_column("Status")

        for t in tools:
            if t["path"]:
                table.add_row(t["tool"], t["name"], f"[green]✓ {t['path']}[/green]")
            else:
                table.add_row(t["tool"], t["name"], "[red]✗ Missing[/red]")

        console.print(table)

    if missing:
        err_console.print(f"\n[yellow]⚠ Missing: {', '.join(missing)}[/yellow]")
        err_console.print("\n[cyan]To install them:[/cyan]")
        err_console.print('  eval "$(predeploy bootstrap)"')
        sys.exit(1)


@click.command()
@click.pass_context
def probe(ctx):
    """Show the detected OS and CPU architecture"""
    cfg = ctx.obj["config"]

    try:
        env = probe_environment(Path(cfg["os_release_path"]))
    except BootstrapAbort as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(1)

    table = Table(title="Environment", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Architecture", env.architecture)
    table.add_row("OS", env.os_id)
    table.add_row("Kernel", env.kernel)
    table.add_row("Codename", env.codename or "-")
    console.print(table)
