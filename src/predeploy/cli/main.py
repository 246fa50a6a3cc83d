#!/usr/bin/env python3
"""predeploy CLI - Main entry point"""

from pathlib import Path

import click
from rich.console import Console

from predeploy.config.manager import ConfigManager

console = Console()


@click.group()
@click.option("--config", type=click.Path(), help="Config file path")
@click.option("-v", "--verbose", is_flag=True, help="Echo every command and download")
@click.pass_context
def cli(ctx, config, verbose):
    """predeploy - EKS security workshop tool bootstrapper"""
    ctx.ensure_object(dict)

    config_manager = ConfigManager(Path(config) if config else None)
    try:
        ctx.obj["config"] = config_manager.load()
    except ValueError as e:
        raise click.UsageError(str(e))
    ctx.obj["verbose"] = verbose


@cli.command()
def version():
    """Show version information"""
    from predeploy import __version__

    console.print(f"predeploy version {__version__}")


# Import subcommands
from predeploy.cli import bootstrap, verify

cli.add_command(bootstrap.bootstrap)
cli.add_command(verify.verify)
cli.add_command(verify.probe)


if __name__ == "__main__":
    cli()
