"""Bootstrap command: install whatever workshop tools are missing"""

import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from predeploy.downloads.client import DownloadClient
from predeploy.installer.bootstrap import run_bootstrap, shell_exports
from predeploy.installer.commands import CommandRunner
from predeploy.installer.context import InstallContext
from predeploy.installer.errors import BootstrapAbort, EntryGuardError
from predeploy.installer.interrupt import CancellationToken
from predeploy.installer.probe import probe_environment

# stdout is reserved for the shell statements the caller evaluates
console = Console(stderr=True)

EVAL_HINT = 'eval "$(predeploy bootstrap)"'


def stdout_is_terminal() -> bool:
    return sys.stdout.isatty()


def ensure_eval_mode() -> None:
    """Refuse to run when nothing will evaluate our stdout"""
    if stdout_is_terminal():
        raise EntryGuardError(
            "This command must be evaluated by your shell to work correctly "
            f"(e.g. '{EVAL_HINT}'), or run it with --no-eval"
        )


@click.command()
@click.option("--dry-run", is_flag=True, help="Report what would be installed without installing")
@click.option("--no-eval", is_flag=True, help="Do not emit shell statements for eval")
@click.pass_context
def bootstrap(ctx, dry_run, no_eval):
    """Install missing workshop tools (run as: eval "$(predeploy bootstrap)")"""
    cfg = ctx.obj["config"]
    verbose = ctx.obj["verbose"]

    emit_shell = not (no_eval or dry_run)
    try:
        if emit_shell:
            ensure_eval_mode()

        with CancellationToken(console) as token:
            env = probe_environment(Path(cfg["os_release_path"]))
            console.print(f"Operating System detected: {env.os_id}.")

            install_ctx = InstallContext(
                env=env,
                config=cfg,
                runner=CommandRunner(
                    use_sudo=cfg["use_sudo"], console=console, verbose=verbose
                ),
                client=DownloadClient(
                    timeout=cfg["downloads"]["timeout"], console=console, verbose=verbose
                ),
                token=token,
                console=console,
            )
            report = run_bootstrap(install_ctx, dry_run=dry_run)

    except BootstrapAbort as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(1)

    if emit_shell:
        for line in shell_exports(Path(cfg["install_dir"])):
            click.echo(line)

    sys.exit(report.exit_code)
