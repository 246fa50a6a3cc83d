"""Bootstrap sequencer: make sure every workshop tool is installed."""

import enum
import os
import shlex
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Mapping, Optional

from rich.markup import escape

from ..downloads.client import DownloadError
from .commands import CommandError
from .context import InstallContext
from .errors import InstallError
from .tools import INSTALLERS, TOOL_ORDER, Installer, Tool


class Outcome(enum.Enum):
    PRESENT = "present"
    INSTALLED = "installed"
    FAILED = "failed"
    PLANNED = "planned"


@dataclass
class ToolOutcome:
    tool: Tool
    outcome: Outcome
    detail: str = ""


@dataclass
class BootstrapReport:
    outcomes: List[ToolOutcome] = field(default_factory=list)

    def add(self, tool: Tool, outcome: Outcome, detail: str = "") -> None:
        self.outcomes.append(ToolOutcome(tool, outcome, detail))

    @property
    def installed(self) -> List[Tool]:
        return [o.tool for o in self.outcomes if o.outcome is Outcome.INSTALLED]

    @property
    def failed(self) -> List[Tool]:
        return [o.tool for o in self.outcomes if o.outcome is Outcome.FAILED]

    @property
    def exit_code(self) -> int:
        return 1 if self.failed else 0


def is_installed(tool: Tool, which: Optional[Callable[[str], Optional[str]]] = None) -> bool:
    """Check if a tool resolves on the executable search path."""
    which = which or shutil.which
    return which(tool.command) is not None


def check_tool(
    ctx: InstallContext,
    tool: Tool,
    installer: Installer,
    report: BootstrapReport,
    which: Optional[Callable[[str], Optional[str]]] = None,
    dry_run: bool = False,
) -> None:
    """Install one tool if it is missing, then honour a pending interrupt."""
    name = tool.command

    if is_installed(tool, which):
        ctx.console.print(f"{name} is already installed.")
        report.add(tool, Outcome.PRESENT)
    elif dry_run:
        ctx.console.print(f"{name} could not be found. [cyan]Would install {name}.[/cyan]")
        report.add(tool, Outcome.PLANNED)
    else:
        ctx.console.print(f"{name} could not be found. Installing {name}...")
        try:
            installer(ctx)
            report.add(tool, Outcome.INSTALLED)
        except (InstallError, CommandError, DownloadError) as e:
            ctx.console.print(f"[red]✗ {tool.display_name} installation failed: {escape(str(e))}[/red]")
            report.add(tool, Outcome.FAILED, str(e))

    ctx.token.checkpoint(f"checking {name}")


def run_bootstrap(
    ctx: InstallContext,
    installers: Mapping[Tool, Installer] = INSTALLERS,
    which: Optional[Callable[[str], Optional[str]]] = None,
    dry_run: bool = False,
) -> BootstrapReport:
    """Check and install every required tool in order.

    Fatal errors (unsupported OS, interrupt) propagate and end the run;
    per-tool failures are recorded in the report and the next tool is tried.
    """
    ctx.console.print("[bold cyan]Checking and installing required binaries...[/bold cyan]")
    report = BootstrapReport()

    for tool in TOOL_ORDER:
        check_tool(ctx, tool, installers[tool], report, which=which, dry_run=dry_run)

    if report.failed:
        names = ", ".join(t.command for t in report.failed)
        ctx.console.print(f"\n[yellow]⚠ Some tools could not be installed: {names}[/yellow]")
    else:
        ctx.console.print(
            "\n[green]✓ Pre-deployment checks and installations are complete.[/green]"
        )
    return report


def shell_exports(install_dir: Path, path_env: Optional[str] = None) -> List[str]:
    """Shell statements that make freshly installed tools usable"""
    if path_env is None:
        path_env = os.environ.get("PATH", "")

    lines = []
    if str(install_dir) not in path_env.split(os.pathsep):
        lines.append(f"export PATH={shlex.quote(str(install_dir))}:\"$PATH\"")
    # drop the shell's cached lookups of missing commands
    lines.append("hash -r")
    return lines
