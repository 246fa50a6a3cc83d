"""External command execution"""

import os
import signal
import subprocess
from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console
from rich.markup import escape


class CommandError(Exception):
    """External command exited non-zero"""

    def __init__(self, cmd: Sequence[str], returncode: int, stderr: str = ""):
        super().__init__(f"Command failed with code {returncode}: {' '.join(cmd)}")
        self.cmd = list(cmd)
        self.returncode = returncode
        self.stderr = stderr


def _shield_from_terminal_signals() -> None:
    # Ctrl-C and hangup reach the whole foreground process group; the
    # child must be left to finish its transaction.
    signal.signal(signal.SIGINT, signal.SIG_IGN)
    signal.signal(signal.SIGHUP, signal.SIG_IGN)


class CommandRunner:
    """Run external commands, escalating through sudo when asked to"""

    def __init__(
        self,
        use_sudo: bool = True,
        console: Optional[Console] = None,
        verbose: bool = False,
    ):
        self.use_sudo = use_sudo and os.geteuid() != 0
        self.console = console or Console(stderr=True)
        self.verbose = verbose

    def run(
        self,
        cmd: Sequence[str],
        cwd: Optional[Path] = None,
        check: bool = True,
        input: Optional[bytes] = None,
    ) -> subprocess.CompletedProcess:
        """Run a command and return the result."""
        if self.verbose:
            self.console.print(f"[dim]Running: {' '.join(cmd)}[/dim]")

        try:
            result = self._execute(list(cmd), cwd=cwd, input=input)
        except OSError as e:
            # missing executable (unzip, gpg, sudo) on a minimal host
            self.console.print(f"[red]Cannot run {escape(cmd[0])}: {escape(str(e))}[/red]")
            raise CommandError(cmd, 127, str(e)) from e

        if check and result.returncode != 0:
            stderr = result.stderr.decode(errors="replace") if result.stderr else ""
            self.console.print(f"[red]Command failed with code {result.returncode}[/red]")
            if stderr:
                self.console.print(f"[red]stderr: {escape(stderr.strip())}[/red]")
            raise CommandError(cmd, result.returncode, stderr)

        return result

    def run_privileged(
        self,
        cmd: Sequence[str],
        cwd: Optional[Path] = None,
        check: bool = True,
        input: Optional[bytes] = None,
    ) -> subprocess.CompletedProcess:
        """Run a command as root."""
        if self.use_sudo:
            cmd = ["sudo", *cmd]
        return self.run(cmd, cwd=cwd, check=check, input=input)

    def _execute(
        self, cmd: list, cwd: Optional[Path], input: Optional[bytes]
    ) -> subprocess.CompletedProcess:
        # Package managers print progress; only stderr is captured.
        return subprocess.run(
            cmd,
            cwd=cwd,
            input=input,
            stdout=self._stdout_sink(),
            stderr=subprocess.PIPE,
            check=False,
            preexec_fn=_shield_from_terminal_signals,
        )

    def _stdout_sink(self):
        # stdout of this process is evaluated by the calling shell.
        return subprocess.DEVNULL if not self.verbose else 2
