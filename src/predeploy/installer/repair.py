"""Best-effort repair of a broken Yarn APT source.

Hosts that once installed Yarn from ``dl.yarnpkg.com`` often carry a source
entry whose signing key has expired, which makes every ``apt-get update``
fail. When such an entry is found it is replaced by one signed by a freshly
fetched keyring. Failures are reported through :class:`RepairResult`; they
never stop the bootstrap.
"""

import enum
from dataclasses import dataclass
from pathlib import Path

from rich.markup import escape

from ..downloads.client import DownloadError
from .backends import AptBackend
from .commands import CommandError
from .context import InstallContext

YARN_HOST = "dl.yarnpkg.com"


class RepairStatus(enum.Enum):
    SKIPPED = "skipped"
    REPAIRED = "repaired"
    FAILED = "failed"


@dataclass(frozen=True)
class RepairResult:
    status: RepairStatus
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status is not RepairStatus.FAILED


def references_host(config_dir: Path, host: str) -> bool:
    """True if any file under config_dir mentions host"""
    config_dir = Path(config_dir)
    if not config_dir.is_dir():
        return False
    for path in config_dir.rglob("*"):
        try:
            if path.is_file() and host in path.read_text(errors="ignore"):
                return True
        except OSError:
            continue
    return False


def repair_yarn_source(ctx: InstallContext, backend: AptBackend) -> RepairResult:
    """Replace a Yarn source entry with one signed by a fresh keyring"""
    config_dir = Path(ctx.config["apt"]["config_dir"])
    if not references_host(config_dir, YARN_HOST):
        return RepairResult(RepairStatus.SKIPPED, "no Yarn source configured")

    ctx.console.print("Fixing Yarn APT repo (non-fatal)...")
    try:
        backend.remove_source("yarn")
        keyring = backend.install_keyring(ctx.urls["yarn_gpg"], "yarn-archive-keyring.gpg")
        ctx.console.print("Yarn keyring added.")
        backend.write_source(
            "yarn", f"deb [signed-by={keyring}] {ctx.urls['yarn_apt']} stable main\n"
        )
    except (CommandError, DownloadError, OSError) as e:
        return RepairResult(RepairStatus.FAILED, str(e))

    try:
        backend.refresh_index()
    except CommandError:
        # other sources may still be broken; the repair itself succeeded
        pass
    return RepairResult(RepairStatus.REPAIRED, f"Yarn source re-signed with {keyring}")


def run_repair(ctx: InstallContext, backend: AptBackend) -> RepairResult:
    """Run the repair and report a failure as a warning"""
    result = repair_yarn_source(ctx, backend)
    if not result.ok:
        ctx.console.print(
            f"[yellow]Warning: failed to fix Yarn key; continuing... ({escape(result.message)})[/yellow]"
        )
    return result
