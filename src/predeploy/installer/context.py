"""Everything an installer needs, passed explicitly"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

from rich.console import Console

from ..downloads.client import DownloadClient
from .backends import PackageBackend, backend_for
from .commands import CommandRunner
from .interrupt import CancellationToken
from .probe import EnvironmentInfo


@dataclass
class InstallContext:
    env: EnvironmentInfo
    config: Dict[str, Any]
    runner: CommandRunner
    client: DownloadClient
    token: CancellationToken
    console: Console = field(default_factory=lambda: Console(stderr=True))

    @property
    def install_dir(self) -> Path:
        return Path(self.config["install_dir"])

    @property
    def urls(self) -> Dict[str, str]:
        return self.config["urls"]

    def backend(self, tool: str = "") -> PackageBackend:
        """Package backend for this OS; raises UnsupportedOSError naming tool"""
        return backend_for(
            self.env, self.runner, self.client, self.config.get("apt"), tool=tool
        )
