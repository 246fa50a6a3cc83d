"""Package backends for the supported OS families"""

from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from ..downloads.client import DownloadClient
from .commands import CommandRunner
from .errors import UnsupportedOSError
from .probe import EnvironmentInfo

DEBIAN_FAMILY = ("ubuntu",)
RPM_FAMILY = ("centos", "rhel", "fedora", "amzn")

@dataclass(frozen=True)
class AptRepository:
    """A vendor APT source signed by its own keyring"""

    name: str
    key_url: str
    url: str
    suite: str
    component: str = "main"

    def keyring_name(self) -> str:
        return f"{self.name}-archive-keyring.gpg"

    def source_line(self, keyring_dir: Path) -> str:
        keyring = Path(keyring_dir) / self.keyring_name()
        return f"deb [signed-by={keyring}] {self.url} {self.suite} {self.component}\n"

class PackageBackend:
    """Index refresh, install and repository registration for one OS family"""

    def __init__(self, runner: CommandRunner, client: DownloadClient):
        self.runner = runner
        self.client = client

    def refresh_index(self) -> None:
        raise NotImplementedError

    def install(self, packages: Sequence[str]) -> None:
        raise NotImplementedError

    def add_repository(self, repository) -> None:
        raise NotImplementedError

class AptBackend(PackageBackend):
    """Debian family, apt-get"""

    def __init__(
        self,
        runner: CommandRunner,
        client: DownloadClient,
        sources_dir: Path = Path("/etc/apt/sources.list.d"),
        keyring_dir: Path = Path("/usr/share/keyrings"),
    ):
        super().__init__(runner, client)
        self.sources_dir = Path(sources_dir)
        self.keyring_dir = Path(keyring_dir)

    def refresh_index(self) -> None:
        self.runner.run_privileged(["apt-get", "update"])

    def install(self, packages: Sequence[str]) -> None:
        if not packages:
            return
        self.runner.run_privileged(["apt-get", "install", "-y", *packages])

    def add_repository(self, repository: AptRepository) -> None:
        """Install the vendor keyring and write its source list"""
        self.install_keyring(repository.key_url, repository.keyring_name())
        self.write_source(repository.name, repository.source_line(self.keyring_dir))

    def install_keyring(self, key_url: str, keyring_name: str) -> Path:
        """Fetch an armored key and dearmor it into the keyring directory"""
        keyring = self.keyring_dir / keyring_name
        key = self.client.fetch_bytes(key_url)
        self.runner.run_privileged(["mkdir", "-p", str(self.keyring_dir)])
        self.runner.run_privileged(
            ["gpg", "--batch", "--yes", "--dearmor", "-o", str(keyring)],
            input=key,
        )
        return keyring

    def write_source(self, name: str, line: str) -> Path:
        path = self.sources_dir / f"{name}.list"
        self.runner.run_privileged(["tee", str(path)], input=line.encode())
        return path

    def remove_source(self, name: str) -> None:
        self.runner.run_privileged(["rm", "-f", str(self.sources_dir / f"{name}.list")])

class YumBackend(PackageBackend):
    """RPM family, yum"""

    def refresh_index(self) -> None:
        # yum refreshes its metadata on install
        pass

    def install(self, packages: Sequence[str]) -> None:
        if not packages:
            return
        self.runner.run_privileged(["yum", "install", "-y", *packages])

    def add_repository(self, repository: str) -> None:
        self.runner.run_privileged(["yum-config-manager", "--add-repo", repository])

def backend_for(
    env: EnvironmentInfo,
    runner: CommandRunner,
    client: DownloadClient,
    apt_config: dict = None,
    tool: str = "",
) -> PackageBackend:
    """Pick the package backend for the detected OS"""
    if env.os_id in DEBIAN_FAMILY:
        apt_config = apt_config or {}
        return AptBackend(
            runner,
            client,
            sources_dir=Path(apt_config.get("sources_dir", "/etc/apt/sources.list.d")),
            keyring_dir=Path(apt_config.get("keyring_dir", "/usr/share/keyrings")),
        )
    if env.os_id in RPM_FAMILY:
        return YumBackend(runner, client)
    raise UnsupportedOSError(env.os_id, tool)
