"""Shared fixtures: fake command runner and download client"""

import io
import subprocess
from pathlib import Path

import pytest
from rich.console import Console

from predeploy.config.manager import ConfigManager
from predeploy.downloads.client import DownloadClient, DownloadError, NotFoundError
from predeploy.installer.commands import CommandRunner
from predeploy.installer.context import InstallContext
from predeploy.installer.interrupt import CancellationToken
from predeploy.installer.probe import EnvironmentInfo


class FakeRunner(CommandRunner):
    """Records commands instead of running them"""

    def __init__(self, console, fail_on=()):
        super().__init__(use_sudo=False, console=console)
        self.fail_on = [tuple(prefix) for prefix in fail_on]
        self.calls = []
        self.inputs = []

    def _execute(self, cmd, cwd, input):
        self.calls.append(cmd)
        self.inputs.append(input)
        for prefix in self.fail_on:
            if tuple(cmd[: len(prefix)]) == prefix:
                return subprocess.CompletedProcess(cmd, 1, stdout=None, stderr=b"boom")
        return subprocess.CompletedProcess(cmd, 0, stdout=None, stderr=b"")

    def commands(self):
        return [" ".join(c) for c in self.calls]


class FakeClient(DownloadClient):
    """Serves canned responses keyed by URL"""

    def __init__(self, console, texts=None, files=None, fail=()):
        super().__init__(console=console)
        self.texts = texts or {}
        self.files = files or {}
        self.fail = set(fail)
        self.requested = []

    def fetch_text(self, url):
        return self.fetch_bytes(url).decode()

    def fetch_bytes(self, url):
        self.requested.append(url)
        if url in self.fail:
            raise DownloadError(f"Download failed: {url}")
        if url in self.texts:
            return self.texts[url].encode()
        if url in self.files:
            return self.files[url]
        raise NotFoundError(f"Not found: {url}")

    def download(self, url, dest):
        Path(dest).write_bytes(self.fetch_bytes(url))
        return dest


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("PREDEPLOY_INSTALL_DIR", "PREDEPLOY_USE_SUDO", "PREDEPLOY_DOWNLOAD_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=200)


@pytest.fixture
def output(console):
    """Text printed to the test console so far"""
    return lambda: console.file.getvalue()


@pytest.fixture
def config(tmp_path):
    cfg = ConfigManager(tmp_path / "absent.yaml").load()
    apt_dir = tmp_path / "etc" / "apt"
    (apt_dir / "sources.list.d").mkdir(parents=True)
    cfg["install_dir"] = str(tmp_path / "bin")
    cfg["apt"] = {
        "config_dir": str(apt_dir),
        "sources_dir": str(apt_dir / "sources.list.d"),
        "keyring_dir": str(tmp_path / "keyrings"),
    }
    return cfg


@pytest.fixture
def make_ctx(config, console):
    """Build an InstallContext around fakes"""

    def _make(os_id="ubuntu", architecture="x86_64", codename="jammy",
              fail_on=(), texts=None, files=None, fail_downloads=()):
        env = EnvironmentInfo(
            architecture=architecture, os_id=os_id, kernel="Linux", codename=codename
        )
        return InstallContext(
            env=env,
            config=config,
            runner=FakeRunner(console, fail_on=fail_on),
            client=FakeClient(console, texts=texts, files=files, fail=fail_downloads),
            token=CancellationToken(console),
            console=console,
        )

    return _make
