"""The five workshop tools and how each one is installed"""

import enum
import tarfile
import tempfile
from pathlib import Path
from typing import Callable, Dict

from .backends import AptBackend, AptRepository
from .commands import CommandError
from .context import InstallContext
from .errors import InstallError, UnsupportedArchitectureError
from .repair import run_repair


class Tool(enum.Enum):
    """Required tools; the value is the command looked up on PATH"""

    AWS = "aws"
    EKSCTL = "eksctl"
    KUBECTL = "kubectl"
    TERRAFORM = "terraform"
    JQ = "jq"

    @property
    def command(self) -> str:
        return self.value

    @property
    def display_name(self) -> str:
        return DISPLAY_NAMES[self]


DISPLAY_NAMES = {
    Tool.AWS: "AWS CLI",
    Tool.EKSCTL: "eksctl",
    Tool.KUBECTL: "kubectl",
    Tool.TERRAFORM: "Terraform",
    Tool.JQ: "jq",
}

TOOL_ORDER = (Tool.AWS, Tool.EKSCTL, Tool.KUBECTL, Tool.TERRAFORM, Tool.JQ)

KUBECTL_ARCHITECTURES = {"x86_64": "amd64", "aarch64": "arm64"}


def _finish(ctx: InstallContext, tool: Tool) -> None:
    ctx.console.print(f"[green]{tool.display_name} installation complete.[/green]")
    ctx.token.checkpoint(f"installing {tool.display_name}")


def install_aws(ctx: InstallContext) -> None:
    """AWS CLI v2 from the vendor's zip bundle"""
    url = ctx.urls["aws_cli"].format(arch=ctx.env.architecture)

    # archive and extracted tree are removed whatever happens
    with tempfile.TemporaryDirectory(prefix="awscli-") as tmp:
        archive = Path(tmp) / "awscliv2.zip"
        ctx.client.download(url, archive)
        ctx.runner.run(["unzip", "-q", str(archive), "-d", tmp])
        ctx.runner.run_privileged([str(Path(tmp) / "aws" / "install")])

    _finish(ctx, Tool.AWS)


def eksctl_platform(kernel: str) -> str:
    # release assets are only looked up for amd64
    return f"{kernel}_amd64"


def install_eksctl(ctx: InstallContext) -> None:
    """Latest eksctl release from GitHub"""
    platform = eksctl_platform(ctx.env.kernel)
    url = ctx.urls["eksctl"].format(platform=platform)

    with tempfile.TemporaryDirectory(prefix="eksctl-") as tmp:
        archive = Path(tmp) / f"eksctl_{platform}.tar.gz"
        ctx.client.download(url, archive)
        try:
            with tarfile.open(archive, "r:gz") as tar:
                try:
                    member = tar.getmember("eksctl")
                except KeyError:
                    raise InstallError(f"eksctl binary missing from {archive.name}")
                if hasattr(tarfile, "data_filter"):
                    tar.extract(member, path=tmp, filter="data")
                else:
                    tar.extract(member, path=tmp)
        except tarfile.TarError as e:
            raise InstallError(f"Cannot unpack {archive.name}: {e}") from e
        archive.unlink()
        ctx.runner.run_privileged(["mv", str(Path(tmp) / "eksctl"), str(ctx.install_dir)])

    _finish(ctx, Tool.EKSCTL)


def kubectl_architecture(machine: str) -> str:
    try:
        return KUBECTL_ARCHITECTURES[machine]
    except KeyError:
        raise UnsupportedArchitectureError(machine)


def install_kubectl(ctx: InstallContext) -> None:
    """Current stable kubectl from the Kubernetes release bucket"""
    arch = kubectl_architecture(ctx.env.architecture)
    version = ctx.client.fetch_text(ctx.urls["kubectl_stable"]).strip()
    url = ctx.urls["kubectl"].format(version=version, arch=arch)

    with tempfile.TemporaryDirectory(prefix="kubectl-") as tmp:
        binary = Path(tmp) / "kubectl"
        ctx.client.download(url, binary)
        ctx.runner.run_privileged(
            [
                "install", "-o", "root", "-g", "root", "-m", "0755",
                str(binary), str(ctx.install_dir / "kubectl"),
            ]
        )

    _finish(ctx, Tool.KUBECTL)


def hashicorp_repository(ctx: InstallContext) -> AptRepository:
    if not ctx.env.codename:
        raise InstallError("Cannot determine the Ubuntu release codename for the HashiCorp repository")
    return AptRepository(
        name="hashicorp",
        key_url=ctx.urls["hashicorp_gpg"],
        url=ctx.urls["hashicorp_apt"],
        suite=ctx.env.codename,
    )


def install_terraform(ctx: InstallContext) -> None:
    """Terraform from HashiCorp's package repositories"""
    backend = ctx.backend("Terraform")

    if isinstance(backend, AptBackend):
        run_repair(ctx, backend)
        try:
            backend.refresh_index()
            backend.install(["gnupg", "software-properties-common", "curl"])
        except CommandError:
            ctx.console.print("[yellow]Warning: could not install repository prerequisites[/yellow]")
        backend.add_repository(hashicorp_repository(ctx))
        try:
            backend.refresh_index()
        except CommandError:
            ctx.console.print(
                "[yellow]Warning: apt-get update reported errors; "
                "attempting to install terraform anyway...[/yellow]"
            )
    else:
        repo_key = "hashicorp_amzn_repo" if ctx.env.os_id == "amzn" else "hashicorp_rhel_repo"
        backend.install(["yum-utils"])
        backend.add_repository(ctx.urls[repo_key])

    try:
        backend.install(["terraform"])
    except CommandError as e:
        ctx.console.print("[red]terraform install failed[/red]")
        raise InstallError("terraform install failed") from e

    _finish(ctx, Tool.TERRAFORM)


def install_jq(ctx: InstallContext) -> None:
    """jq from the OS repositories"""
    backend = ctx.backend("jq")

    if isinstance(backend, AptBackend):
        run_repair(ctx, backend)
        backend.refresh_index()
        backend.install(["jq", "uuid-runtime"])
    else:
        backend.install(["jq"])

    _finish(ctx, Tool.JQ)


Installer = Callable[[InstallContext], None]

INSTALLERS: Dict[Tool, Installer] = {
    Tool.AWS: install_aws,
    Tool.EKSCTL: install_eksctl,
    Tool.KUBECTL: install_kubectl,
    Tool.TERRAFORM: install_terraform,
    Tool.JQ: install_jq,
}
