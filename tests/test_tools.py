"""Tests for the per-tool installers, driven against fakes"""

import io
import tarfile
from pathlib import Path

import pytest

from predeploy.installer.commands import CommandError
from predeploy.installer.errors import (
    InstallError,
    Interrupted,
    UnsupportedArchitectureError,
    UnsupportedOSError,
)
from predeploy.installer.tools import (
    INSTALLERS,
    TOOL_ORDER,
    Tool,
    eksctl_platform,
    install_aws,
    install_eksctl,
    install_jq,
    install_kubectl,
    install_terraform,
    kubectl_architecture,
)

STABLE = "https://dl.k8s.io/release/stable.txt"
HASHICORP_GPG = "https://apt.releases.hashicorp.com/gpg"
YARN_KEY = "https://dl.yarnpkg.com/debian/pubkey.gpg"
EKSCTL_URL = "https://github.com/eksctl-io/eksctl/releases/latest/download/eksctl_Linux_amd64.tar.gz"


def eksctl_archive():
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        payload = b"#!/bin/sh\n"
        info = tarfile.TarInfo("eksctl")
        info.size = len(payload)
        info.mode = 0o755
        tar.addfile(info, io.BytesIO(payload))
    return buf.getvalue()


class TestRegistry:
    def test_fixed_order(self):
        assert [t.command for t in TOOL_ORDER] == ["aws", "eksctl", "kubectl", "terraform", "jq"]

    def test_every_tool_has_an_installer(self):
        assert set(INSTALLERS) == set(Tool)


class TestAws:
    @pytest.mark.parametrize("arch", ["x86_64", "aarch64"])
    def test_downloads_platform_bundle_and_cleans_up(self, make_ctx, arch):
        url = f"https://awscli.amazonaws.com/awscli-exe-linux-{arch}.zip"
        ctx = make_ctx(architecture=arch, files={url: b"PK"})
        install_aws(ctx)

        unzip, install = ctx.runner.calls
        assert unzip[:2] == ["unzip", "-q"]
        assert install[0].endswith("/aws/install")
        assert not Path(unzip[2]).exists()
        assert not Path(unzip[4]).exists()

    def test_temp_tree_removed_on_failure(self, make_ctx):
        url = "https://awscli.amazonaws.com/awscli-exe-linux-x86_64.zip"
        ctx = make_ctx(files={url: b"PK"}, fail_on=[["unzip"]])
        with pytest.raises(CommandError):
            install_aws(ctx)
        assert not Path(ctx.runner.calls[0][4]).exists()


class TestEksctl:
    def test_platform_is_kernel_amd64(self):
        assert eksctl_platform("Linux") == "Linux_amd64"

    @pytest.mark.filterwarnings("error::DeprecationWarning")
    def test_extracts_and_moves_binary(self, make_ctx, config):
        ctx = make_ctx(files={EKSCTL_URL: eksctl_archive()})
        install_eksctl(ctx)

        (mv,) = ctx.runner.calls
        assert mv[0] == "mv"
        assert mv[1].endswith("/eksctl")
        assert mv[2] == config["install_dir"]

    def test_corrupt_archive_is_an_install_error(self, make_ctx):
        ctx = make_ctx(files={EKSCTL_URL: b"<html>not a tarball</html>"})
        with pytest.raises(InstallError) as exc:
            install_eksctl(ctx)
        assert "Cannot unpack" in str(exc.value)
        assert ctx.runner.calls == []


class TestKubectl:
    def test_architecture_mapping(self):
        assert kubectl_architecture("x86_64") == "amd64"
        assert kubectl_architecture("aarch64") == "arm64"
        with pytest.raises(UnsupportedArchitectureError):
            kubectl_architecture("mips")

    def test_installs_stable_release(self, make_ctx, config):
        binary = "https://dl.k8s.io/release/v1.31.0/bin/linux/arm64/kubectl"
        ctx = make_ctx(architecture="aarch64", texts={STABLE: "v1.31.0\n"}, files={binary: b"ELF"})
        install_kubectl(ctx)

        (install,) = ctx.runner.calls
        assert install[:7] == ["install", "-o", "root", "-g", "root", "-m", "0755"]
        assert install[8] == str(Path(config["install_dir"]) / "kubectl")
        assert ctx.client.requested == [STABLE, binary]


class TestTerraform:
    def test_ubuntu(self, make_ctx, config):
        ctx = make_ctx(files={HASHICORP_GPG: b"armored"})
        install_terraform(ctx)

        commands = ctx.runner.commands()
        assert commands[0] == "apt-get update"
        assert commands[1] == "apt-get install -y gnupg software-properties-common curl"
        assert commands[-1] == "apt-get install -y terraform"
        source = next(i for c, i in zip(commands, ctx.runner.inputs) if c.startswith("tee"))
        assert b"https://apt.releases.hashicorp.com jammy main" in source

    def test_ubuntu_attempted_after_failed_yarn_repair(self, make_ctx, config, output):
        sources = Path(config["apt"]["sources_dir"])
        (sources / "yarn.list").write_text("deb https://dl.yarnpkg.com/debian/ stable main\n")
        ctx = make_ctx(files={HASHICORP_GPG: b"armored"}, fail_downloads=[YARN_KEY])

        install_terraform(ctx)

        assert "failed to fix Yarn key" in output()
        assert ctx.runner.commands()[-1] == "apt-get install -y terraform"

    def test_ubuntu_index_errors_do_not_stop_install(self, make_ctx, output):
        ctx = make_ctx(files={HASHICORP_GPG: b"armored"}, fail_on=[["apt-get", "update"]])
        install_terraform(ctx)
        assert "attempting to install terraform anyway" in output()
        assert ctx.runner.commands()[-1] == "apt-get install -y terraform"

    @pytest.mark.parametrize(
        "os_id,repo",
        [
            ("centos", "https://rpm.releases.hashicorp.com/RHEL/hashicorp.repo"),
            ("rhel", "https://rpm.releases.hashicorp.com/RHEL/hashicorp.repo"),
            ("fedora", "https://rpm.releases.hashicorp.com/RHEL/hashicorp.repo"),
            ("amzn", "https://rpm.releases.hashicorp.com/AmazonLinux/hashicorp.repo"),
        ],
    )
    def test_rpm_family(self, make_ctx, os_id, repo):
        ctx = make_ctx(os_id=os_id)
        install_terraform(ctx)
        assert ctx.runner.commands() == [
            "yum install -y yum-utils",
            f"yum-config-manager --add-repo {repo}",
            "yum install -y terraform",
        ]

    def test_install_failure_is_reported(self, make_ctx, output):
        ctx = make_ctx(os_id="amzn", fail_on=[["yum", "install", "-y", "terraform"]])
        with pytest.raises(InstallError):
            install_terraform(ctx)
        assert "terraform install failed" in output()

    def test_unsupported_os(self, make_ctx):
        with pytest.raises(UnsupportedOSError) as exc:
            install_terraform(make_ctx(os_id="alpine"))
        assert "Please install Terraform manually" in str(exc.value)


class TestJq:
    def test_ubuntu(self, make_ctx):
        ctx = make_ctx()
        install_jq(ctx)
        assert ctx.runner.commands() == ["apt-get update", "apt-get install -y jq uuid-runtime"]

    @pytest.mark.parametrize("os_id", ["centos", "rhel", "fedora", "amzn"])
    def test_rpm_family(self, make_ctx, os_id):
        ctx = make_ctx(os_id=os_id)
        install_jq(ctx)
        assert ctx.runner.commands() == ["yum install -y jq"]

    def test_unsupported_os(self, make_ctx):
        with pytest.raises(UnsupportedOSError):
            install_jq(make_ctx(os_id="arch"))

    def test_checkpoint_after_install(self, make_ctx, output):
        ctx = make_ctx(os_id="fedora")
        ctx.token.cancel()
        with pytest.raises(Interrupted):
            install_jq(ctx)
        assert ctx.runner.commands() == ["yum install -y jq"]
        assert "Exiting as requested after installing jq." in output()
