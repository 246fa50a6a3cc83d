"""Configuration management for predeploy"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_CONFIG_PATH = Path.home() / ".predeploy" / "config.yaml"


class ConfigManager:
    """Manage predeploy configuration"""

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path or DEFAULT_CONFIG_PATH

    def load(self) -> Dict[str, Any]:
        """Load configuration from file and environment"""
        config = self._load_defaults()

        # Load from file if exists
        if self.config_path.exists():
            with open(self.config_path) as f:
                file_config = yaml.safe_load(f) or {}
                config = self._merge(config, file_config)

        # Override with environment variables
        config = self._apply_env_overrides(config)

        return config

    def _load_defaults(self) -> Dict[str, Any]:
        """Load default configuration"""
        return {
            "install_dir": "/usr/local/bin",
            "use_sudo": True,
            "os_release_path": "/etc/os-release",
            "apt": {
                "config_dir": "/etc/apt",
                "sources_dir": "/etc/apt/sources.list.d",
                "keyring_dir": "/usr/share/keyrings",
            },
            "downloads": {
                "timeout": None,
            },
            "urls": {
                "aws_cli": "https://awscli.amazonaws.com/awscli-exe-linux-{arch}.zip",
                "eksctl": "https://github.com/eksctl-io/eksctl/releases/latest/download/eksctl_{platform}.tar.gz",
                "kubectl_stable": "https://dl.k8s.io/release/stable.txt",
                "kubectl": "https://dl.k8s.io/release/{version}/bin/linux/{arch}/kubectl",
                "hashicorp_apt": "https://apt.releases.hashicorp.com",
                "hashicorp_gpg": "https://apt.releases.hashicorp.com/gpg",
                "hashicorp_rhel_repo": "https://rpm.releases.hashicorp.com/RHEL/hashicorp.repo",
                "hashicorp_amzn_repo": "https://rpm.releases.hashicorp.com/AmazonLinux/hashicorp.repo",
                "yarn_apt": "https://dl.yarnpkg.com/debian",
                "yarn_gpg": "https://dl.yarnpkg.com/debian/pubkey.gpg",
            },
        }

    def _merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Merge two configuration dictionaries"""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge(result[key], value)
            else:
                result[key] = value

        return result

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides"""
        if install_dir := os.getenv("PREDEPLOY_INSTALL_DIR"):
            config["install_dir"] = install_dir

        if use_sudo := os.getenv("PREDEPLOY_USE_SUDO"):
            config["use_sudo"] = use_sudo.lower() not in ("0", "false", "no")

        if timeout := os.getenv("PREDEPLOY_DOWNLOAD_TIMEOUT"):
            try:
                config["downloads"]["timeout"] = float(timeout)
            except ValueError:
                raise ValueError(
                    f"PREDEPLOY_DOWNLOAD_TIMEOUT must be a number of seconds, got {timeout!r}"
                )

        return config
