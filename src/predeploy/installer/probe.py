"""Host OS and CPU architecture detection"""

import platform
import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from .errors import EnvironmentProbeError, UnsupportedArchitectureError

SUPPORTED_ARCHITECTURES = ("x86_64", "aarch64")


@dataclass(frozen=True)
class EnvironmentInfo:
    """What every installer branches on"""

    architecture: str
    os_id: str
    kernel: str = "Linux"
    codename: Optional[str] = None


def check_architecture(machine: str) -> str:
    """Return machine if supported, else raise"""
    if machine not in SUPPORTED_ARCHITECTURES:
        raise UnsupportedArchitectureError(machine)
    return machine


def parse_os_release(text: str) -> Dict[str, str]:
    """Parse os-release KEY=value lines, unquoting values"""
    fields = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        try:
            parts = shlex.split(value)
        except ValueError:
            parts = [value]
        fields[key.strip()] = parts[0] if parts else ""
    return fields


def read_os_release(path: Path) -> Dict[str, str]:
    """Read and parse the os-release file"""
    try:
        text = Path(path).read_text()
    except OSError as e:
        raise EnvironmentProbeError(
            f"Cannot determine operating system type ({path}: {e.strerror}). Exiting."
        ) from e

    fields = parse_os_release(text)
    if not fields.get("ID"):
        raise EnvironmentProbeError(
            f"Cannot determine operating system type (no ID in {path}). Exiting."
        )
    return fields


def _lsb_codename() -> Optional[str]:
    try:
        result = subprocess.run(
            ["lsb_release", "-cs"], capture_output=True, text=True, check=False
        )
    except FileNotFoundError:
        return None
    return result.stdout.strip() or None


def probe_environment(
    os_release_path: Path = Path("/etc/os-release"),
    machine: Optional[str] = None,
    kernel: Optional[str] = None,
) -> EnvironmentInfo:
    """Detect architecture and OS; raise on anything unsupported."""
    architecture = check_architecture(machine or platform.machine())
    fields = read_os_release(os_release_path)

    codename = fields.get("VERSION_CODENAME") or fields.get("UBUNTU_CODENAME")
    if not codename and fields["ID"] in ("ubuntu", "debian"):
        codename = _lsb_codename()

    return EnvironmentInfo(
        architecture=architecture,
        os_id=fields["ID"],
        kernel=kernel or platform.system(),
        codename=codename,
    )
