"""Exceptions raised while bootstrapping the workshop tools"""


class BootstrapError(Exception):
    """Base exception for bootstrap errors"""

    pass


class BootstrapAbort(BootstrapError):
    """Fatal error: the whole bootstrap stops with exit status 1"""

    pass


class EntryGuardError(BootstrapAbort):
    """Command was not invoked in a mode that can update the shell"""

    pass


class EnvironmentProbeError(BootstrapAbort):
    """OS release metadata could not be read"""

    pass


class UnsupportedArchitectureError(BootstrapAbort):
    """CPU architecture outside x86_64/aarch64"""

    def __init__(self, architecture: str):
        super().__init__(
            "This script only supports Intel/AMD64 or ARM64 architectures. "
            f"Detected architecture: {architecture}."
        )
        self.architecture = architecture


class UnsupportedOSError(BootstrapAbort):
    """No package flow for this OS"""

    def __init__(self, os_id: str, tool: str = ""):
        hint = f" Please install {tool} manually." if tool else ""
        super().__init__(f"Unsupported OS: {os_id}.{hint}")
        self.os_id = os_id
        self.tool = tool


class Interrupted(BootstrapAbort):
    """A termination signal arrived; raised at the next checkpoint"""

    pass


class InstallError(BootstrapError):
    """A single tool installer failed; the sequence carries on"""

    pass
