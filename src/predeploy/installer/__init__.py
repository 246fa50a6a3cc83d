"""Installation orchestrator for the workshop tools."""

from .bootstrap import BootstrapReport, Outcome, run_bootstrap, shell_exports
from .probe import EnvironmentInfo, probe_environment
from .tools import INSTALLERS, TOOL_ORDER, Tool

__all__ = [
    "BootstrapReport",
    "EnvironmentInfo",
    "INSTALLERS",
    "Outcome",
    "TOOL_ORDER",
    "Tool",
    "probe_environment",
    "run_bootstrap",
    "shell_exports",
]
