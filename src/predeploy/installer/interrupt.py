"""Cooperative cancellation on termination signals"""

import signal
from typing import Dict, Optional

from rich.console import Console

from .errors import Interrupted

HANDLED_SIGNALS = (signal.SIGINT, signal.SIGTERM, signal.SIGHUP)


class CancellationToken:
    """Set once by a signal handler, checked between units of work.

    The handler never raises, so the package-manager operation or download
    in flight when the signal arrives runs to completion. The bootstrap
    stops at the next call to :meth:`checkpoint`.
    """

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(stderr=True)
        self._cancelled = False
        self._previous: Dict[int, object] = {}

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        if not self._cancelled:
            self.console.print(
                "\n[yellow]Script interrupted. It will exit after the current "
                "operation completes.[/yellow]"
            )
        self._cancelled = True

    def checkpoint(self, label: str) -> None:
        """Raise Interrupted if a signal arrived"""
        if self._cancelled:
            self.console.print(f"[yellow]Exiting as requested after {label}.[/yellow]")
            raise Interrupted(f"Interrupted after {label}")

    def install(self) -> "CancellationToken":
        """Route SIGINT, SIGTERM and SIGHUP to this token"""
        for signum in HANDLED_SIGNALS:
            self._previous[signum] = signal.signal(signum, self._handle)
        return self

    def restore(self) -> None:
        """Put back the handlers that were active before install()"""
        for signum, handler in self._previous.items():
            signal.signal(signum, handler)
        self._previous.clear()

    def _handle(self, signum, frame) -> None:
        self.cancel()

    def __enter__(self) -> "CancellationToken":
        return self.install()

    def __exit__(self, *exc_info) -> None:
        self.restore()
