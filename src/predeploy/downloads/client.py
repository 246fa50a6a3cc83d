"""HTTP download client for vendor archives, binaries and signing keys"""

from pathlib import Path
from typing import Optional

import httpx
from rich.console import Console


class DownloadError(Exception):
    """Base exception for download errors"""

    pass


class NotFoundError(DownloadError):
    """Remote file not found"""

    pass


class DownloadClient:
    """Fetch remote files over HTTPS, following redirects"""

    def __init__(
        self,
        timeout: Optional[float] = None,
        console: Optional[Console] = None,
        verbose: bool = False,
    ):
        self.timeout = timeout
        self.console = console or Console(stderr=True)
        self.verbose = verbose

    def fetch_text(self, url: str) -> str:
        """Fetch a small text document"""
        return self._request(url).text

    def fetch_bytes(self, url: str) -> bytes:
        """Fetch a small binary document"""
        return self._request(url).content

    def download(self, url: str, dest: Path) -> Path:
        """Stream a remote file to dest"""
        self._echo(url)
        try:
            with httpx.Client(timeout=self.timeout, follow_redirects=True) as client:
                with client.stream("GET", url) as response:
                    self._raise_for_status(url, response)
                    with open(dest, "wb") as f:
                        for chunk in response.iter_bytes():
                            f.write(chunk)
        except httpx.HTTPError as e:
            raise DownloadError(f"Download failed: {url}: {e}") from e
        return dest

    def _request(self, url: str) -> httpx.Response:
        """Execute GET request"""
        self._echo(url)
        try:
            with httpx.Client(timeout=self.timeout, follow_redirects=True) as client:
                response = client.get(url)
        except httpx.HTTPError as e:
            raise DownloadError(f"Download failed: {url}: {e}") from e

        self._raise_for_status(url, response)
        return response

    def _raise_for_status(self, url: str, response: httpx.Response) -> None:
        if response.status_code == 404:
            raise NotFoundError(f"Not found: {url}")
        elif response.status_code >= 400:
            raise DownloadError(f"HTTP {response.status_code} from {url}")

    def _echo(self, url: str) -> None:
        if self.verbose:
            self.console.print(f"[dim]Downloading: {url}[/dim]")
