from .client import DownloadClient, DownloadError, NotFoundError

__all__ = ["DownloadClient", "DownloadError", "NotFoundError"]
