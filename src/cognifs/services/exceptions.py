from pathlib import Path
from typing import Optional, Sequence


class ScanError(Exception):
    """Raised when a single file cannot be read during a scan"""

    def __init__(self, path: Path, message: str):
        super().__init__(f"{path}: {message}")
        self.path = path
        self.message = message


class RootUnreadable(Exception):
    """Raised when the scan root itself cannot be listed"""

    pass


class ProviderError(Exception):
    """Base class for tag and embedding provider failures"""

    pass


class ProviderUnavailable(ProviderError):
    """Raised when a provider cannot be reached or refuses the request"""

    pass


class ProviderTimeout(ProviderError):
    """Raised when a provider does not answer in time"""

    pass


class IndexClientError(Exception):
    """Base class for search index failures"""

    pass


class IndexConnectionError(IndexClientError):
    """Raised when the index cannot be reached for the whole operation"""

    pass


class RejectedDocument(IndexClientError):
    """Raised when the index refuses one or more documents"""

    def __init__(self, message: str, paths: Optional[Sequence[Path]] = None):
        super().__init__(message)
        self.paths = list(paths or [])


class MoveFailed(Exception):
    """Raised when a single planned move cannot be carried out"""

    def __init__(self, source: Path, reason: str):
        super().__init__(f"Failed to move {source}: {reason}")
        self.source = source
        self.reason = reason


class ConfirmationRequired(Exception):
    """Raised when an apply run was not confirmed"""

    pass
