"""Terminal-local storage: photo files and the access token."""

from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from stock_control.domain.capture import FileStat


@dataclass
class LocalFilesystem:
    """Looks up photo files written by the camera."""

    def stat(self, path: str) -> FileStat:
        """Return existence and size for a file path."""
        file_path = Path(path)
        if not file_path.is_file():
            return FileStat(exists=False)
        return FileStat(exists=True, size_bytes=file_path.stat().st_size)


@dataclass
class InMemoryTokenStore:
    """Holds the access token for the lifetime of the process."""

    access_token: str | None = None
    expires_at: datetime | None = None

    def token(self) -> str | None:
        return self.access_token if self.is_valid() else None

    def is_valid(self) -> bool:
        """Return True if a token is stored and has not expired."""
        if not self.access_token:
            return False
        if self.expires_at is None:
            return True
        return datetime.now(tz=UTC) < self.expires_at

    def clear(self) -> None:
        self.access_token = None
        self.expires_at = None
