"""Session validity and location snapshot."""

import logging
from dataclasses import dataclass, field
from typing import Protocol

from stock_control.adapters.session_client import SessionClient
from stock_control.domain.capture import Location
from stock_control.domain.errors import ErrorCategory, RemoteError

_logger = logging.getLogger(__name__)


class TokenStore(Protocol):
    """Credential storage; only validity and clearing are used here."""

    def token(self) -> str | None:
        """Return the current access token, if any."""

    def is_valid(self) -> bool:
        """Return True if a non-expired token is stored."""

    def clear(self) -> None:
        """Forget the stored token."""


@dataclass
class SessionService:
    """Answers session questions for the capture engine."""

    token_store: TokenStore
    session_client: SessionClient
    _location: Location | None = field(default=None, init=False)

    def is_valid(self) -> bool:
        return self.token_store.is_valid()

    def clear(self) -> None:
        """Drop the session so the UI forces a new login."""
        _logger.info("Clearing expired session")
        self.token_store.clear()
        self._location = None

    def current_location(self) -> Location | None:
        return self._location

    def is_location_selected(self) -> bool:
        return self._location is not None and self._location.is_selected

    def set_location(self, location: Location | None) -> None:
        self._location = location

    async def refresh(self) -> Location | None:
        """Reload the selected region and warehouse from the backend."""
        if not self.is_valid():
            raise RemoteError(ErrorCategory.SESSION_EXPIRED, "Session expired")
        try:
            payload = await self.session_client.fetch_current()
        except RemoteError as exc:
            if exc.category is ErrorCategory.SESSION_EXPIRED:
                self.clear()
            raise
        self._location = _parse_location(payload)
        _logger.info(
            "Session loaded: region=%s warehouse=%s",
            self._location.region_id,
            self._location.warehouse_id,
        )
        return self._location


def _parse_location(payload: dict[str, object]) -> Location:
    data = payload.get("data")
    if not isinstance(data, dict):
        raise RemoteError(
            ErrorCategory.MALFORMED_RESPONSE, "Session response has no data"
        )
    return Location(
        region_id=_positive_int(data.get("selectedBolgeId")),
        warehouse_id=_positive_int(data.get("selectedDepoId")),
    )


def _positive_int(value: object) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool) and value > 0:
        return value
    return None
