"""Stock unit lookup for the product detail step."""

import logging
from dataclasses import dataclass, field

from stock_control.adapters.catalog_client import CatalogClient
from stock_control.domain.capture import StockUnit
from stock_control.domain.errors import ErrorCategory, RemoteError
from stock_control.services.submission import Session

_logger = logging.getLogger(__name__)


@dataclass
class StockUnitService:
    """Loads and caches the stock units a product can be registered with."""

    client: CatalogClient
    session: Session
    _units: tuple[StockUnit, ...] | None = field(default=None, init=False)

    async def list_units(self, refresh: bool = False) -> tuple[StockUnit, ...]:
        """Return the stock units, fetching them on first use or on refresh."""
        if self._units is not None and not refresh:
            return self._units
        if not self.session.is_valid():
            raise RemoteError(ErrorCategory.SESSION_EXPIRED, "Session expired")
        try:
            payload = await self.client.list_stock_units()
        except RemoteError as exc:
            if exc.category is ErrorCategory.SESSION_EXPIRED:
                self.session.clear()
            raise
        self._units = _parse_units(payload)
        _logger.info("Loaded %s stock units", len(self._units))
        return self._units


def _parse_units(payload: dict[str, object]) -> tuple[StockUnit, ...]:
    data = payload.get("data")
    if not isinstance(data, list):
        raise RemoteError(
            ErrorCategory.MALFORMED_RESPONSE, "Stock unit response has no list"
        )
    units = []
    for item in data:
        if not isinstance(item, dict):
            continue
        unit_id = item.get("id")
        name = item.get("stokBirimiAdi")
        if not isinstance(unit_id, int) or isinstance(unit_id, bool) or unit_id <= 0:
            continue
        if not isinstance(name, str) or not name.strip():
            continue
        short_name = item.get("kisaAd")
        units.append(
            StockUnit(
                id=unit_id,
                name=name.strip(),
                short_name=short_name if isinstance(short_name, str) else None,
            )
        )
    return tuple(units)
