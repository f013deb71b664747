"""Label allocation and the generate-then-print flow."""

import logging
from dataclasses import dataclass

from stock_control.adapters.label_client import LabelClient
from stock_control.domain.errors import ErrorCategory, LabelCountOutOfRange, RemoteError
from stock_control.domain.labels import LabelBatch, LabelKind, PrintOutcome
from stock_control.services.printing import CancellationToken, SequentialPrintDriver

_logger = logging.getLogger(__name__)

SHELF_LABEL_MAX = 1000
PRODUCT_LABEL_MAX = 100


@dataclass
class LabelBatchGenerator:
    """Requests an identifier and print count from the label service."""

    client: LabelClient
    shelf_max_count: int = SHELF_LABEL_MAX
    product_max_count: int = PRODUCT_LABEL_MAX

    def bounds(self, kind: LabelKind) -> tuple[int, int]:
        if kind is LabelKind.SHELF:
            return 1, self.shelf_max_count
        return 1, self.product_max_count

    async def generate(self, kind: LabelKind, count: int) -> LabelBatch:
        """Allocate a label batch; the count is checked before any remote call."""
        minimum, maximum = self.bounds(kind)
        if not minimum <= count <= maximum:
            raise LabelCountOutOfRange(kind, count, minimum, maximum)

        _logger.info("Generating %s %s labels", count, kind.value)
        payload = await self.client.generate_label_batch(kind, count)
        if kind is LabelKind.SHELF:
            batch = _parse_shelf_batch(payload)
        else:
            batch = _parse_product_batch(payload)
        _logger.info(
            "Label batch ready: %s x%s (%s)", batch.identifier, batch.count, kind.value
        )
        return batch


@dataclass
class LabelPrintService:
    """Generates a batch and prints it right away."""

    generator: LabelBatchGenerator
    driver: SequentialPrintDriver

    async def generate_and_print(
        self,
        kind: LabelKind,
        count: int,
        cancellation: CancellationToken | None = None,
    ) -> tuple[LabelBatch, PrintOutcome]:
        batch = await self.generator.generate(kind, count)
        if batch.serials:
            outcome = await self.driver.print_labels(list(batch.serials), cancellation)
        else:
            outcome = await self.driver.print_batch(
                batch.identifier, batch.count, cancellation
            )
        return batch, outcome


def _data(payload: dict[str, object]) -> dict[str, object]:
    data = payload.get("data")
    if not isinstance(data, dict):
        raise RemoteError(ErrorCategory.MALFORMED_RESPONSE, "Label response has no data")
    return data


def _label_entries(data: dict[str, object]) -> list[dict[str, object]]:
    labels = data.get("etiketler")
    if labels is None:
        label_data = data.get("etiketData")
        if isinstance(label_data, dict):
            labels = label_data.get("etiketler")
    if not isinstance(labels, list):
        return []
    return [entry for entry in labels if isinstance(entry, dict)]


def _parse_shelf_batch(payload: dict[str, object]) -> LabelBatch:
    serials = [
        str(entry.get("rafSeriNo") or entry.get("seriNo") or "")
        for entry in _label_entries(_data(payload))
    ]
    serials = [serial for serial in serials if serial]
    if not serials:
        raise RemoteError(
            ErrorCategory.MALFORMED_RESPONSE, "Shelf label response has no serials"
        )
    return LabelBatch(
        kind=LabelKind.SHELF,
        identifier=serials[0],
        count=len(serials),
        serials=tuple(serials),
    )


def _parse_product_batch(payload: dict[str, object]) -> LabelBatch:
    data = _data(payload)
    identifier = data.get("urunSeriNo")
    if not identifier:
        entries = _label_entries(data)
        identifier = entries[0].get("urunSeriNo") if entries else None
    count = data.get("adet")
    if not identifier or not isinstance(count, int) or isinstance(count, bool) or count < 1:
        raise RemoteError(
            ErrorCategory.MALFORMED_RESPONSE, "Product label response is incomplete"
        )
    return LabelBatch(kind=LabelKind.PRODUCT, identifier=str(identifier), count=count)
