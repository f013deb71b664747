"""Sequential label printing with progress and outcome classification."""

import logging
from dataclasses import dataclass, field

from stock_control.adapters.tspl_printer import LabelPrinter
from stock_control.domain.errors import PrinterUnavailable
from stock_control.domain.events import PrintFinished, PrintProgress
from stock_control.domain.labels import PrintJob, PrintOutcome
from stock_control.services.events import EventSink

_logger = logging.getLogger(__name__)


@dataclass
class CancellationToken:
    """Flag checked by the print loop before each label."""

    _cancelled: bool = field(default=False, init=False)

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


@dataclass
class SequentialPrintDriver:
    """Prints labels one at a time; a failed label never aborts the batch."""

    printer: LabelPrinter
    events: EventSink

    async def print_batch(
        self,
        identifier: str,
        count: int,
        cancellation: CancellationToken | None = None,
    ) -> PrintOutcome:
        """Print the same identifier ``count`` times."""
        if count < 1:
            raise ValueError("count must be at least 1")
        return await self._run(identifier, [identifier] * count, cancellation)

    async def print_labels(
        self,
        labels: list[str],
        cancellation: CancellationToken | None = None,
    ) -> PrintOutcome:
        """Print each label text once, in order."""
        if not labels:
            raise ValueError("labels must not be empty")
        return await self._run(labels[0], labels, cancellation)

    async def _run(
        self,
        identifier: str,
        labels: list[str],
        cancellation: CancellationToken | None,
    ) -> PrintOutcome:
        if not await self.printer.is_available():
            raise PrinterUnavailable("Label printer not found")

        total = len(labels)
        job = PrintJob(identifier=identifier, requested_count=total)
        cancelled = False
        _logger.info("Printing %s labels for %s", total, identifier)

        for index, text in enumerate(labels, start=1):
            if cancellation is not None and cancellation.cancelled:
                cancelled = True
                _logger.info("Print batch cancelled before label %s/%s", index, total)
                break
            ok = await self._print_one(text, index, total)
            job.record(index, ok)
            if ok:
                self.events.publish(
                    PrintProgress(printed_count=job.printed_count, total_count=total)
                )
            else:
                _logger.warning("Label %s (%s/%s) failed", text, index, total)

        outcome = PrintOutcome(
            identifier=identifier,
            classification=job.classify(),
            printed_count=job.printed_count,
            requested_count=total,
            failed_indexes=tuple(i for i, ok in job.succeeded.items() if not ok),
            cancelled=cancelled,
        )
        _logger.info(
            "Print batch finished: %s (%s/%s)",
            outcome.classification.value,
            outcome.printed_count,
            total,
        )
        self.events.publish(PrintFinished(outcome=outcome))
        return outcome

    async def _print_one(self, text: str, index: int, total: int) -> bool:
        try:
            return await self.printer.print_one(text, index, total)
        except OSError as exc:
            _logger.warning("Printer I/O error on label %s/%s: %s", index, total, exc)
            return False
