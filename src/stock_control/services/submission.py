"""Two-phase persistence of a finished registration."""

import logging
from dataclasses import dataclass
from typing import Protocol

from stock_control.adapters.inventory_client import InventoryClient
from stock_control.domain.capture import (
    CaptureRecord,
    CaptureStep,
    RecordCreateRequest,
    SubmissionCompleted,
    SubmissionCreateFailed,
    SubmissionOutcome,
    UploadStatus,
)
from stock_control.domain.errors import ErrorCategory, RemoteError, StepNotReady
from stock_control.domain.events import StepNotReadyEvent, SubmissionFinished
from stock_control.services.capture import CaptureStateMachine, Filesystem
from stock_control.services.events import EventSink

_logger = logging.getLogger(__name__)


class Session(Protocol):
    """Session operations the coordinator relies on."""

    def is_valid(self) -> bool:
        """Return True if the session can be used for remote calls."""

    def clear(self) -> None:
        """Drop the session."""


@dataclass
class BatchSubmissionCoordinator:
    """Creates the product, then uploads every photo independently.

    Phase 1 (create) is all-or-nothing and stops the submission on failure.
    Phase 2 (uploads) is best-effort: each photo is uploaded one at a time in
    list order and a failed upload never stops the rest. The product is not
    rolled back when uploads fail; the outcome is flagged ``incomplete``.
    """

    client: InventoryClient
    session: Session
    filesystem: Filesystem
    events: EventSink

    async def save_shelf(self, machine: CaptureStateMachine) -> None:
        """Create the held shelf remotely and mark it persisted."""
        record = machine.snapshot()
        identifier = record.shelf_identifier
        if not identifier:
            raise self._not_ready(record.step, "Scan a shelf label first.")
        if record.location is None or not record.location.warehouse_id:
            raise self._not_ready(record.step, "Select a warehouse first.")
        self._require_session()

        try:
            shelf_id = await self.client.create_shelf(
                identifier, record.location.warehouse_id
            )
        except RemoteError as exc:
            self._on_remote_error(exc)
            _logger.warning("Shelf %s not saved: %s", identifier, exc.message)
            raise

        if machine.mark_shelf_persisted(identifier, shelf_id):
            _logger.info("Shelf saved: %s id=%s", identifier, shelf_id)
        else:
            _logger.warning(
                "Shelf %s saved but the workflow now holds %s",
                identifier,
                machine.snapshot().shelf_identifier,
            )

    async def submit(self, machine: CaptureStateMachine) -> SubmissionOutcome:
        """Run both phases and return the aggregate outcome."""
        record = machine.snapshot()
        if record.step is not CaptureStep.REVIEW_SUBMIT:
            raise self._not_ready(record.step, "Finish the previous steps first.")
        if record.created_record_id is not None:
            raise self._not_ready(
                record.step, "Already submitted. Start a new registration."
            )
        failure = machine.gates.check_all_before(CaptureStep.REVIEW_SUBMIT, record)
        if failure is not None:
            step, result = failure
            raise self._not_ready(step, result.reason)

        if not self.session.is_valid():
            return self._finish(
                SubmissionCreateFailed(
                    category=ErrorCategory.SESSION_EXPIRED,
                    reason="Session expired. Please log in again.",
                )
            )

        try:
            payload = await self.client.create_record(_build_request(record))
            record_id = _record_id(payload)
        except RemoteError as exc:
            self._on_remote_error(exc)
            _logger.warning(
                "Product %s not created (%s): %s",
                record.product_identifier,
                exc.category.value,
                exc.message,
            )
            return self._finish(
                SubmissionCreateFailed(category=exc.category, reason=exc.message)
            )

        machine.set_created_record(record_id)
        _logger.info("Product created: %s id=%s", record.product_identifier, record_id)

        success_count = 0
        failure_count = 0
        for photo in record.photos:
            machine.set_photo_status(photo.path, UploadStatus.UPLOADING)
            if await self._upload(record_id, photo.path):
                success_count += 1
                machine.set_photo_status(photo.path, UploadStatus.SUCCESS)
            else:
                failure_count += 1
                machine.set_photo_status(photo.path, UploadStatus.FAILED)

        _logger.info(
            "Registration completed: product=%s photos=%s ok, %s failed",
            record_id,
            success_count,
            failure_count,
        )
        return self._finish(
            SubmissionCompleted(
                record_id=record_id,
                product_identifier=record.product_identifier,
                success_count=success_count,
                failure_count=failure_count,
            )
        )

    async def _upload(self, record_id: int, path: str) -> bool:
        if not self.filesystem.stat(path).exists:
            _logger.warning("Photo missing at upload time: %s", path)
            return False
        try:
            await self.client.upload_attachment(record_id, path)
        except RemoteError as exc:
            self._on_remote_error(exc)
            _logger.warning("Photo upload failed: %s - %s", path, exc.message)
            return False
        except OSError as exc:
            _logger.warning("Photo could not be read: %s - %s", path, exc)
            return False
        return True

    def _not_ready(self, step: CaptureStep, reason: str) -> StepNotReady:
        self.events.publish(StepNotReadyEvent(step=step, reason=reason))
        return StepNotReady(step, reason)

    def _require_session(self) -> None:
        if not self.session.is_valid():
            raise RemoteError(
                ErrorCategory.SESSION_EXPIRED, "Session expired. Please log in again."
            )

    def _on_remote_error(self, exc: RemoteError) -> None:
        if exc.category is ErrorCategory.SESSION_EXPIRED:
            self.session.clear()

    def _finish(self, outcome: SubmissionOutcome) -> SubmissionOutcome:
        self.events.publish(SubmissionFinished(outcome=outcome))
        return outcome


def _build_request(record: CaptureRecord) -> RecordCreateRequest:
    detail = record.product_detail
    location = record.location
    return RecordCreateRequest(
        product_identifier=record.product_identifier,
        shelf_identifier=record.shelf_identifier,
        description=detail.description,
        unit_id=detail.unit_id,
        secondary_unit_id=detail.secondary_unit_id,
        width=detail.width,
        length=detail.length,
        height=detail.height,
        region_id=(location.region_id or 0) if location else 0,
        warehouse_id=(location.warehouse_id or 0) if location else 0,
        shelf_id=record.shelf_id,
    )


def _record_id(payload: dict[str, object]) -> int:
    """Extract the created product id from the create response."""
    value = payload.get("id")
    if value is None and isinstance(payload.get("data"), dict):
        value = payload["data"].get("id")  # type: ignore[union-attr]
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    raise RemoteError(
        ErrorCategory.MALFORMED_RESPONSE, "Create response did not include an id"
    )
