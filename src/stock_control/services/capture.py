"""State machine for the product registration workflow.

The record is immutable. Every transition is a pure reducer that takes the
current record and returns a new one; ``CaptureStateMachine`` holds the
latest record, publishes events and talks to the session and filesystem.

Invalidation rules per transition:

    set_shelf        shelf_identifier        -> shelf_persisted = False, shelf_id = None
    clear_shelf      shelf_identifier = ""   -> shelf_persisted = False, shelf_id = None
    set_product      product_identifier      -> product_scanned = True
    clear_product    product_identifier = "" -> product_scanned = False
    retreat          step - 1                   (no data cleared)
    reset            initial record

Changing the shelf leaves product data untouched.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from pathlib import PurePath
from typing import Protocol

from stock_control.domain.capture import (
    CaptureRecord,
    CaptureStep,
    FileStat,
    Location,
    LocalPhoto,
    ProductDetail,
    UploadStatus,
)
from stock_control.domain.errors import (
    DuplicatePhoto,
    FileTooLarge,
    InvalidFormat,
    PhotoMissing,
    StepNotReady,
)
from stock_control.domain.events import (
    InvalidFormatEvent,
    StepAdvanced,
    StepNotReadyEvent,
)
from stock_control.services.events import EventSink
from stock_control.services.validation import (
    ValidationGateSet,
    is_valid_product,
    is_valid_shelf,
)

MAX_PHOTO_SIZE_BYTES = 10 * 1024 * 1024

_logger = logging.getLogger(__name__)


class LocationSource(Protocol):
    """Read access to the session's selected location."""

    def current_location(self) -> Location | None:
        """Return the selected region and warehouse, if any."""


class Filesystem(Protocol):
    """Lookup of photo files on the terminal."""

    def stat(self, path: str) -> FileStat:
        """Return whether the file exists and its size."""


# Reducers


def advance(record: CaptureRecord, gates: ValidationGateSet) -> CaptureRecord:
    """Move to the next step if the current step's gate passes."""
    result = gates.check(record.step, record)
    if not result.passed:
        raise StepNotReady(record.step, result.reason)
    following = record.step.next()
    if following is None:
        return record
    return replace(record, step=following)


def retreat(record: CaptureRecord) -> CaptureRecord:
    """Move to the previous step; captured data is kept."""
    preceding = record.step.previous()
    if preceding is None:
        return record
    return replace(record, step=preceding)


def with_location(record: CaptureRecord, location: Location | None) -> CaptureRecord:
    return replace(record, location=location)


def set_shelf(record: CaptureRecord, identifier: str) -> CaptureRecord:
    """Hold a new shelf identifier; it must be saved again before leaving."""
    cleaned = identifier.strip()
    if not is_valid_shelf(cleaned):
        raise InvalidFormat("shelf", identifier)
    return replace(
        record, shelf_identifier=cleaned, shelf_persisted=False, shelf_id=None
    )


def clear_shelf(record: CaptureRecord) -> CaptureRecord:
    return replace(record, shelf_identifier="", shelf_persisted=False, shelf_id=None)


def mark_shelf_persisted(
    record: CaptureRecord, identifier: str, shelf_id: int | None = None
) -> CaptureRecord:
    """Flag the shelf as saved, only if it is still the one held."""
    if record.shelf_identifier != identifier:
        return record
    return replace(record, shelf_persisted=True, shelf_id=shelf_id)


def set_product(record: CaptureRecord, identifier: str) -> CaptureRecord:
    cleaned = identifier.strip()
    if not is_valid_product(cleaned):
        raise InvalidFormat("product", identifier)
    return replace(record, product_identifier=cleaned, product_scanned=True)


def clear_product(record: CaptureRecord) -> CaptureRecord:
    return replace(record, product_identifier="", product_scanned=False)


def set_product_detail(record: CaptureRecord, detail: ProductDetail) -> CaptureRecord:
    return replace(record, product_detail=detail)


def add_photo(
    record: CaptureRecord,
    path: str,
    file_name: str,
    size_bytes: int,
    max_size_bytes: int = MAX_PHOTO_SIZE_BYTES,
) -> CaptureRecord:
    """Append a pending photo, rejecting oversized files and repeated paths."""
    if size_bytes > max_size_bytes:
        raise FileTooLarge(path, size_bytes, max_size_bytes)
    if any(photo.path == path for photo in record.photos):
        raise DuplicatePhoto(path)
    photo = LocalPhoto(path=path, file_name=file_name, size_bytes=size_bytes)
    return replace(record, photos=(*record.photos, photo))


def remove_photo(record: CaptureRecord, path: str) -> CaptureRecord:
    remaining = tuple(photo for photo in record.photos if photo.path != path)
    if len(remaining) == len(record.photos):
        return record
    return replace(record, photos=remaining)


def set_photo_status(
    record: CaptureRecord, path: str, status: UploadStatus
) -> CaptureRecord:
    photos = tuple(
        replace(photo, upload_status=status) if photo.path == path else photo
        for photo in record.photos
    )
    return replace(record, photos=photos)


def set_created_record(record: CaptureRecord, record_id: int) -> CaptureRecord:
    return replace(record, created_record_id=record_id)


@dataclass
class CaptureStateMachine:
    """Owns one registration attempt and enforces gated, ordered steps."""

    location_source: LocationSource
    events: EventSink
    filesystem: Filesystem | None = None
    gates: ValidationGateSet = field(default_factory=ValidationGateSet)
    max_photo_size_bytes: int = MAX_PHOTO_SIZE_BYTES
    record: CaptureRecord = field(default_factory=CaptureRecord)

    def __post_init__(self) -> None:
        self.refresh_location()

    @property
    def step(self) -> CaptureStep:
        return self.record.step

    def snapshot(self) -> CaptureRecord:
        """Return the current record; it is immutable and safe to share."""
        return self.record

    def refresh_location(self) -> None:
        """Re-read the selected location from the session."""
        self.record = with_location(self.record, self.location_source.current_location())

    def advance(self) -> CaptureStep:
        """Leave the current step if its gate passes and return the new step."""
        previous = self.record.step
        try:
            self.record = advance(self.record, self.gates)
        except StepNotReady as exc:
            _logger.info("Step %s not ready: %s", previous.value, exc.reason)
            self.events.publish(StepNotReadyEvent(step=previous, reason=exc.reason))
            raise
        if self.record.step is not previous:
            self.events.publish(StepAdvanced(previous=previous, current=self.record.step))
        return self.record.step

    def retreat(self) -> CaptureStep:
        previous = self.record.step
        self.record = retreat(self.record)
        if self.record.step is not previous:
            self.events.publish(StepAdvanced(previous=previous, current=self.record.step))
        return self.record.step

    def set_shelf(self, identifier: str) -> None:
        self.record = self._validated(set_shelf, "shelf", identifier)
        _logger.info("Shelf scanned: %s", self.record.shelf_identifier)

    def clear_shelf(self) -> None:
        self.record = clear_shelf(self.record)

    def mark_shelf_persisted(self, identifier: str, shelf_id: int | None = None) -> bool:
        """Flag the shelf as saved; returns False if the shelf changed meanwhile."""
        self.record = mark_shelf_persisted(self.record, identifier, shelf_id)
        return self.record.shelf_identifier == identifier

    def set_product(self, identifier: str) -> None:
        self.record = self._validated(set_product, "product", identifier)
        _logger.info("Product scanned: %s", self.record.product_identifier)

    def clear_product(self) -> None:
        self.record = clear_product(self.record)

    def set_product_detail(  # noqa: PLR0913
        self,
        description: str,
        unit_id: int,
        secondary_unit_id: int | None = None,
        width: float | None = None,
        length: float | None = None,
        height: float | None = None,
    ) -> None:
        """Replace the product attributes; checked only at gate time."""
        detail = ProductDetail(
            description=description,
            unit_id=unit_id,
            secondary_unit_id=secondary_unit_id,
            width=width,
            length=length,
            height=height,
        )
        self.record = set_product_detail(self.record, detail)

    def add_photo(self, path: str, file_name: str, size_bytes: int) -> LocalPhoto:
        """Attach a pending photo and return it."""
        self.record = add_photo(
            self.record, path, file_name, size_bytes, self.max_photo_size_bytes
        )
        _logger.info(
            "Photo added: %s (%s/%s)",
            file_name,
            len(self.record.photos),
            self.gates.min_photo_count,
        )
        return self.record.photos[-1]

    def attach_photo(self, path: str) -> LocalPhoto:
        """Attach a photo file that the camera wrote to disk."""
        if self.filesystem is None:
            raise RuntimeError("No filesystem configured for photo lookup")
        stat = self.filesystem.stat(path)
        if not stat.exists:
            raise PhotoMissing(path)
        return self.add_photo(path, PurePath(path).name, stat.size_bytes)

    def remove_photo(self, path: str) -> None:
        self.record = remove_photo(self.record, path)

    def set_photo_status(self, path: str, status: UploadStatus) -> None:
        self.record = set_photo_status(self.record, path, status)

    def set_created_record(self, record_id: int) -> None:
        self.record = set_created_record(self.record, record_id)

    def reset(self) -> None:
        """Discard everything and start a new registration."""
        self.record = CaptureRecord()
        self.refresh_location()
        _logger.info("Registration reset")

    def _validated(
        self,
        reducer: Callable[[CaptureRecord, str], CaptureRecord],
        field_name: str,
        identifier: str,
    ) -> CaptureRecord:
        try:
            return reducer(self.record, identifier)
        except InvalidFormat:
            self.events.publish(InvalidFormatEvent(field=field_name, value=identifier))
            raise
