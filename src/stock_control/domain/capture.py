"""Domain models for the product registration workflow."""

from dataclasses import dataclass, field
from enum import Enum

from stock_control.domain.errors import ErrorCategory


class CaptureStep(str, Enum):
    """Ordered steps of a registration."""

    LOCATION_CHECK = "location_check"
    SHELF_SCAN = "shelf_scan"
    PRODUCT_SCAN = "product_scan"
    PRODUCT_DETAIL = "product_detail"
    PHOTO_CAPTURE = "photo_capture"
    REVIEW_SUBMIT = "review_submit"

    @property
    def position(self) -> int:
        return _STEP_ORDER.index(self)

    def next(self) -> "CaptureStep | None":
        """Return the following step, or None at the terminal step."""
        position = self.position + 1
        return _STEP_ORDER[position] if position < len(_STEP_ORDER) else None

    def previous(self) -> "CaptureStep | None":
        """Return the preceding step, or None at the first step."""
        position = self.position - 1
        return _STEP_ORDER[position] if position >= 0 else None


_STEP_ORDER: tuple[CaptureStep, ...] = tuple(CaptureStep)


class UploadStatus(str, Enum):
    """Upload state of a locally captured photo."""

    PENDING = "pending"
    UPLOADING = "uploading"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class Location:
    """Region and warehouse selected for the current session."""

    region_id: int | None
    warehouse_id: int | None

    @property
    def is_selected(self) -> bool:
        return bool(self.region_id) and bool(self.warehouse_id)


@dataclass(frozen=True)
class StockUnit:
    """A unit of measure a product can be stocked in."""

    id: int
    name: str
    short_name: str | None = None


@dataclass(frozen=True)
class ProductDetail:
    """Attributes entered for the scanned product."""

    description: str = ""
    unit_id: int = 0
    secondary_unit_id: int | None = None
    width: float | None = None
    length: float | None = None
    height: float | None = None


@dataclass(frozen=True)
class LocalPhoto:
    """A photo captured on the terminal, keyed by its path."""

    path: str
    file_name: str
    size_bytes: int
    upload_status: UploadStatus = UploadStatus.PENDING


@dataclass(frozen=True)
class CaptureRecord:
    """Everything captured during one registration attempt."""

    step: CaptureStep = CaptureStep.LOCATION_CHECK
    location: Location | None = None
    shelf_identifier: str = ""
    shelf_persisted: bool = False
    shelf_id: int | None = None
    product_identifier: str = ""
    product_scanned: bool = False
    product_detail: ProductDetail = field(default_factory=ProductDetail)
    photos: tuple[LocalPhoto, ...] = ()
    created_record_id: int | None = None

    @property
    def location_selected(self) -> bool:
        return self.location is not None and self.location.is_selected


@dataclass(frozen=True)
class FileStat:
    """Result of a filesystem lookup for a photo path."""

    exists: bool
    size_bytes: int = 0


@dataclass(frozen=True)
class RecordCreateRequest:
    """Payload for the remote product create call."""

    product_identifier: str
    shelf_identifier: str
    description: str
    unit_id: int
    secondary_unit_id: int | None
    width: float | None
    length: float | None
    height: float | None
    region_id: int
    warehouse_id: int
    shelf_id: int | None = None


@dataclass(frozen=True)
class SubmissionCompleted:
    """Phase 1 succeeded; attachment uploads were attempted."""

    record_id: int
    product_identifier: str
    success_count: int
    failure_count: int

    @property
    def incomplete(self) -> bool:
        """True when the record exists but some attachments are missing."""
        return self.failure_count > 0


@dataclass(frozen=True)
class SubmissionCreateFailed:
    """Phase 1 failed; no attachments were uploaded."""

    category: ErrorCategory
    reason: str


SubmissionOutcome = SubmissionCompleted | SubmissionCreateFailed
