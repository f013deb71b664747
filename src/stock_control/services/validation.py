"""Readiness gates for each registration step."""

import re
from collections.abc import Callable
from dataclasses import dataclass

from stock_control.domain.capture import CaptureRecord, CaptureStep

SHELF_PATTERN = re.compile(r"R\d{11}", re.ASCII)
PRODUCT_PATTERN = re.compile(r"U\d{11}", re.ASCII)
MIN_PHOTO_COUNT = 4
MIN_DESCRIPTION_LENGTH = 3


@dataclass(frozen=True)
class GateResult:
    """Outcome of a gate check with a user-facing reason on failure."""

    passed: bool
    reason: str = ""


_PASS = GateResult(passed=True)


def is_valid_shelf(value: str) -> bool:
    """Return True for an R followed by exactly 11 digits."""
    return SHELF_PATTERN.fullmatch(value) is not None


def is_valid_product(value: str) -> bool:
    """Return True for a U followed by exactly 11 digits."""
    return PRODUCT_PATTERN.fullmatch(value) is not None


def location_gate(record: CaptureRecord) -> GateResult:
    if record.location_selected:
        return _PASS
    return GateResult(False, "Select a region and warehouse first.")


def shelf_gate(record: CaptureRecord) -> GateResult:
    if not is_valid_shelf(record.shelf_identifier):
        return GateResult(False, "Scan a shelf label (R + 11 digits).")
    if not record.shelf_persisted:
        return GateResult(False, "Save the shelf before continuing.")
    return _PASS


def product_scan_gate(record: CaptureRecord) -> GateResult:
    if not (is_valid_product(record.product_identifier) and record.product_scanned):
        return GateResult(False, "Scan a product label (U + 11 digits).")
    return _PASS


def product_detail_gate(record: CaptureRecord) -> GateResult:
    detail = record.product_detail
    if len(detail.description.strip()) < MIN_DESCRIPTION_LENGTH:
        return GateResult(
            False,
            f"Description needs at least {MIN_DESCRIPTION_LENGTH} characters.",
        )
    if detail.unit_id <= 0:
        return GateResult(False, "Select a stock unit.")
    return _PASS


def photo_gate(record: CaptureRecord, min_photos: int = MIN_PHOTO_COUNT) -> GateResult:
    if len(record.photos) >= min_photos:
        return _PASS
    return GateResult(
        False, f"At least {min_photos} photos are required ({len(record.photos)} taken)."
    )


def review_gate(record: CaptureRecord) -> GateResult:
    return _PASS


@dataclass(frozen=True)
class ValidationGateSet:
    """Maps every step to the predicate that must hold to leave it."""

    min_photo_count: int = MIN_PHOTO_COUNT

    def check(self, step: CaptureStep, record: CaptureRecord) -> GateResult:
        """Evaluate the gate for a step against the record."""
        if step is CaptureStep.PHOTO_CAPTURE:
            return photo_gate(record, self.min_photo_count)
        return _GATES[step](record)

    def check_all_before(
        self, step: CaptureStep, record: CaptureRecord
    ) -> tuple[CaptureStep, GateResult] | None:
        """Return the first failing earlier step, or None if all pass."""
        for earlier in CaptureStep:
            if earlier.position >= step.position:
                break
            result = self.check(earlier, record)
            if not result.passed:
                return earlier, result
        return None


_GATES: dict[CaptureStep, Callable[[CaptureRecord], GateResult]] = {
    CaptureStep.LOCATION_CHECK: location_gate,
    CaptureStep.SHELF_SCAN: shelf_gate,
    CaptureStep.PRODUCT_SCAN: product_scan_gate,
    CaptureStep.PRODUCT_DETAIL: product_detail_gate,
    CaptureStep.PHOTO_CAPTURE: photo_gate,
    CaptureStep.REVIEW_SUBMIT: review_gate,
}
