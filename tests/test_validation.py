"""Tests for identifier formats and step gates."""

import pytest

from stock_control.domain.capture import (
    CaptureRecord,
    CaptureStep,
    LocalPhoto,
    Location,
    ProductDetail,
)
from stock_control.services.validation import (
    ValidationGateSet,
    is_valid_product,
    is_valid_shelf,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("R00000000001", True),
        ("R12345678901", True),
        ("R1234567890", False),
        ("R123456789012", False),
        ("X00000000001", False),
        ("r00000000001", False),
        ("R0000000000A", False),
        ("R00000000001\n", False),
        ("R٠٠٠٠٠٠٠٠٠٠١", False),
        ("", False),
    ],
)
def test_shelf_format(value: str, expected: bool) -> None:
    assert is_valid_shelf(value) is expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("U00000000001", True),
        ("U1234567890", False),
        ("R00000000001", False),
        (" U00000000001", False),
    ],
)
def test_product_format(value: str, expected: bool) -> None:
    assert is_valid_product(value) is expected


def test_location_gate_requires_region_and_warehouse() -> None:
    gates = ValidationGateSet()

    assert not gates.check(CaptureStep.LOCATION_CHECK, CaptureRecord()).passed
    partial = CaptureRecord(location=Location(region_id=1, warehouse_id=None))
    assert not gates.check(CaptureStep.LOCATION_CHECK, partial).passed
    full = CaptureRecord(location=Location(region_id=1, warehouse_id=2))
    assert gates.check(CaptureStep.LOCATION_CHECK, full).passed


def test_shelf_gate_requires_persisted_shelf() -> None:
    gates = ValidationGateSet()
    unsaved = CaptureRecord(shelf_identifier="R00000000001")
    saved = CaptureRecord(shelf_identifier="R00000000001", shelf_persisted=True)

    result = gates.check(CaptureStep.SHELF_SCAN, unsaved)

    assert not result.passed
    assert "Save the shelf" in result.reason
    assert gates.check(CaptureStep.SHELF_SCAN, saved).passed


def test_product_detail_gate() -> None:
    gates = ValidationGateSet()
    short = CaptureRecord(product_detail=ProductDetail(description=" ab ", unit_id=1))
    no_unit = CaptureRecord(product_detail=ProductDetail(description="Bolt"))
    ready = CaptureRecord(product_detail=ProductDetail(description="Bolt", unit_id=1))

    assert not gates.check(CaptureStep.PRODUCT_DETAIL, short).passed
    assert not gates.check(CaptureStep.PRODUCT_DETAIL, no_unit).passed
    assert gates.check(CaptureStep.PRODUCT_DETAIL, ready).passed


def test_photo_gate_uses_configured_minimum() -> None:
    photos = tuple(
        LocalPhoto(path=f"/p/{index}.jpg", file_name=f"{index}.jpg", size_bytes=1)
        for index in range(3)
    )
    record = CaptureRecord(photos=photos)

    assert not ValidationGateSet().check(CaptureStep.PHOTO_CAPTURE, record).passed
    assert ValidationGateSet(min_photo_count=3).check(
        CaptureStep.PHOTO_CAPTURE, record
    ).passed


def test_check_all_before_reports_first_failing_step() -> None:
    record = CaptureRecord(
        location=Location(region_id=1, warehouse_id=2),
        shelf_identifier="R00000000001",
        shelf_persisted=True,
    )

    failure = ValidationGateSet().check_all_before(CaptureStep.REVIEW_SUBMIT, record)

    assert failure is not None
    step, result = failure
    assert step is CaptureStep.PRODUCT_SCAN
    assert not result.passed


def test_review_gate_always_passes() -> None:
    assert ValidationGateSet().check(CaptureStep.REVIEW_SUBMIT, CaptureRecord()).passed
