"""Tests for label allocation and the generate-then-print flow."""

import asyncio

import pytest

from stock_control.domain.errors import (
    ErrorCategory,
    LabelCountOutOfRange,
    PrinterUnavailable,
    RemoteError,
)
from stock_control.domain.labels import LabelKind, PrintClassification
from stock_control.services.events import EventBus
from stock_control.services.labels import LabelBatchGenerator, LabelPrintService
from stock_control.services.printing import SequentialPrintDriver
from tests.conftest import FakeLabelClient, FakePrinter


@pytest.mark.parametrize("count", [0, 101, -5])
def test_product_count_out_of_range_is_rejected_locally(
    label_client: FakeLabelClient, count: int
) -> None:
    generator = LabelBatchGenerator(client=label_client)

    with pytest.raises(LabelCountOutOfRange) as excinfo:
        asyncio.run(generator.generate(LabelKind.PRODUCT, count))

    assert (excinfo.value.minimum, excinfo.value.maximum) == (1, 100)
    assert label_client.calls == []


def test_shelf_bound_is_wider(label_client: FakeLabelClient) -> None:
    generator = LabelBatchGenerator(client=label_client)

    with pytest.raises(LabelCountOutOfRange):
        asyncio.run(generator.generate(LabelKind.SHELF, 1001))
    batch = asyncio.run(generator.generate(LabelKind.SHELF, 150))

    assert batch.count == 150
    assert label_client.calls == [(LabelKind.SHELF, 150)]


def test_shelf_batch_carries_every_serial(label_client: FakeLabelClient) -> None:
    generator = LabelBatchGenerator(client=label_client)

    batch = asyncio.run(generator.generate(LabelKind.SHELF, 3))

    assert batch.identifier == "R00000000001"
    assert batch.serials == ("R00000000001", "R00000000002", "R00000000003")


def test_product_batch_reads_nested_label_data() -> None:
    client = FakeLabelClient(
        payload={
            "status": 200,
            "data": {
                "adet": 5,
                "etiketData": {"etiketler": [{"urunSeriNo": "U00000000123"}]},
            },
        }
    )
    generator = LabelBatchGenerator(client=client)

    batch = asyncio.run(generator.generate(LabelKind.PRODUCT, 5))

    assert batch.identifier == "U00000000123"
    assert batch.count == 5
    assert batch.serials == ()


@pytest.mark.parametrize(
    ("kind", "payload"),
    [
        (LabelKind.SHELF, {"status": 200}),
        (LabelKind.SHELF, {"status": 200, "data": {"etiketler": []}}),
        (
            LabelKind.PRODUCT,
            {"status": 200, "data": {"urunSeriNo": "U00000000001", "adet": 0}},
        ),
    ],
)
def test_incomplete_label_response_is_malformed(
    kind: LabelKind, payload: dict[str, object]
) -> None:
    generator = LabelBatchGenerator(client=FakeLabelClient(payload=payload))

    with pytest.raises(RemoteError) as excinfo:
        asyncio.run(generator.generate(kind, 1))

    assert excinfo.value.category is ErrorCategory.MALFORMED_RESPONSE


def test_generate_and_print_product_repeats_identifier(
    label_client: FakeLabelClient, printer: FakePrinter, events: EventBus
) -> None:
    service = LabelPrintService(
        generator=LabelBatchGenerator(client=label_client),
        driver=SequentialPrintDriver(printer=printer, events=events),
    )

    batch, outcome = asyncio.run(service.generate_and_print(LabelKind.PRODUCT, 3))

    assert batch.identifier == "U00000000077"
    assert printer.calls == [
        ("U00000000077", 1, 3),
        ("U00000000077", 2, 3),
        ("U00000000077", 3, 3),
    ]
    assert outcome.classification is PrintClassification.ALL_SUCCEEDED


def test_generate_and_print_shelf_prints_each_serial_once(
    label_client: FakeLabelClient, printer: FakePrinter, events: EventBus
) -> None:
    service = LabelPrintService(
        generator=LabelBatchGenerator(client=label_client),
        driver=SequentialPrintDriver(printer=printer, events=events),
    )

    _, outcome = asyncio.run(service.generate_and_print(LabelKind.SHELF, 2))

    assert [call[0] for call in printer.calls] == ["R00000000001", "R00000000002"]
    assert outcome.printed_count == 2


def test_generate_and_print_with_printer_offline(
    label_client: FakeLabelClient, events: EventBus
) -> None:
    printer = FakePrinter(available=False)
    service = LabelPrintService(
        generator=LabelBatchGenerator(client=label_client),
        driver=SequentialPrintDriver(printer=printer, events=events),
    )

    with pytest.raises(PrinterUnavailable):
        asyncio.run(service.generate_and_print(LabelKind.PRODUCT, 2))

    assert printer.calls == []
