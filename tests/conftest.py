"""Shared test fixtures."""

from collections.abc import Callable
from dataclasses import dataclass, field

import pytest

from stock_control.adapters.catalog_client import CatalogClient
from stock_control.adapters.inventory_client import InventoryClient
from stock_control.adapters.label_client import LabelClient
from stock_control.adapters.session_client import SessionClient
from stock_control.adapters.tspl_printer import LabelPrinter
from stock_control.config import Settings
from stock_control.containers import AppContainer
from stock_control.domain.capture import (
    CaptureStep,
    FileStat,
    Location,
    RecordCreateRequest,
)
from stock_control.domain.errors import ErrorCategory, RemoteError
from stock_control.domain.labels import LabelKind
from stock_control.services.capture import CaptureStateMachine
from stock_control.services.catalog import StockUnitService
from stock_control.services.events import EventBus
from stock_control.services.labels import LabelBatchGenerator, LabelPrintService
from stock_control.services.printing import SequentialPrintDriver
from stock_control.services.session import SessionService
from stock_control.services.submission import BatchSubmissionCoordinator
from stock_control.services.validation import ValidationGateSet

SHELF = "R00000000001"
PRODUCT = "U00000000001"


@dataclass
class FakeInventoryClient(InventoryClient):
    """Fake inventory client that records calls."""

    shelves: list[tuple[str, int]] = field(default_factory=list)
    requests: list[RecordCreateRequest] = field(default_factory=list)
    uploads: list[tuple[int, str]] = field(default_factory=list)
    record_payload: dict[str, object] = field(
        default_factory=lambda: {"status": 200, "message": "ok", "id": 42}
    )
    shelf_id: int | None = None
    shelf_error: RemoteError | None = None
    create_error: RemoteError | None = None
    failing_uploads: set[str] = field(default_factory=set)

    async def create_shelf(self, identifier: str, warehouse_id: int) -> int | None:
        self.shelves.append((identifier, warehouse_id))
        if self.shelf_error:
            raise self.shelf_error
        return self.shelf_id

    async def create_record(self, request: RecordCreateRequest) -> dict[str, object]:
        self.requests.append(request)
        if self.create_error:
            raise self.create_error
        return self.record_payload

    async def upload_attachment(self, record_id: int, file_path: str) -> None:
        self.uploads.append((record_id, file_path))
        if file_path in self.failing_uploads:
            raise RemoteError(ErrorCategory.TRANSIENT, "Server unreachable")


@dataclass
class FakeCatalogClient(CatalogClient):
    """Fake catalog returning a fixed stock unit list."""

    payload: dict[str, object] = field(
        default_factory=lambda: {
            "status": 200,
            "data": [
                {"id": 1, "stokBirimiAdi": "Adet", "kisaAd": "AD"},
                {"id": 2, "stokBirimiAdi": "Kilogram", "kisaAd": "KG"},
            ],
        }
    )
    error: RemoteError | None = None
    calls: int = 0

    async def list_stock_units(self) -> dict[str, object]:
        self.calls += 1
        if self.error:
            raise self.error
        return self.payload


@dataclass
class FakeLabelClient(LabelClient):
    """Fake label client returning canned batches."""

    calls: list[tuple[LabelKind, int]] = field(default_factory=list)
    payload: dict[str, object] | None = None

    async def generate_label_batch(self, kind: LabelKind, count: int) -> dict[str, object]:
        self.calls.append((kind, count))
        if self.payload is not None:
            return self.payload
        if kind is LabelKind.SHELF:
            return {
                "status": 200,
                "data": {
                    "etiketler": [
                        {"rafSeriNo": f"R{index:011d}"} for index in range(1, count + 1)
                    ]
                },
            }
        return {
            "status": 200,
            "data": {"urunSeriNo": "U00000000077", "adet": count},
        }


@dataclass
class FakePrinter(LabelPrinter):
    """Fake printer that fails on chosen item indexes."""

    available: bool = True
    failing_indexes: set[int] = field(default_factory=set)
    calls: list[tuple[str, int, int]] = field(default_factory=list)
    on_print: Callable[[int], None] | None = None

    async def is_available(self) -> bool:
        return self.available

    async def print_one(self, identifier: str, index: int, total: int) -> bool:
        self.calls.append((identifier, index, total))
        if self.on_print is not None:
            self.on_print(index)
        return index not in self.failing_indexes


@dataclass
class FakeTokenStore:
    """Token store with a switchable validity flag."""

    valid: bool = True
    cleared: int = 0

    def token(self) -> str | None:
        return "token" if self.valid else None

    def is_valid(self) -> bool:
        return self.valid

    def clear(self) -> None:
        self.valid = False
        self.cleared += 1


@dataclass
class FakeSessionClient(SessionClient):
    """Fake session endpoint."""

    payload: dict[str, object] = field(
        default_factory=lambda: {
            "status": 200,
            "data": {"selectedBolgeId": 3, "selectedDepoId": 7},
        }
    )
    error: RemoteError | None = None
    calls: int = 0

    async def fetch_current(self) -> dict[str, object]:
        self.calls += 1
        if self.error:
            raise self.error
        return self.payload


@dataclass
class FakeFilesystem:
    """Photo files keyed by path with their sizes."""

    files: dict[str, int] = field(default_factory=dict)

    def stat(self, path: str) -> FileStat:
        if path not in self.files:
            return FileStat(exists=False)
        return FileStat(exists=True, size_bytes=self.files[path])


@dataclass
class FakeLocationSource:
    """Location source with a settable location."""

    location: Location | None = None

    def current_location(self) -> Location | None:
        return self.location


def drive_to_review(
    machine: CaptureStateMachine,
    filesystem: FakeFilesystem,
    photo_count: int = 4,
    photo_root: str = "/photos",
) -> list[str]:
    """Fill every step and advance to review; returns the photo paths."""
    machine.advance()
    machine.set_shelf(SHELF)
    machine.mark_shelf_persisted(SHELF)
    machine.advance()
    machine.set_product(PRODUCT)
    machine.advance()
    machine.set_product_detail(description="Steel bolt", unit_id=1)
    machine.advance()
    paths = []
    for index in range(1, photo_count + 1):
        path = f"{photo_root}/photo_{index}.jpg"
        filesystem.files[path] = 1024
        machine.attach_photo(path)
        paths.append(path)
    machine.advance()
    assert machine.step is CaptureStep.REVIEW_SUBMIT
    return paths


@pytest.fixture
def settings() -> Settings:
    return Settings(api_base_url="https://backend.example.com", api_token="token")


@pytest.fixture
def events() -> EventBus:
    return EventBus()


@pytest.fixture
def filesystem() -> FakeFilesystem:
    return FakeFilesystem()


@pytest.fixture
def location_source() -> FakeLocationSource:
    return FakeLocationSource(location=Location(region_id=3, warehouse_id=7))


@pytest.fixture
def machine(
    location_source: FakeLocationSource,
    events: EventBus,
    filesystem: FakeFilesystem,
) -> CaptureStateMachine:
    return CaptureStateMachine(
        location_source=location_source, events=events, filesystem=filesystem
    )


@pytest.fixture
def inventory_client() -> FakeInventoryClient:
    return FakeInventoryClient()


@pytest.fixture
def label_client() -> FakeLabelClient:
    return FakeLabelClient()


@pytest.fixture
def catalog_client() -> FakeCatalogClient:
    return FakeCatalogClient()


@pytest.fixture
def printer() -> FakePrinter:
    return FakePrinter()


@pytest.fixture
def token_store() -> FakeTokenStore:
    return FakeTokenStore()


@pytest.fixture
def session_client() -> FakeSessionClient:
    return FakeSessionClient()


@pytest.fixture
def session_service(
    token_store: FakeTokenStore, session_client: FakeSessionClient
) -> SessionService:
    service = SessionService(token_store=token_store, session_client=session_client)
    service.set_location(Location(region_id=3, warehouse_id=7))
    return service


@pytest.fixture
def container(
    settings: Settings,
    events: EventBus,
    filesystem: FakeFilesystem,
    inventory_client: FakeInventoryClient,
    label_client: FakeLabelClient,
    catalog_client: FakeCatalogClient,
    printer: FakePrinter,
    session_service: SessionService,
) -> AppContainer:
    capture = CaptureStateMachine(
        location_source=session_service,
        events=events,
        filesystem=filesystem,
        gates=ValidationGateSet(min_photo_count=settings.min_photo_count),
        max_photo_size_bytes=settings.max_photo_size_bytes,
    )
    submission = BatchSubmissionCoordinator(
        client=inventory_client,
        session=session_service,
        filesystem=filesystem,
        events=events,
    )
    label_generator = LabelBatchGenerator(client=label_client)
    print_driver = SequentialPrintDriver(printer=printer, events=events)

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        events=events,
        session_service=session_service,
        capture=capture,
        submission=submission,
        label_generator=label_generator,
        print_driver=print_driver,
        label_print_service=LabelPrintService(
            generator=label_generator, driver=print_driver
        ),
        stock_units=StockUnitService(client=catalog_client, session=session_service),
        close_resources=close_resources,
    )
