"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from stock_control.adapters.catalog_client import HttpxCatalogClient
from stock_control.adapters.inventory_client import HttpxInventoryClient
from stock_control.adapters.label_client import HttpxLabelClient
from stock_control.adapters.local_storage import InMemoryTokenStore, LocalFilesystem
from stock_control.adapters.session_client import HttpxSessionClient
from stock_control.adapters.tspl_printer import (
    LabelPrinter,
    TcpTsplPrinter,
    UnconfiguredPrinter,
)
from stock_control.config import Settings
from stock_control.services.capture import CaptureStateMachine
from stock_control.services.catalog import StockUnitService
from stock_control.services.events import EventBus
from stock_control.services.labels import LabelBatchGenerator, LabelPrintService
from stock_control.services.printing import SequentialPrintDriver
from stock_control.services.session import SessionService
from stock_control.services.submission import BatchSubmissionCoordinator
from stock_control.services.validation import ValidationGateSet


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    events: EventBus
    session_service: SessionService
    capture: CaptureStateMachine
    submission: BatchSubmissionCoordinator
    label_generator: LabelBatchGenerator
    print_driver: SequentialPrintDriver
    label_print_service: LabelPrintService
    stock_units: StockUnitService
    close_resources: Callable[[], Awaitable[None]]


def build_printer(settings: Settings) -> LabelPrinter:
    """Return the configured label printer."""
    if not settings.printer_host:
        return UnconfiguredPrinter()
    return TcpTsplPrinter(
        host=settings.printer_host,
        port=settings.printer_port,
        timeout=settings.printer_timeout_seconds,
        settle_seconds=settings.printer_settle_seconds,
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    token_store = InMemoryTokenStore(access_token=resolved_settings.api_token)
    filesystem = LocalFilesystem()
    events = EventBus(history_size=resolved_settings.event_history_size)

    inventory_client = HttpxInventoryClient.create(
        resolved_settings.api_base_url,
        token_store.token,
        timeout=resolved_settings.api_timeout_seconds,
    )
    label_client = HttpxLabelClient.create(
        resolved_settings.api_base_url,
        token_store.token,
        timeout=resolved_settings.api_timeout_seconds,
    )
    session_client = HttpxSessionClient.create(
        resolved_settings.api_base_url,
        token_store.token,
        timeout=resolved_settings.api_timeout_seconds,
    )
    catalog_client = HttpxCatalogClient.create(
        resolved_settings.api_base_url,
        token_store.token,
        timeout=resolved_settings.api_timeout_seconds,
    )

    session_service = SessionService(
        token_store=token_store, session_client=session_client
    )
    capture = CaptureStateMachine(
        location_source=session_service,
        events=events,
        filesystem=filesystem,
        gates=ValidationGateSet(min_photo_count=resolved_settings.min_photo_count),
        max_photo_size_bytes=resolved_settings.max_photo_size_bytes,
    )
    submission = BatchSubmissionCoordinator(
        client=inventory_client,
        session=session_service,
        filesystem=filesystem,
        events=events,
    )
    label_generator = LabelBatchGenerator(
        client=label_client,
        shelf_max_count=resolved_settings.shelf_label_max_count,
        product_max_count=resolved_settings.product_label_max_count,
    )
    print_driver = SequentialPrintDriver(
        printer=build_printer(resolved_settings), events=events
    )
    label_print_service = LabelPrintService(
        generator=label_generator, driver=print_driver
    )

    async def close_resources() -> None:
        await inventory_client.close()
        await label_client.close()
        await session_client.close()
        await catalog_client.close()

    return AppContainer(
        settings=resolved_settings,
        events=events,
        session_service=session_service,
        capture=capture,
        submission=submission,
        label_generator=label_generator,
        print_driver=print_driver,
        label_print_service=label_print_service,
        stock_units=StockUnitService(client=catalog_client, session=session_service),
        close_resources=close_resources,
    )
