"""Tests for container wiring."""

import asyncio

from stock_control.adapters.tspl_printer import TcpTsplPrinter, UnconfiguredPrinter
from stock_control.config import Settings
from stock_control.containers import build_container, build_printer


def test_build_container_creates_services(settings: Settings) -> None:
    container = build_container(settings)

    assert container.session_service.is_valid()
    assert container.capture.gates.min_photo_count == settings.min_photo_count
    assert container.label_generator.product_max_count == 100
    assert container.stock_units.session is container.session_service
    asyncio.run(container.close_resources())


def test_build_printer_without_host_is_unconfigured(settings: Settings) -> None:
    assert isinstance(build_printer(settings), UnconfiguredPrinter)


def test_build_printer_uses_configured_address() -> None:
    settings = Settings(
        api_base_url="https://backend.example.com",
        printer_host="10.0.0.20",
        printer_port=9101,
    )

    printer = build_printer(settings)

    assert isinstance(printer, TcpTsplPrinter)
    assert (printer.host, printer.port) == ("10.0.0.20", 9101)
