"""TSPL label printer reached over a raw TCP socket."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

_logger = logging.getLogger(__name__)


class LabelPrinter(Protocol):
    """Interface for a physical label printer."""

    async def is_available(self) -> bool:
        """Return True if the printer can be reached."""

    async def print_one(self, identifier: str, index: int, total: int) -> bool:
        """Print a single label and report whether it was accepted."""


def build_label(identifier: str, printed_at: datetime) -> str:
    """Build TSPL commands for a 50 x 30 mm barcode label."""
    text = identifier.replace('"', "")
    timestamp = printed_at.strftime("%d.%m.%Y %H:%M")
    lines = [
        "SIZE 50 mm, 30 mm",
        "GAP 3 mm, 0 mm",
        "SPEED 3",
        "DENSITY 8",
        "DIRECTION 0",
        "REFERENCE 0,0",
        "CLS",
        f'TEXT 90,160,"2",0,1,2,"{text}"',
        f'BARCODE 80,90,"128",55,0,0,2,2,"{text}"',
        f'TEXT 140,20,"2",0,1,1,"{timestamp}"',
        "PRINT 1,1",
    ]
    return "\r\n".join(lines) + "\r\n"


@dataclass
class TcpTsplPrinter(LabelPrinter):
    """Sends one TSPL job per label to a network printer."""

    host: str
    port: int = 9100
    timeout: float = 10
    settle_seconds: float = 1.0

    async def is_available(self) -> bool:
        """Probe the printer by opening and closing a connection."""
        try:
            _, writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port), timeout=self.timeout
            )
        except (OSError, TimeoutError) as exc:
            _logger.warning("Printer %s:%s unreachable: %s", self.host, self.port, exc)
            return False
        writer.close()
        await writer.wait_closed()
        return True

    async def print_one(self, identifier: str, index: int, total: int) -> bool:
        """Open a connection, send the label and wait for the printer to settle."""
        payload = build_label(identifier, datetime.now()).encode("utf-8")
        try:
            _, writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port), timeout=self.timeout
            )
            try:
                writer.write(payload)
                await asyncio.wait_for(writer.drain(), timeout=self.timeout)
                if self.settle_seconds:
                    await asyncio.sleep(self.settle_seconds)
            finally:
                writer.close()
                await writer.wait_closed()
        except (OSError, TimeoutError) as exc:
            _logger.warning("Label %s (%s/%s) not printed: %s", identifier, index, total, exc)
            return False
        _logger.info("Label sent: %s (%s/%s)", identifier, index, total)
        return True


@dataclass
class UnconfiguredPrinter(LabelPrinter):
    """Stand-in used when no printer address is configured."""

    async def is_available(self) -> bool:
        return False

    async def print_one(self, identifier: str, index: int, total: int) -> bool:
        return False
