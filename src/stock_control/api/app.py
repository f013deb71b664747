"""FastAPI application factory."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict
from pathlib import PurePath

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from stock_control.api.models import (
    IdentifierPayload,
    PhotoPayload,
    PrintRequest,
    ProductDetailPayload,
)
from stock_control.app_logging import configure_logging
from stock_control.containers import AppContainer
from stock_control.domain.capture import (
    CaptureRecord,
    SubmissionCompleted,
    SubmissionOutcome,
)
from stock_control.domain.errors import (
    DuplicatePhoto,
    ErrorCategory,
    FileTooLarge,
    InvalidFormat,
    LabelCountOutOfRange,
    PhotoMissing,
    PrinterUnavailable,
    RemoteError,
    StepNotReady,
    StockControlError,
)
from stock_control.domain.events import Event
from stock_control.domain.labels import LabelKind
from stock_control.services.printing import CancellationToken

_REMOTE_STATUS = {
    ErrorCategory.SESSION_EXPIRED: status.HTTP_401_UNAUTHORIZED,
    ErrorCategory.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCategory.VALIDATION: status.HTTP_422_UNPROCESSABLE_CONTENT,
    ErrorCategory.TRANSIENT: status.HTTP_502_BAD_GATEWAY,
    ErrorCategory.MALFORMED_RESPONSE: status.HTTP_502_BAD_GATEWAY,
}


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)
    capture_lock = asyncio.Lock()
    print_lock = asyncio.Lock()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state_container: AppContainer = app.state.container
        if state_container.session_service.is_valid():
            try:
                await state_container.session_service.refresh()
            except Exception:
                logger.exception("Failed to load the session location")
        state_container.capture.refresh_location()
        yield
        await state_container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    app.state.print_cancellation = None

    @app.exception_handler(StockControlError)
    async def stock_control_error(
        request: Request, exc: StockControlError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=_status_for(exc), content=jsonable_encoder(_error_body(exc))
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/session/refresh")
    async def refresh_session(request: Request) -> dict[str, object]:
        """Reload the selected region and warehouse."""
        state_container: AppContainer = request.app.state.container
        async with capture_lock:
            location = await state_container.session_service.refresh()
            state_container.capture.refresh_location()
        return {"location": asdict(location) if location else None}

    @app.get("/stock-units")
    async def stock_units(
        request: Request, refresh: bool = False
    ) -> dict[str, object]:
        """List the stock units offered on the product detail step."""
        state_container: AppContainer = request.app.state.container
        units = await state_container.stock_units.list_units(refresh=refresh)
        return {"units": [asdict(unit) for unit in units]}

    @app.get("/capture")
    async def capture_snapshot(request: Request) -> dict[str, object]:
        """Return the current step and record."""
        state_container: AppContainer = request.app.state.container
        return _record_body(state_container.capture.snapshot())

    @app.post("/capture/advance")
    async def capture_advance(request: Request) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        async with capture_lock:
            state_container.capture.refresh_location()
            state_container.capture.advance()
            return _record_body(state_container.capture.snapshot())

    @app.post("/capture/retreat")
    async def capture_retreat(request: Request) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        async with capture_lock:
            state_container.capture.retreat()
            return _record_body(state_container.capture.snapshot())

    @app.put("/capture/shelf")
    async def set_shelf(
        payload: IdentifierPayload, request: Request
    ) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        async with capture_lock:
            state_container.capture.set_shelf(payload.identifier)
            return _record_body(state_container.capture.snapshot())

    @app.delete("/capture/shelf")
    async def clear_shelf(request: Request) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        async with capture_lock:
            state_container.capture.clear_shelf()
            return _record_body(state_container.capture.snapshot())

    @app.post("/capture/shelf/save")
    async def save_shelf(request: Request) -> dict[str, object]:
        """Create the scanned shelf remotely."""
        state_container: AppContainer = request.app.state.container
        async with capture_lock:
            await state_container.submission.save_shelf(state_container.capture)
            return _record_body(state_container.capture.snapshot())

    @app.put("/capture/product")
    async def set_product(
        payload: IdentifierPayload, request: Request
    ) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        async with capture_lock:
            state_container.capture.set_product(payload.identifier)
            return _record_body(state_container.capture.snapshot())

    @app.delete("/capture/product")
    async def clear_product(request: Request) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        async with capture_lock:
            state_container.capture.clear_product()
            return _record_body(state_container.capture.snapshot())

    @app.put("/capture/product-detail")
    async def set_product_detail(
        payload: ProductDetailPayload, request: Request
    ) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        async with capture_lock:
            state_container.capture.set_product_detail(
                description=payload.description,
                unit_id=payload.unit_id,
                secondary_unit_id=payload.secondary_unit_id,
                width=payload.width,
                length=payload.length,
                height=payload.height,
            )
            return _record_body(state_container.capture.snapshot())

    @app.post("/capture/photos")
    async def add_photo(payload: PhotoPayload, request: Request) -> dict[str, object]:
        """Attach a photo, reading its size from disk when not supplied."""
        state_container: AppContainer = request.app.state.container
        async with capture_lock:
            if payload.size_bytes is None:
                state_container.capture.attach_photo(payload.path)
            else:
                state_container.capture.add_photo(
                    payload.path,
                    payload.file_name or PurePath(payload.path).name,
                    payload.size_bytes,
                )
            return _record_body(state_container.capture.snapshot())

    @app.delete("/capture/photos")
    async def remove_photo(path: str, request: Request) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        async with capture_lock:
            state_container.capture.remove_photo(path)
            return _record_body(state_container.capture.snapshot())

    @app.post("/capture/submit")
    async def submit(request: Request) -> dict[str, object]:
        """Create the product and upload its photos."""
        state_container: AppContainer = request.app.state.container
        async with capture_lock:
            outcome = await state_container.submission.submit(state_container.capture)
            body = _record_body(state_container.capture.snapshot())
        body["outcome"] = _outcome_body(outcome)
        return body

    @app.post("/capture/reset")
    async def reset(request: Request) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        async with capture_lock:
            state_container.capture.reset()
            return _record_body(state_container.capture.snapshot())

    @app.post("/labels/{kind}/print")
    async def print_labels(
        kind: LabelKind, payload: PrintRequest, request: Request
    ) -> dict[str, object]:
        """Allocate a label batch and print it."""
        state_container: AppContainer = request.app.state.container
        async with print_lock:
            cancellation = CancellationToken()
            request.app.state.print_cancellation = cancellation
            try:
                batch, outcome = (
                    await state_container.label_print_service.generate_and_print(
                        kind, payload.count, cancellation
                    )
                )
            finally:
                request.app.state.print_cancellation = None
        return {"batch": asdict(batch), "outcome": asdict(outcome)}

    @app.post("/labels/cancel")
    async def cancel_print(request: Request) -> dict[str, bool]:
        """Stop the running print batch before its next label."""
        cancellation: CancellationToken | None = request.app.state.print_cancellation
        if cancellation is None:
            return {"cancelled": False}
        cancellation.cancel()
        logger.info("Print batch cancellation requested")
        return {"cancelled": True}

    @app.get("/events")
    async def events(request: Request) -> dict[str, object]:
        """Return and clear the events recorded since the last call."""
        state_container: AppContainer = request.app.state.container
        drained = state_container.events.drain()
        return {"events": [_event_body(event) for event in drained]}

    return app


def _status_for(exc: StockControlError) -> int:  # noqa: PLR0911
    if isinstance(exc, RemoteError):
        return _REMOTE_STATUS[exc.category]
    if isinstance(exc, StepNotReady | DuplicatePhoto):
        return status.HTTP_409_CONFLICT
    if isinstance(
        exc, InvalidFormat | FileTooLarge | PhotoMissing | LabelCountOutOfRange
    ):
        return status.HTTP_422_UNPROCESSABLE_CONTENT
    if isinstance(exc, PrinterUnavailable):
        return status.HTTP_503_SERVICE_UNAVAILABLE
    return status.HTTP_400_BAD_REQUEST


def _error_body(exc: StockControlError) -> dict[str, object]:
    body: dict[str, object] = {"error": type(exc).__name__, "detail": str(exc)}
    if isinstance(exc, StepNotReady):
        body["step"] = exc.step
    elif isinstance(exc, InvalidFormat):
        body["field"] = exc.field
    elif isinstance(exc, LabelCountOutOfRange):
        body["minimum"] = exc.minimum
        body["maximum"] = exc.maximum
    elif isinstance(exc, RemoteError):
        body["category"] = exc.category
        body["retryable"] = exc.retryable
    return body


def _record_body(record: CaptureRecord) -> dict[str, object]:
    return {
        "step": record.step,
        "location_selected": record.location_selected,
        "record": asdict(record),
    }


def _outcome_body(outcome: SubmissionOutcome) -> dict[str, object]:
    if isinstance(outcome, SubmissionCompleted):
        body = asdict(outcome)
        body["incomplete"] = outcome.incomplete
        return {"status": "completed", **body}
    return {"status": "create_failed", **asdict(outcome)}


def _event_body(event: Event) -> dict[str, object]:
    return {"type": type(event).__name__, **asdict(event)}
