"""Shared request helper for the stock control backend."""

from collections.abc import Callable

import httpx

from stock_control.domain.errors import ErrorCategory, RemoteError

TokenProvider = Callable[[], str | None]

_TRANSIENT_STATUSES = {408, 425, 429}


def category_for_status(status_code: int) -> ErrorCategory:
    """Map an HTTP status code to a remote error category."""
    if status_code == httpx.codes.UNAUTHORIZED:
        return ErrorCategory.SESSION_EXPIRED
    if status_code == httpx.codes.CONFLICT:
        return ErrorCategory.CONFLICT
    if status_code >= httpx.codes.INTERNAL_SERVER_ERROR or status_code in _TRANSIENT_STATUSES:
        return ErrorCategory.TRANSIENT
    return ErrorCategory.VALIDATION


def auth_headers(token_provider: TokenProvider) -> dict[str, str]:
    token = token_provider()
    return {"Authorization": f"Bearer {token}"} if token else {}


async def request_json(
    http_client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    token_provider: TokenProvider,
    timeout: float,
    **kwargs: object,
) -> dict[str, object]:
    """Send a request and return the JSON body, raising RemoteError on failure."""
    try:
        response = await http_client.request(
            method,
            url,
            headers=auth_headers(token_provider),
            timeout=timeout,
            **kwargs,  # type: ignore[arg-type]
        )
    except httpx.TimeoutException as exc:
        raise RemoteError(ErrorCategory.TRANSIENT, "Connection timed out") from exc
    except httpx.DecodingError as exc:
        raise RemoteError(
            ErrorCategory.MALFORMED_RESPONSE, "Backend response could not be decoded"
        ) from exc
    except httpx.RequestError as exc:
        raise RemoteError(ErrorCategory.TRANSIENT, "Server unreachable") from exc
    except httpx.InvalidURL as exc:
        raise RemoteError(ErrorCategory.VALIDATION, "Invalid backend URL") from exc

    if response.is_error:
        raise RemoteError(
            category_for_status(response.status_code),
            _error_message(response),
            status_code=response.status_code,
        )

    try:
        payload = response.json()
    except ValueError as exc:
        raise RemoteError(
            ErrorCategory.MALFORMED_RESPONSE,
            "Backend returned a non-JSON body",
            status_code=response.status_code,
        ) from exc
    if not isinstance(payload, dict):
        raise RemoteError(
            ErrorCategory.MALFORMED_RESPONSE,
            "Backend returned an unexpected body",
            status_code=response.status_code,
        )

    body_status = payload.get("status")
    if isinstance(body_status, int) and body_status >= httpx.codes.BAD_REQUEST:
        raise RemoteError(
            category_for_status(body_status),
            str(payload.get("message") or "Request rejected"),
            status_code=body_status,
        )
    return payload


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return response.text or response.reason_phrase
