"""ASGI entrypoint for the stock control API."""

from stock_control.api.app import create_app
from stock_control.containers import build_container

app = create_app(build_container())
