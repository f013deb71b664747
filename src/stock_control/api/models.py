"""Pydantic request models for the terminal API."""

from pydantic import BaseModel, Field


class IdentifierPayload(BaseModel):
    """A scanned shelf or product identifier."""

    identifier: str


class ProductDetailPayload(BaseModel):
    """Product attributes entered on the detail step."""

    description: str = ""
    unit_id: int = 0
    secondary_unit_id: int | None = None
    width: float | None = Field(default=None, ge=0)
    length: float | None = Field(default=None, ge=0)
    height: float | None = Field(default=None, ge=0)


class PhotoPayload(BaseModel):
    """A photo written by the camera.

    When ``size_bytes`` is omitted the file is looked up on disk.
    """

    path: str
    file_name: str | None = None
    size_bytes: int | None = Field(default=None, ge=0)


class PrintRequest(BaseModel):
    """Number of labels to allocate and print."""

    count: int
