import json
import os
import uuid
from collections.abc import Mapping
from typing import Any, Union

from .serialization import to_snake_case, to_wire

DEFAULT_MIME_TYPE = "application/octet-stream"

MIME_TYPES = {
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "m4a": "audio/m4a",
    "ogg": "audio/ogg",
    "flac": "audio/flac",
    "webm": "audio/webm",
    "mp4": "audio/mp4",
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "webp": "image/webp",
}

CRLF = b"\r\n"


def mime_type_for(filename: str) -> str:
    """Infer a MIME type from the file extension only."""
    ext = os.path.splitext(filename)[1].lstrip(".").lower()
    return MIME_TYPES.get(ext, DEFAULT_MIME_TYPE)


def new_boundary() -> str:
    return f"Boundary-{uuid.uuid4()}"


def _field_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(to_wire(value), separators=(",", ":"), ensure_ascii=False)
    wired = to_wire(value)
    return wired if isinstance(wired, str) else str(wired)


class MultipartBuilder:
    """Assemble a multipart/form-data body part by part, in insertion order.

    Knows nothing about HTTP: build() returns bytes and content_type the header value.
    """

    def __init__(self, boundary: Union[str, None] = None):
        self.boundary = boundary or new_boundary()
        self._parts: list[bytes] = []

    @property
    def content_type(self) -> str:
        return f"multipart/form-data; boundary={self.boundary}"

    def add_file(
        self,
        name: str,
        filename: str,
        data: bytes,
        mime_type: Union[str, None] = None,
    ) -> "MultipartBuilder":
        mime = mime_type or mime_type_for(filename)
        head = (
            f"--{self.boundary}\r\n"
            f'Content-Disposition: form-data; name="{name}"; filename="{filename}"\r\n'
            f"Content-Type: {mime}\r\n\r\n"
        )
        self._parts.append(head.encode("utf-8") + bytes(data) + CRLF)
        return self

    def add_field(self, name: str, value: Any) -> "MultipartBuilder":
        """Append a text part; None values contribute no part."""
        if value is None:
            return self
        head = (
            f"--{self.boundary}\r\n"
            f'Content-Disposition: form-data; name="{to_snake_case(name)}"\r\n\r\n'
        )
        self._parts.append(head.encode("utf-8") + _field_text(value).encode("utf-8") + CRLF)
        return self

    def add_fields(self, fields: Mapping[str, Any]) -> "MultipartBuilder":
        for name, value in fields.items():
            self.add_field(name, value)
        return self

    def build(self) -> bytes:
        return b"".join(self._parts) + f"--{self.boundary}--\r\n".encode("utf-8")
