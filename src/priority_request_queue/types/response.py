# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Response decoding modes and decoded value types.

A request chooses one ResponseType when it is submitted. The queue does not
look at it for scheduling; it is handed to the decoding step once the
transport reports a successful attempt.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

# Alternative spellings accepted for each decoding mode
_RESPONSE_TYPE_ALIASES = {
    "": "none",
    "structured": "json",
    "binarybuffer": "arraybuffer",
    "buffer": "arraybuffer",
    "bytes": "arraybuffer",
    "binaryblob": "blob",
}


class ResponseType(Enum):
    """
    How a successful response body is decoded.

    - NONE: decode as text, the same as TEXT
    - TEXT: ``str`` using the response charset
    - JSON: parsed structured data, sends ``Accept: application/json``
    - ARRAYBUFFER: raw ``bytes``
    - BLOB: a ``Blob`` carrying the bytes and their content type
    - IMAGE: a ``DecodedImage``; any ``image/*`` MIME type selects this mode
    """

    NONE = "none"
    TEXT = "text"
    JSON = "json"
    ARRAYBUFFER = "arraybuffer"
    BLOB = "blob"
    IMAGE = "image"

    @classmethod
    def _missing_(cls, value: object) -> "ResponseType | None":
        if not isinstance(value, str):
            return None
        normalized = value.strip().lower()
        if normalized.startswith("image/"):
            return cls.IMAGE
        normalized = _RESPONSE_TYPE_ALIASES.get(normalized, normalized)
        for member in cls:
            if member.value == normalized:
                return member
        return None


@dataclass(frozen=True)
class Blob:
    """Binary payload tagged with the content type the server reported."""

    data: bytes
    content_type: str | None = None

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class DecodedImage:
    """
    Image payload whose format was verified from its leading bytes.

    Attributes:
        data: Raw encoded image bytes
        mime_type: Sniffed MIME type, e.g. ``image/png``
    """

    data: bytes
    mime_type: str

    @property
    def format(self) -> str:
        return self.mime_type.split("/", 1)[1]


@dataclass(frozen=True)
class ProgressEvent:
    """
    Download progress for one attempt.

    Attributes:
        loaded: Bytes received so far
        total: Expected size from Content-Length, None when unknown
    """

    loaded: int
    total: int | None = None

    @property
    def length_computable(self) -> bool:
        return self.total is not None


@dataclass(frozen=True)
class TransportResponse:
    """
    Raw outcome of one attempt, as reported by a transport.

    Classification into success or failure happens in the request, so a
    transport only has to report what it saw.

    Attributes:
        status_code: HTTP status, 0 when no response was obtained
        content: Undecoded response body
        headers: Response headers, matched case-insensitively by header()
    """

    status_code: int
    content: bytes = b""
    headers: dict[str, str] | None = None

    def header(self, name: str, default: Any = None) -> Any:
        if not self.headers:
            return default
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return default


__all__ = [
    "Blob",
    "DecodedImage",
    "ProgressEvent",
    "ResponseType",
    "TransportResponse",
]
