# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Response body decoding.

Turns the raw payload of a successful attempt into the value the caller's
future resolves with, according to the request's ResponseType. Only a
payload that contradicts its declared mode (malformed JSON, bytes that are
not an image) raises; everything else decodes leniently.
"""

import json
import logging
from collections.abc import Callable
from typing import Any

from .exceptions import PayloadDecodingFailure
from .types.response import Blob, DecodedImage, ResponseType, TransportResponse

logger = logging.getLogger(__name__)

DEFAULT_CHARSET = "utf-8"

# Leading bytes identifying the image formats we accept
IMAGE_SIGNATURES: tuple[tuple[bytes, str], ...] = (
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"BM", "image/bmp"),
)


def get_charset(content_type: str | None) -> str:
    """Extract the charset parameter of a Content-Type value."""
    if not content_type:
        return DEFAULT_CHARSET
    for param in content_type.split(";")[1:]:
        key, _, value = param.partition("=")
        if key.strip().lower() == "charset" and value.strip():
            return value.strip().strip('"')
    return DEFAULT_CHARSET


def sniff_image_type(data: bytes) -> str | None:
    """Return the MIME type matching the image signature, if any."""
    # RIFF container with a WEBP fourcc
    if len(data) >= 12 and data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    for signature, mime_type in IMAGE_SIGNATURES:
        if data.startswith(signature):
            return mime_type
    return None


def _decode_text(response: TransportResponse) -> str:
    charset = get_charset(response.header("content-type"))
    try:
        return response.content.decode(charset, errors="replace")
    except LookupError:
        logger.debug(f"Unknown charset {charset!r}, falling back to {DEFAULT_CHARSET}")
        return response.content.decode(DEFAULT_CHARSET, errors="replace")


def _decode_json(response: TransportResponse) -> Any:
    if not response.content.strip():
        return None
    try:
        return json.loads(_decode_text(response))
    except ValueError as e:
        raise PayloadDecodingFailure(
            f"Payload was not valid JSON: {e}", response_type=ResponseType.JSON.value
        ) from e


def _decode_buffer(response: TransportResponse) -> bytes:
    return bytes(response.content)


def _decode_blob(response: TransportResponse) -> Blob:
    return Blob(data=bytes(response.content), content_type=response.header("content-type"))


def _decode_image(response: TransportResponse) -> DecodedImage:
    mime_type = sniff_image_type(response.content)
    if mime_type is None:
        declared = response.header("content-type")
        raise PayloadDecodingFailure(
            f"Payload is not a recognized image (content type {declared!r})",
            response_type=ResponseType.IMAGE.value,
        )
    return DecodedImage(data=bytes(response.content), mime_type=mime_type)


_DECODERS: dict[ResponseType, Callable[[TransportResponse], Any]] = {
    ResponseType.NONE: _decode_text,
    ResponseType.TEXT: _decode_text,
    ResponseType.JSON: _decode_json,
    ResponseType.ARRAYBUFFER: _decode_buffer,
    ResponseType.BLOB: _decode_blob,
    ResponseType.IMAGE: _decode_image,
}


def decode_payload(response_type: ResponseType, response: TransportResponse) -> Any:
    """
    Decode a successful response according to ``response_type``.

    Args:
        response_type: The decoding mode chosen at submission
        response: Raw transport response

    Returns:
        ``str`` for NONE/TEXT, the parsed value for JSON (None for an empty
        body), ``bytes`` for ARRAYBUFFER, ``Blob`` or ``DecodedImage``

    Raises:
        PayloadDecodingFailure: If the payload does not match the mode
    """
    return _DECODERS[response_type](response)


__all__ = [
    "DEFAULT_CHARSET",
    "decode_payload",
    "get_charset",
    "sniff_image_type",
]
