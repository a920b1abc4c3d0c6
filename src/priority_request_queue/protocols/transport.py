# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Protocol for transport integration."""

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from ..types.options import ProgressCallback
from ..types.response import TransportResponse


@runtime_checkable
class TransportProtocol(Protocol):
    """
    Minimal protocol for the component that performs a single attempt.

    The core library does NOT speak HTTP. It only needs to:
    1. Open a handle for one attempt
    2. Send it and learn the status code and raw payload
    3. Abort it when a higher-priority request needs the slot

    Transports never touch queue state; they only report outcomes.
    """

    def open(self, method: str, url: str, with_credentials: bool) -> Any:
        """
        Prepare a handle for one attempt.

        Raises:
            ConstructionError: If no transport mechanism is usable
        """
        ...

    async def send(
        self,
        handle: Any,
        body: bytes | str | None,
        headers: Mapping[str, str],
        on_progress: ProgressCallback | None = None,
    ) -> TransportResponse:
        """
        Perform the attempt and report what the server answered.

        Raises:
            NetworkFailure: If no status could be obtained
        """
        ...

    def abort(self, handle: Any) -> None:
        """
        Cancel the attempt behind ``handle``.

        Raises:
            TransportStateError: If the handle has no attempt in flight
        """
        ...
