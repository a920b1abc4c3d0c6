# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Per-request options.

RequestOptions enumerates every option a submission recognizes, with its
default, and validates them before the request is queued. Options may be
given in snake_case (``response_type``) or camelCase (``responseType``).
"""

from collections.abc import Callable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from ..exceptions import InvalidOptionError
from .priority import RequestPriority
from .response import ProgressEvent, ResponseType

ProgressCallback = Callable[[ProgressEvent], Any]


class RequestOptions(BaseModel):
    """
    Validated option bundle for a single request.

    Attributes:
        priority: Queue priority (enum, integer value or name), default MEDIUM
        response_type: Decoding mode for a successful response, default NONE
        body: Request payload; mappings and lists are sent as JSON
        headers: Extra request headers, applied last
        auth: Bearer token, or a full Authorization value with its scheme
        with_credentials: Whether cookies are sent with the request
        max_retries: Per-request retry budget, overrides the queue default
        on_progress: Callback receiving a ProgressEvent per received chunk
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
        arbitrary_types_allowed=True,
    )

    priority: RequestPriority = RequestPriority.MEDIUM
    response_type: ResponseType = ResponseType.NONE
    body: Any = None
    headers: dict[str, str] = Field(default_factory=dict)
    auth: str | None = None
    with_credentials: bool = False
    max_retries: int | None = Field(default=None, ge=0)
    on_progress: ProgressCallback | None = None

    @field_validator("priority", mode="before")
    @classmethod
    def _parse_priority(cls, value: Any) -> Any:
        if isinstance(value, str):
            return RequestPriority.parse(value)
        return value

    @field_validator("response_type", mode="before")
    @classmethod
    def _parse_response_type(cls, value: Any) -> Any:
        if value is None:
            return ResponseType.NONE
        if isinstance(value, ResponseType):
            return value
        try:
            return ResponseType(value)
        except ValueError:
            allowed = ", ".join(repr(member.value) for member in ResponseType)
            raise ValueError(
                f"responseType {value!r} is not supported; expected one of {allowed}"
            ) from None

    @classmethod
    def build(
        cls,
        options: "RequestOptions | Mapping[str, Any] | None" = None,
        **overrides: Any,
    ) -> "RequestOptions":
        """
        Build options from an instance, a mapping and/or keyword overrides.

        Args:
            options: Existing options, a mapping of option names, or None
            **overrides: Individual options; these take precedence

        Returns:
            Validated RequestOptions

        Raises:
            InvalidOptionError: If any option is unknown or invalid
        """
        if isinstance(options, RequestOptions):
            if not overrides:
                return options
            data = {name: getattr(options, name) for name in cls.model_fields}
        elif options is None:
            data = {}
        elif isinstance(options, Mapping):
            data = dict(options)
        else:
            raise InvalidOptionError(
                f"Request options must be a mapping or RequestOptions, "
                f"got {type(options).__name__}"
            )
        data.update(overrides)

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            errors = e.errors()
            location = errors[0]["loc"] if errors else ()
            option = ".".join(str(part) for part in location) or None
            details = "; ".join(
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
                for err in errors
            )
            raise InvalidOptionError(
                f"Invalid request options: {details}", option=option
            ) from e


__all__ = ["ProgressCallback", "RequestOptions"]
