"""Service results: what every flowctl operation hands back to the CLI.

A service never raises for an expected failure. Codec, field, response and
transport errors are caught at the service boundary and reported as a
failed :class:`ServiceResult` whose :class:`ServiceError` carries one of the
stable :class:`ErrorCode` values plus the exception's structured details.
The CLI prints the result and exits 1 when ``ok`` is False.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class ErrorCode(StrEnum):
    """Stable failure codes, part of the ``--json`` output contract."""

    UNSUPPORTED_FORMAT = "UNSUPPORTED_FORMAT"  # wire format other than json/xml
    UNKNOWN_TYPE = "UNKNOWN_TYPE"  # tag names no domain object
    MARSHAL_ERROR = "MARSHAL_ERROR"  # payload does not decode
    FIELD_ERROR = "FIELD_ERROR"  # a field value does not fit its schema
    RESPONSE_ERROR = "RESPONSE_ERROR"  # the API answered with a failed head
    UNPARSABLE_RESPONSE = "UNPARSABLE_RESPONSE"
    MISSING_UID = "MISSING_UID"
    TRANSPORT_ERROR = "TRANSPORT_ERROR"  # the request never completed


class ServiceError(BaseModel):
    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of one service operation.

    Attributes:
        ok: Whether the operation succeeded.
        op: Operation name, also the renderer key (``"convert"``, ``"get"``...).
        data: Payload on success: converted text, a described object, a listing.
        warnings: Non-fatal notes, printed to stderr outside ``--json`` mode.
        error: Set exactly when ``ok`` is False.
        meta: Formats and counts, shown with ``--verbose``.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @classmethod
    def success(cls, op: str, data: dict[str, Any], *, meta: dict[str, Any] | None = None) -> ServiceResult:
        return cls(ok=True, op=op, data=data, meta=meta)

    @classmethod
    def failure(cls, op: str, code: ErrorCode | str, message: str, **detail: Any) -> ServiceResult:
        error = ServiceError(code=str(code), message=message, detail=detail)
        return cls(ok=False, op=op, error=error)
