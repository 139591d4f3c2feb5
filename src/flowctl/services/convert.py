"""ConvertService: offline transcoding and inspection of wire payloads.

No network access: payloads are decoded with one codec and re-encoded
with the other, or summarized field by field.
"""

from __future__ import annotations

import logging
from typing import Any

from flowctl.domain.errors import FieldError, MarshalError
from flowctl.marshal import MARSHALERS, get_marshaler
from flowctl.services._helpers import describe
from flowctl.services.result import ErrorCode, ServiceResult

logger = logging.getLogger(__name__)


class ConvertService:
    """Transcode and inspect JSON/XML payloads."""

    def convert(
        self,
        text: str,
        *,
        source: str,
        target: str,
        type_hint: str | None = None,
    ) -> ServiceResult:
        """Decode *text* as *source* and re-encode it as *target*.

        Args:
            text: Wire payload.
            source: Format of *text* (``json`` or ``xml``).
            target: Output format.
            type_hint: Tag to decode the root as, when the payload is not
                self-describing.
        """
        op = "convert"
        bad = _check_formats(op, source, target)
        if bad is not None:
            return bad
        try:
            value = get_marshaler(source).loads(text, type_hint)
            output = get_marshaler(target).dumps(value)
        except (MarshalError, FieldError) as exc:
            return _decode_failure(op, exc)

        logger.debug("Converted %d chars of %s into %d chars of %s", len(text), source, len(output), target)
        return ServiceResult.success(op, {"output": output}, meta={"source": source, "target": target})

    def inspect(self, text: str, *, source: str, type_hint: str | None = None) -> ServiceResult:
        """Decode *text* and summarize what it holds."""
        op = "inspect"
        bad = _check_formats(op, source)
        if bad is not None:
            return bad
        try:
            value = get_marshaler(source).loads(text, type_hint)
        except (MarshalError, FieldError) as exc:
            return _decode_failure(op, exc)
        return ServiceResult.success(op, describe(value), meta={"source": source})


def _check_formats(op: str, *formats: str) -> ServiceResult | None:
    for fmt in formats:
        if fmt not in MARSHALERS:
            return ServiceResult.failure(
                op,
                ErrorCode.UNSUPPORTED_FORMAT,
                f"Unsupported wire format {fmt!r}",
                choices=sorted(MARSHALERS),
            )
    return None


def _decode_failure(op: str, exc: MarshalError | FieldError) -> ServiceResult:
    code = ErrorCode.MARSHAL_ERROR if isinstance(exc, MarshalError) else ErrorCode.FIELD_ERROR
    detail: dict[str, Any] = dict(exc.details)
    return ServiceResult.failure(op, code, exc.message, **detail)
