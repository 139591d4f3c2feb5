"""ResourceService: remote CRUD for the CLI.

Wraps :mod:`flowctl.client.persistence`. Client, codec and transport
failures become :class:`~flowctl.services.result.ErrorCode` results.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import httpx

from flowctl.client import persistence
from flowctl.client.errors import MissingUidError, ResponseError, UnparsableResponseError
from flowctl.client.marshaling import MarshalingRestClient
from flowctl.client.paths import instance_bound_path
from flowctl.domain.errors import FieldError, MarshalError, UnresolvableType
from flowctl.domain.objects import DomainObject
from flowctl.domain.types import require_object
from flowctl.services._helpers import describe
from flowctl.services.result import ErrorCode, ServiceResult

logger = logging.getLogger(__name__)


class ResourceService:
    """CRUD operations against the platform through one marshaling client."""

    def __init__(self, client: MarshalingRestClient) -> None:
        self._client = client

    def get(self, type_name: str, uid: str) -> ServiceResult:
        """Fetch one object by uid (``flowId/id`` for drops)."""

        def run() -> dict[str, Any]:
            obj = persistence.find(self._client, type_name, id=uid)
            return describe(obj)

        return self._run("get", run)

    def find(
        self,
        type_name: str,
        criteria: dict[str, Any] | None = None,
        **opts: Any,
    ) -> ServiceResult:
        """List objects of *type_name* matching field *criteria*.

        *opts* are the listing options (``query``, ``filter``, ``start``,
        ``limit``, ``sort``, ``order``); None values are dropped.
        """

        def run() -> dict[str, Any]:
            listing = {k: v for k, v in opts.items() if v is not None}
            results = persistence.find(self._client, type_name, **(criteria or {}), **listing)
            items = [describe(r) for r in results]
            return {"type": type_name, "items": items, "count": len(items)}

        return self._run("find", run)

    def delete(self, type_name: str, uid: str) -> ServiceResult:
        def run() -> dict[str, Any]:
            require_object(type_name)
            deleted = self._client.delete(type_name, instance_bound_path(type_name, uid))
            if not deleted:
                raise self._client.response_error({}, f"Server refused to delete {type_name} {uid}")
            return {"type": type_name, "uid": uid, "deleted": True}

        return self._run("delete", run)

    def save_payload(self, text: str, type_hint: str | None = None) -> ServiceResult:
        """Decode *text* with the client's codec and save the object it holds.

        Creates the object when it has no id, otherwise replaces it.
        """

        def run() -> dict[str, Any]:
            obj = self._client.unmarshal(text, type_hint)
            if not isinstance(obj, DomainObject):
                raise MarshalError(f"Payload does not hold a domain object: {obj!r}")
            created = obj.uid is None
            persistence.save(self._client, obj)
            return {**describe(obj), "created": created}

        return self._run("save", run)

    def _run(self, op: str, fn: Callable[[], dict[str, Any]]) -> ServiceResult:
        try:
            data = fn()
        except UnresolvableType as exc:
            return ServiceResult.failure(op, ErrorCode.UNKNOWN_TYPE, exc.message, **exc.details)
        except ResponseError as exc:
            return ServiceResult.failure(op, ErrorCode.RESPONSE_ERROR, exc.message, **_response_detail(exc))
        except UnparsableResponseError as exc:
            return ServiceResult.failure(op, ErrorCode.UNPARSABLE_RESPONSE, exc.message, **exc.details)
        except MissingUidError as exc:
            return ServiceResult.failure(op, ErrorCode.MISSING_UID, exc.message, **exc.details)
        except MarshalError as exc:
            return ServiceResult.failure(op, ErrorCode.MARSHAL_ERROR, exc.message, **exc.details)
        except FieldError as exc:
            return ServiceResult.failure(op, ErrorCode.FIELD_ERROR, exc.message, **exc.details)
        except httpx.HTTPError as exc:
            logger.debug("%s failed in transport", op, exc_info=True)
            return ServiceResult.failure(op, ErrorCode.TRANSPORT_ERROR, str(exc))
        return ServiceResult.success(op, data)


def _response_detail(exc: ResponseError) -> dict[str, Any]:
    return {
        "status": exc.details.get("status"),
        "messages": exc.messages(),
        "errors": exc.errors(),
    }
