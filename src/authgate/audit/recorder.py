"""Audit recorder — fire-and-forget audit writes after successful responses.

Learn: Audit logging must never slow down or fail a user-facing request.
So the write is dispatched as a detached asyncio task that the response
path never awaits:

    handler → response rendered → observe() → create_task(write) → response sent
                                                        ↓
                                          store.insert() (errors logged only)

The write task is an isolated failure domain: any exception from the
store is logged and dropped. No retries and no dedup: a client retry that
succeeds twice produces two rows. Tasks are never cancelled when the
client disconnects; drain() waits for whatever is still in flight.
"""

import asyncio
import json
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import structlog
from fastapi import Request, Response
from fastapi.routing import APIRoute

from authgate.audit.store import AuditStore
from authgate.auth.dependencies import optional_principal
from authgate.schemas.audit import AuditEntry

logger = structlog.get_logger()

AUDIT_LABEL_ATTR = "__audit_label__"


@dataclass(frozen=True)
class AuditLabel:
    action: str
    resource_type: str


def audited(action: str, resource_type: str):
    """Label an endpoint so AuditedRoute records its successful responses.

    Apply it below the router decorator, so the label is in place when
    the route is built:

        @router.patch("/documents/{id}")
        @audited("update", "document")
        async def update_document(id: str): ...
    """
    label = AuditLabel(action=action, resource_type=resource_type)

    def decorator(endpoint):
        setattr(endpoint, AUDIT_LABEL_ATTR, label)
        return endpoint

    return decorator


def is_success(status_code: int) -> bool:
    return 200 <= status_code <= 299


def resolve_resource_id(
    path_params: Mapping[str, Any], payload: Any
) -> Optional[str]:
    """Path param `id`, else `id` in the response payload, else None."""
    resource_id = path_params.get("id")
    if resource_id is None or resource_id == "":
        resource_id = payload.get("id") if isinstance(payload, dict) else None
    if resource_id is None or resource_id == "":
        return None
    return str(resource_id)


def _json_payload(response: Response) -> Any:
    """Decode a rendered JSON body. Streaming and non-JSON bodies give None."""
    body = getattr(response, "body", None)
    if not body:
        return None
    content_type = response.headers.get("content-type", "")
    if "json" not in content_type:
        return None
    try:
        return json.loads(body)
    except ValueError:
        return None


class AuditRecorder:
    """Dispatches audit entries to an append-only store without blocking."""

    def __init__(self, store: AuditStore):
        self.store = store
        self._pending: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        """Number of writes still in flight."""
        return len(self._pending)

    def record(
        self,
        user_id: Optional[str],
        action: str,
        resource_type: str,
        resource_id: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> asyncio.Task:
        """Dispatch one audit write. Returns the detached task."""
        task = asyncio.create_task(
            self._write(user_id, action, resource_type, resource_id, details)
        )
        # The loop only keeps weak references to tasks.
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _write(
        self,
        user_id: Optional[str],
        action: str,
        resource_type: str,
        resource_id: Optional[str],
        details: Optional[dict],
    ) -> None:
        try:
            entry = AuditEntry(
                user_id=user_id,
                action=action,
                resource_type=resource_type,
                resource_id=resource_id,
                details=details,
            )
            await self.store.insert(entry)
        except Exception:
            logger.exception(
                "audit.write_failed",
                user_id=user_id,
                action=action,
                resource_type=resource_type,
                resource_id=resource_id,
            )

    def observe(
        self, label: AuditLabel, request: Request, response: Response
    ) -> Optional[asyncio.Task]:
        """Record a labelled route's response if it was successful.

        The principal is read here, synchronously, before the write is
        dispatched.
        """
        if not is_success(response.status_code):
            return None
        principal = optional_principal(request)
        resource_id = resolve_resource_id(
            request.path_params, _json_payload(response)
        )
        return self.record(
            user_id=principal.user_id if principal else None,
            action=label.action,
            resource_type=label.resource_type,
            resource_id=resource_id,
        )

    async def drain(self) -> None:
        """Wait for in-flight writes (shutdown, tests). Never cancels them."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


class AuditedRoute(APIRoute):
    """Route class that hands labelled routes' responses to the recorder.

    Learn: Use as APIRouter(route_class=AuditedRoute). Routes without an
    @audited label are left untouched. The response is observed, never
    modified, and returned without waiting for the audit write. The
    recorder is looked up on app.state.audit_recorder.
    """

    def get_route_handler(self):
        handler = super().get_route_handler()
        label: Optional[AuditLabel] = getattr(self.endpoint, AUDIT_LABEL_ATTR, None)
        if label is None:
            return handler

        async def audited_handler(request: Request) -> Response:
            response = await handler(request)
            try:
                recorder: AuditRecorder = request.app.state.audit_recorder
                recorder.observe(label, request, response)
            except Exception:
                logger.exception(
                    "audit.observe_failed",
                    action=label.action,
                    resource_type=label.resource_type,
                )
            return response

        return audited_handler
