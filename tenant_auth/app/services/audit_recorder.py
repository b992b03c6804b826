"""
Audit Recorder

Best-effort, non-blocking audit trail. Entries are queued in memory and a
background task hands them to an async sink; the observed operation never
waits for, or fails because of, the audit backend.
"""

import asyncio
import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterator, Optional
from uuid import UUID

from tenant_auth.domain.base import SYSTEM_USER_EMAIL, SYSTEM_USER_ID, Identifiable
from tenant_auth.domain.entities import AuditEvent, AuditSeverity
from tenant_auth.libs.result import Error

logger = logging.getLogger(__name__)

AuditSink = Callable[[AuditEvent], Awaitable[None]]


@dataclass(frozen=True)
class AuditActor:
    """Who performed an operation"""

    tenant_id: str
    user_id: UUID = SYSTEM_USER_ID
    email: str = SYSTEM_USER_EMAIL

    @classmethod
    def system(cls, tenant_id: str) -> "AuditActor":
        return cls(tenant_id=tenant_id)

    @property
    def is_system(self) -> bool:
        return self.user_id == SYSTEM_USER_ID


@dataclass(frozen=True)
class RequestMetadata:
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    request_id: Optional[str] = None


@dataclass
class AuditScope:
    """Mutable view of an in-flight operation, filled in by the caller."""

    action: str
    actor: AuditActor
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    severity: AuditSeverity = AuditSeverity.info
    error_message: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def failed(self) -> bool:
        return self.error_message is not None

    def fail(self, error: Any) -> None:
        """Mark the operation failed. Accepts an Error or a message."""
        if isinstance(error, Error):
            self.error_message = f"{error.code}: {error.message}"
        else:
            self.error_message = str(error)

    def target(self, entity: Identifiable) -> None:
        self.entity_type, self.entity_id = entity.audit_ref()

    def as_actor(self, actor: AuditActor) -> None:
        """Attribute the entry to an actor discovered mid-operation (e.g. login)."""
        self.actor = actor

    def elevate(self) -> None:
        self.severity = AuditSeverity.high


class AuditRecorder:
    """
    Queue-backed audit writer.

    Business Rules:
    - record() never blocks and never raises
    - A full queue drops the entry and logs it
    - Sink failures are logged and swallowed
    """

    def __init__(self, sink: AuditSink, queue_size: int = 1000):
        self.sink = sink
        self.queue_size = queue_size
        self._queue: Optional[asyncio.Queue] = None
        self._worker: Optional[asyncio.Task] = None

    def record(self, event: AuditEvent) -> bool:
        """
        Enqueue an entry for asynchronous persistence.

        Returns:
            False if the entry was dropped
        """
        try:
            self._ensure_worker()
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            logger.warning(
                f"Audit queue full, dropping event {event.action} for tenant {event.tenant_id}"
            )
            return False
        except RuntimeError:
            # No running event loop
            logger.error(f"Audit recorder has no event loop, dropping event {event.action}")
            return False
        return True

    @contextmanager
    def observe(
        self,
        action: str,
        actor: AuditActor,
        request: Optional[RequestMetadata] = None,
        entity_type: Optional[str] = None,
        high_risk: bool = False,
    ) -> Iterator[AuditScope]:
        """
        Bracket an operation and record one entry when it ends.

        An exception escaping the block is recorded as a failure and re-raised.
        """
        scope = AuditScope(action=action, actor=actor, entity_type=entity_type)
        if high_risk:
            scope.elevate()
        started = time.perf_counter()
        try:
            yield scope
        except Exception as exc:
            scope.fail(str(exc) or exc.__class__.__name__)
            raise
        finally:
            elapsed_ms = int((time.perf_counter() - started) * 1000)
            self.record(self._build_event(scope, request or RequestMetadata(), elapsed_ms))

    async def flush(self) -> None:
        """Wait until every queued entry has been handed to the sink."""
        if self._queue is not None and self._worker is not None and not self._worker.done():
            await self._queue.join()

    async def stop(self) -> None:
        await self.flush()
        if self._worker is not None:
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
        self._worker = None
        self._queue = None

    def _ensure_worker(self) -> None:
        loop = asyncio.get_running_loop()
        if self._worker is not None and (self._worker.done() or self._worker.get_loop() is not loop):
            self._worker = None
            self._queue = None
        if self._queue is None:
            self._queue = asyncio.Queue(maxsize=self.queue_size)
        if self._worker is None:
            self._worker = loop.create_task(self._drain(self._queue))

    async def _drain(self, queue: asyncio.Queue) -> None:
        while True:
            event = await queue.get()
            try:
                await self.sink(event)
            except Exception as exc:
                logger.error(f"Failed to persist audit event {event.action}: {exc}")
            finally:
                queue.task_done()

    @staticmethod
    def _build_event(scope: AuditScope, request: RequestMetadata, elapsed_ms: int) -> AuditEvent:
        return AuditEvent(
            tenant_id=scope.actor.tenant_id,
            user_id=scope.actor.user_id,
            user_email=scope.actor.email,
            action=scope.action,
            entity_type=scope.entity_type,
            entity_id=scope.entity_id,
            success=not scope.failed,
            error_message=scope.error_message,
            severity=scope.severity,
            execution_time_ms=elapsed_ms,
            ip_address=request.ip_address,
            user_agent=request.user_agent,
            request_id=request.request_id,
            event_metadata=scope.metadata or None,
        )
