"""Asynchronous publisher for the query audit trail.

Events are put on a bounded in-memory queue and handed to Kafka by a single
background task, so publishing never delays or fails the HTTP response that
triggered it. The task only enqueues into the producer's batch accumulator;
delivery results arrive on a callback, which lets ``linger_ms`` and
``max_batch_size`` group events into batches. Delivery is best effort, and
every failure is logged before the event is dropped.
"""

import asyncio
import contextlib
from functools import partial

import orjson
from aiokafka import AIOKafkaProducer
from aiokafka.errors import KafkaError
from loguru import logger

from src.core.config import KafkaConfig
from src.core.context import RequestContext
from src.infrastructure.constants import AUDIT_STOP_TIMEOUT_SECONDS
from src.infrastructure.messaging.events import AuditEvent, QueryKind


def _serialize_value(value: dict[str, object]) -> bytes:
    return orjson.dumps(value)


def _serialize_key(key: str) -> bytes:
    return key.encode("utf-8")


def _describe_request() -> str | None:
    """Request identifiers carried in ``informacoesAdicionais``."""
    identifiers = RequestContext.as_dict()
    if not identifiers:
        return None
    return ";".join(
        f"{'correlationId' if key == 'correlation_id' else 'requestId'}={value}"
        for key, value in identifiers.items()
    )


class AuditPublisher:
    """Sends ``AuditEvent`` records to the audit topic, keyed by event id.

    Args:
        config: Kafka connection and producer settings.
    """

    def __init__(self, config: KafkaConfig) -> None:
        self.config = config
        self._producer: AIOKafkaProducer | None = None
        self._queue: asyncio.Queue[AuditEvent] | None = None
        self._worker: asyncio.Task[None] | None = None

    @property
    def topic(self) -> str:
        return self.config.topic

    async def start(self) -> None:
        """Connect the producer and start the delivery task.

        A broker that cannot be reached is logged and leaves the publisher
        unhealthy; the application keeps serving queries without auditing.
        """
        if not self.config.enabled:
            logger.info("Audit publishing disabled")
            return

        producer = AIOKafkaProducer(
            bootstrap_servers=self.config.bootstrap_servers,
            client_id=self.config.client_id,
            acks=self.config.acks,
            linger_ms=self.config.linger_ms,
            max_batch_size=self.config.max_batch_size,
            request_timeout_ms=self.config.request_timeout_ms,
            retry_backoff_ms=self.config.retry_backoff_ms,
            compression_type=self.config.compression_type,
            key_serializer=_serialize_key,
            value_serializer=_serialize_value,
        )
        try:
            await producer.start()
        except (KafkaError, OSError) as exc:
            logger.error(
                "Kafka unavailable, audit events will be dropped: {}",
                exc,
                bootstrap_servers=self.config.bootstrap_servers,
            )
            with contextlib.suppress(KafkaError, OSError):
                await producer.stop()
            return

        self._producer = producer
        self._queue = asyncio.Queue(maxsize=self.config.queue_size)
        self._worker = asyncio.create_task(self._run(), name="audit-publisher")
        logger.info(
            "Audit publisher started",
            topic=self.config.topic,
            bootstrap_servers=self.config.bootstrap_servers,
        )

    async def stop(self) -> None:
        """Flush pending events, then stop the delivery task and the producer."""
        if self._queue is not None and self._worker is not None:
            try:
                await asyncio.wait_for(
                    self._queue.join(), timeout=AUDIT_STOP_TIMEOUT_SECONDS
                )
            except TimeoutError:
                logger.warning(
                    "Audit queue not drained on shutdown, {} event(s) dropped",
                    self._queue.qsize(),
                )
            self._worker.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._worker

        if self._producer is not None:
            await self._producer.stop()
            logger.info("Audit publisher stopped")

        self._producer = None
        self._queue = None
        self._worker = None

    def publish(self, event: AuditEvent) -> None:
        """Queue ``event`` for delivery without waiting for the broker."""
        if self._queue is None:
            logger.debug(
                "Audit publisher not running, event {} not sent", event.event_id
            )
            return
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            logger.error(
                "Audit queue full, event {} dropped",
                event.event_id,
                query_kind=event.query_kind.value,
            )

    def publish_success(
        self,
        query_kind: QueryKind,
        parameter: str | None,
        result_count: int | None,
        elapsed_ms: int,
        client_ip: str | None,
        user_agent: str | None,
    ) -> None:
        self.publish(
            AuditEvent.success_event(
                query_kind,
                parameter,
                result_count,
                elapsed_ms,
                client_ip,
                user_agent,
                additional_info=_describe_request(),
            )
        )

    def publish_failure(
        self,
        query_kind: QueryKind,
        parameter: str | None,
        error_message: str,
        elapsed_ms: int,
        client_ip: str | None,
        user_agent: str | None,
    ) -> None:
        self.publish(
            AuditEvent.failure_event(
                query_kind,
                parameter,
                error_message,
                elapsed_ms,
                client_ip,
                user_agent,
                additional_info=_describe_request(),
            )
        )

    async def drain(self) -> None:
        """Wait until every queued event has been handed to the producer."""
        if self._queue is not None:
            await self._queue.join()

    def is_healthy(self) -> bool:
        return self._producer is not None

    def status(self) -> str:
        return f"AuditPublisher - topic: {self.topic}, healthy: {self.is_healthy()}"

    async def _run(self) -> None:
        queue = self._queue
        if queue is None:
            return
        while True:
            event = await queue.get()
            try:
                await self._send(event)
            finally:
                queue.task_done()

    async def _send(self, event: AuditEvent) -> None:
        producer = self._producer
        if producer is None:
            return
        try:
            delivery = await producer.send(
                self.config.topic, value=event.to_payload(), key=event.event_id
            )
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # noqa: BLE001 - delivery failures never reach callers
            logger.error(
                "Failed to publish audit event {}: {}",
                event.event_id,
                exc,
                error_type=type(exc).__name__,
                topic=self.config.topic,
            )
            return
        delivery.add_done_callback(partial(self._on_delivery, event))

    def _on_delivery(self, event: AuditEvent, delivery: asyncio.Future) -> None:
        """Log the broker's answer for ``event`` once its batch completes."""
        if delivery.cancelled():
            logger.warning("Audit event {} cancelled before delivery", event.event_id)
            return
        exc = delivery.exception()
        if exc is not None:
            logger.error(
                "Failed to deliver audit event {}: {}",
                event.event_id,
                exc,
                error_type=type(exc).__name__,
                topic=self.config.topic,
            )
            return
        logger.debug(
            "Audit event published: {} - offset: {}",
            event.event_id,
            delivery.result().offset,
        )
