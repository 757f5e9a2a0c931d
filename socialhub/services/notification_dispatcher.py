"""
SocialHub Backend — Best-effort Notification Dispatcher
=========================================================

What:  Delivers NotificationEvents after the triggering action has committed.
How:   Each event is written in its own session and transaction on the
       application's Database, retried with tenacity (exponential backoff +
       jitter), behind a circuit breaker.
Who:   Created once in the lifespan (app.state.notification_dispatcher) and
       handed to PostService, CommentService, UserService, MessageService.

Delivery Contract:
    dispatch() NEVER raises. The like, follow, comment or message that
    produced the event is already committed when dispatch() runs; a
    failed notification is logged and dropped, and the caller's response
    is unaffected.

Failure Handling Chain:
    write fails → tenacity retries (notify_retry_max_attempts, backoff + jitter)
    → all retries fail → breaker.record_failure(), ERROR logged, event dropped
    → notify_cb_failure_threshold consecutive failures → breaker OPEN
    → while OPEN: events dropped immediately with a WARNING (no DB round-trip)
    → after notify_cb_recovery_timeout: HALF_OPEN lets one write through
    → success → CLOSED
"""

import logging
import time
from typing import Iterable, Optional

from tenacity import (
    RetryError,
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from socialhub.config import settings
from socialhub.database import Database
from socialhub.exceptions import CircuitBreakerOpenError, UnavailableError, is_storage_unavailable
from socialhub.services.notification_service import (
    NotificationEvent,
    NotificationService,
    notification_service,
)

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Circuit Breaker
# ══════════════════════════════════════════════════════════════════════════

class CircuitBreaker:
    """
    Circuit breaker around the notification write.

    State Machine:
        CLOSED (normal operation)
            → On failure: increment failure_count
            → When failure_count >= threshold: transition to OPEN

        OPEN (rejecting all writes)
            → can_execute() raises CircuitBreakerOpenError
            → After recovery_timeout seconds: transition to HALF_OPEN

        HALF_OPEN (testing recovery)
            → Allow ONE write through
            → On success: transition to CLOSED (reset failure_count)
            → On failure: transition back to OPEN (reset timer)

    Thread Safety:
        Not thread-safe (plain counters). uvicorn async workers run the
        event loop in a single thread per process, so each worker process
        keeps its own breaker.
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"

    def __init__(self, failure_threshold: int = 5, recovery_timeout: int = 30):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.failure_count = 0
        self.state = self.CLOSED
        self.last_failure_time: Optional[float] = None

    def can_execute(self) -> bool:
        """
        Returns True if a write may proceed.

        Raises:
            CircuitBreakerOpenError if OPEN and the recovery timeout hasn't elapsed.
        """
        if self.state == self.CLOSED:
            return True

        if self.state == self.OPEN:
            elapsed = time.time() - (self.last_failure_time or 0)
            if elapsed >= self.recovery_timeout:
                logger.info(
                    "Notification circuit breaker transitioning to HALF_OPEN after %.1fs",
                    elapsed,
                )
                self.state = self.HALF_OPEN
                return True
            remaining = int(self.recovery_timeout - elapsed)
            raise CircuitBreakerOpenError(recovery_time=remaining)

        return True

    def record_success(self) -> None:
        if self.state == self.HALF_OPEN:
            logger.info("Notification circuit breaker transitioning to CLOSED (store recovered)")
        self.failure_count = 0
        self.state = self.CLOSED
        self.last_failure_time = None

    def record_failure(self) -> None:
        self.failure_count += 1
        self.last_failure_time = time.time()

        if self.state == self.HALF_OPEN:
            logger.warning("Notification circuit breaker returning to OPEN (test write failed)")
            self.state = self.OPEN
        elif self.failure_count >= self.failure_threshold:
            logger.warning(
                "Notification circuit breaker OPENING after %d consecutive failures",
                self.failure_count,
            )
            self.state = self.OPEN


# ══════════════════════════════════════════════════════════════════════════
# Dispatcher
# ══════════════════════════════════════════════════════════════════════════

def _is_transient(exc: BaseException) -> bool:
    """Only an unreachable store is worth retrying; constraint errors fail at once."""
    return isinstance(exc, UnavailableError) or is_storage_unavailable(exc)


class NotificationDispatcher:
    """Writes notification events out of band of the primary transaction."""

    def __init__(
        self,
        database: Database,
        service: NotificationService = notification_service,
        breaker: Optional[CircuitBreaker] = None,
    ):
        self.database = database
        self.service = service
        self.breaker = breaker or CircuitBreaker(
            failure_threshold=settings.notify_cb_failure_threshold,
            recovery_timeout=settings.notify_cb_recovery_timeout,
        )

    async def dispatch(self, event: NotificationEvent) -> bool:
        """
        Delivers one event. Never raises.

        Returns:
            True if a notification row was committed, False if the event was
            a self-action, the breaker was open, or the write failed.
        """
        if event.is_self_action:
            return False

        try:
            self.breaker.can_execute()
        except CircuitBreakerOpenError as e:
            logger.warning(
                "Dropping %s notification for %s: breaker open (retry in ~%ds)",
                event.kind.value,
                event.recipient_id,
                e.recovery_time,
            )
            return False

        try:
            await self._write_with_retry(event)
        except RetryError as e:
            self.breaker.record_failure()
            last = e.last_attempt.exception() if e.last_attempt else None
            logger.error(
                "Dropping %s notification for %s after %d attempts: %s",
                event.kind.value,
                event.recipient_id,
                settings.notify_retry_max_attempts,
                type(last).__name__ if last else "unknown error",
            )
            return False
        except Exception as e:
            self.breaker.record_failure()
            logger.error(
                "Dropping %s notification for %s: %s",
                event.kind.value,
                event.recipient_id,
                str(e),
                exc_info=True,
            )
            return False

        self.breaker.record_success()
        return True

    async def dispatch_many(self, events: Iterable[NotificationEvent]) -> int:
        """Dispatches events one by one; returns how many were delivered."""
        delivered = 0
        for event in events:
            if await self.dispatch(event):
                delivered += 1
        return delivered

    @retry(
        retry=retry_if_exception(_is_transient),
        stop=stop_after_attempt(settings.notify_retry_max_attempts),
        wait=wait_exponential_jitter(
            initial=settings.notify_retry_min_wait,
            max=settings.notify_retry_max_wait,
        ),
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )
    async def _write_with_retry(self, event: NotificationEvent) -> None:
        async with self.database.session() as session:
            await self.service.fan_out(session, event)
            await session.commit()
