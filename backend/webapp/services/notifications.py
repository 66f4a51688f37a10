"""Notification publisher backed by an ARQ (Redis) queue.

Publishing is fire-and-forget from the API's point of view: failures are
logged and reported as ``False``, never raised. Delivery and retries belong
to the worker consuming the queue.

The publisher connects with a short timeout and no connection retries, and
after a failed connection it skips Redis for ``backoff_seconds`` so an outage
doesn't slow every registration down.
"""
import dataclasses
import time
from typing import Any, Callable, Dict, Optional

from arq import create_pool
from arq.connections import ArqRedis, RedisSettings

from webapp.utils.logger import logger

# Worker function that handles messages on the registration topic
VERIFICATION_EMAIL_JOB = "send_verification_email"

CONNECT_TIMEOUT_SECONDS = 1
BACKOFF_SECONDS = 30.0


class NotificationPublisher:
    """Publishes messages onto a named ARQ queue (the topic)."""

    def __init__(
        self,
        redis_settings: RedisSettings,
        job_name: str = VERIFICATION_EMAIL_JOB,
        backoff_seconds: float = BACKOFF_SECONDS,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        self.redis_settings = dataclasses.replace(
            redis_settings,
            conn_timeout=CONNECT_TIMEOUT_SECONDS,
            conn_retries=0,
        )
        self.job_name = job_name
        self.backoff_seconds = backoff_seconds
        self._monotonic = monotonic
        self._pool: Optional[ArqRedis] = None
        self._retry_at = 0.0

    async def _get_pool(self) -> ArqRedis:
        if self._pool is None:
            self._pool = await create_pool(self.redis_settings)
        return self._pool

    async def publish(self, topic: str, payload: Dict[str, Any]) -> bool:
        """
        Queue a message for the worker.

        Args:
            topic: Queue name the worker listens on
            payload: JSON-serializable message body

        Returns:
            True if the message was queued, False otherwise
        """
        if self._pool is None and self._monotonic() < self._retry_at:
            logger.warning(f"Redis unavailable, not publishing {self.job_name} to {topic}")
            return False

        try:
            pool = await self._get_pool()
        except Exception as e:
            # Redis unreachable or refusing connections
            self._retry_at = self._monotonic() + self.backoff_seconds
            logger.error(f"Failed to connect to Redis for {self.job_name}: {e}", exc_info=True)
            return False

        try:
            job = await pool.enqueue_job(self.job_name, payload, _queue_name=topic)
            logger.info(f"Published {self.job_name} to {topic}: job {job.job_id if job else 'duplicate'}")
            return True
        except Exception as e:
            # Connection reset, serialization problems
            logger.error(f"Failed to publish {self.job_name} to {topic}: {e}", exc_info=True)
            return False

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
