"""ARQ worker configuration.

Run with: arq webapp.workers.config.WorkerSettings
"""
import httpx
from webapp.config import settings
from webapp.utils.logger import logger
from webapp.workers.redis_config import redis_settings
from webapp.workers.tasks import send_verification_email


async def startup(ctx):
    """Worker startup hook."""
    logger.info("ARQ worker starting up...")
    ctx["http_client"] = httpx.AsyncClient(timeout=10.0)


async def shutdown(ctx):
    """Worker shutdown hook."""
    logger.info("ARQ worker shutting down...")
    await ctx["http_client"].aclose()


class WorkerSettings:
    """ARQ worker settings."""

    functions = [
        send_verification_email,
    ]

    on_startup = startup
    on_shutdown = shutdown

    redis_settings = redis_settings
    queue_name = settings.notification_topic

    # Job configuration
    max_jobs = 10
    job_timeout = 30
    keep_result = 3600  # Keep results for 1 hour
    retry_jobs = True
    max_tries = 3
