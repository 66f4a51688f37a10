"""Redis connection settings shared by the API publisher and the ARQ worker."""
from urllib.parse import urlparse

from arq.connections import RedisSettings

from webapp.config import settings


def parse_redis_url(url: str) -> RedisSettings:
    """
    Build ARQ RedisSettings from a redis:// or rediss:// URL.

    The database index is taken from the path (``/2``), defaulting to 0.
    """
    parsed = urlparse(url)
    db_index = parsed.path.lstrip("/")
    return RedisSettings(
        host=parsed.hostname or "localhost",
        port=parsed.port or 6379,
        username=parsed.username or None,
        password=parsed.password,
        database=int(db_index) if db_index else 0,
        ssl=parsed.scheme == "rediss",
        conn_timeout=5,
    )


redis_settings = parse_redis_url(settings.redis_url)
