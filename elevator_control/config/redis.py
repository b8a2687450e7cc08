"""
Shared Redis client used to broadcast elevator status.
"""

from typing import Optional
import logging
from redis.asyncio import Redis
from redis.exceptions import ConnectionError as RedisConnectionError

logger = logging.getLogger(__name__)

_redis_client = None

async def get_redis_client(
    host: str,
    port: int,
    db: int = 0,
    password: Optional[str] = None,
    **kwargs
) -> Redis:
    """
    Get the Redis client instance (singleton).

    Args:
        host: Redis server host.
        port: Redis server port.
        db: Redis database number. Defaults to 0.
        password: Redis password, if authentication is needed.
        **kwargs: Additional arguments to pass to the Redis constructor.

    Returns:
        Redis: A connected Redis client.

    Raises:
        ValueError: If connection parameters are invalid.
        RedisConnectionError: If the server cannot be reached.
    """
    global _redis_client
    if _redis_client:
        return _redis_client

    if not isinstance(host, str) or not host:
        raise ValueError("Redis host must be a non-empty string")
    if not isinstance(port, int) or port <= 0 or port > 65535:
        raise ValueError("Redis port must be a valid port number (1-65535)")
    if not isinstance(db, int) or db < 0:
        raise ValueError("Redis database number must be a non-negative integer")

    client = Redis(
        host=host,
        port=port,
        db=db,
        password=password,
        decode_responses=True,
        **kwargs
    )
    try:
        logger.info("Initializing Redis client - host: %s, port: %s, db: %s", host, port, db)
        await client.ping()
    except RedisConnectionError as e:
        logger.error(
            "Failed to connect to Redis: %s, host=%s, port=%s",
            str(e), host, port,
            exc_info=True
        )
        await client.aclose()
        raise

    _redis_client = client
    logger.info("Redis client initialized successfully")
    return _redis_client

async def close_redis_client() -> None:
    """
    Close the shared Redis client connection.

    The next get_redis_client() call opens a fresh connection.
    """
    global _redis_client
    if _redis_client:
        try:
            await _redis_client.aclose()
            logger.info("Redis client connection closed")
        except RedisConnectionError as e:
            logger.error(
                "Error while closing Redis connection: %s",
                str(e),
                exc_info=True
            )
        finally:
            _redis_client = None
