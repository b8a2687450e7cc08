"""
Status broadcaster for the elevator service.

Publishes elevator snapshots as JSON on the elevator's status channel so
displays and other services can follow the car without polling the API.
"""

import structlog
from redis.asyncio import Redis
from redis.exceptions import RedisError

from .channels import ELEVATOR_ID, ELEVATOR_STATUS
from .exceptions import PublishError
from .models.elevator import ElevatorSnapshot

logger = structlog.get_logger(__name__)


class StatusPublisher:
    """
    Publishes elevator snapshots to Redis pub/sub.

    Attributes:
        redis_client: Connected asyncio Redis client
        channel: Status channel of the elevator
    """

    def __init__(self, redis_client: Redis, elevator_id: int = ELEVATOR_ID):
        self.redis_client = redis_client
        self.channel = ELEVATOR_STATUS.format(elevator_id)

    async def publish(self, snapshot: ElevatorSnapshot) -> int:
        """
        Publish a snapshot to the status channel.

        Args:
            snapshot: The snapshot to broadcast

        Returns:
            Number of subscribers that received the message

        Raises:
            PublishError: If Redis rejects the publish
        """
        payload = snapshot.to_json()
        try:
            receivers = await self.redis_client.publish(self.channel, payload)
        except RedisError as e:
            logger.error(
                "status_publish_failed", channel=self.channel, error=str(e)
            )
            raise PublishError(f"Failed to publish status: {e}") from e

        logger.debug(
            "status_published", channel=self.channel, receivers=receivers, payload=payload
        )
        return receivers
