import os
from dataclasses import dataclass

import logging
from dotenv import load_dotenv

# Initialize logger at module level, before importing the .logging
# submodule rebinds the name `logging` in this package
logger = logging.getLogger(__name__)

from ..channels import ELEVATOR_ID, ELEVATOR_STATUS  # noqa: E402
from .logging import configure_logging  # noqa: E402
from .redis import close_redis_client, get_redis_client  # noqa: E402

load_dotenv()


# Building configuration (no basement floors)
MIN_FLOOR = 1
MAX_FLOOR = int(os.getenv("ELEVATOR_MAX_FLOOR", "20"))

# Timing configuration, in seconds
FLOOR_TRAVEL_TIME = float(os.getenv("ELEVATOR_FLOOR_TRAVEL_TIME", "4.0"))
DOOR_OPERATION_TIME = float(os.getenv("ELEVATOR_DOOR_OPERATION_TIME", "3.0"))
DOOR_WAIT_TIME = float(os.getenv("ELEVATOR_DOOR_WAIT_TIME", "5.0"))
TICK_INTERVAL = float(os.getenv("ELEVATOR_TICK_INTERVAL", "1.0"))

STATUS_PUBLISH_ENABLED = os.getenv("STATUS_PUBLISH_ENABLED", "false").lower() in (
    "1",
    "true",
    "yes",
)

REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
REDIS_PORT = int(os.getenv("REDIS_PORT", "6379"))
REDIS_PASSWORD = os.getenv("REDIS_PASSWORD")
REDIS_DB = int(os.getenv("REDIS_DB", "0"))


@dataclass(frozen=True)
class ElevatorConfig:
    """
    Deployment constants for a single elevator car.

    Attributes:
        min_floor: Lowest servable floor
        max_floor: Highest servable floor
        floor_travel_time: Seconds to travel between two adjacent floors
        door_operation_time: Seconds for the doors to fully open or close
        door_wait_time: Seconds the doors stay open before closing automatically
        tick_interval: Seconds between two control loop ticks
    """

    min_floor: int = MIN_FLOOR
    max_floor: int = MAX_FLOOR
    floor_travel_time: float = FLOOR_TRAVEL_TIME
    door_operation_time: float = DOOR_OPERATION_TIME
    door_wait_time: float = DOOR_WAIT_TIME
    tick_interval: float = TICK_INTERVAL

    def __post_init__(self) -> None:
        if self.max_floor <= self.min_floor:
            raise ValueError(
                f"max_floor ({self.max_floor}) must be greater than min_floor ({self.min_floor})"
            )
        for name in (
            "floor_travel_time",
            "door_operation_time",
            "door_wait_time",
            "tick_interval",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be a positive number of seconds")


def load_config() -> ElevatorConfig:
    """
    Build the elevator configuration from the environment.

    Variables are read at call time and fall back to the module defaults.

    Raises:
        ValueError: If a variable is not a number or the values are inconsistent
    """
    config = ElevatorConfig(
        max_floor=int(os.getenv("ELEVATOR_MAX_FLOOR", str(MAX_FLOOR))),
        floor_travel_time=float(
            os.getenv("ELEVATOR_FLOOR_TRAVEL_TIME", str(FLOOR_TRAVEL_TIME))
        ),
        door_operation_time=float(
            os.getenv("ELEVATOR_DOOR_OPERATION_TIME", str(DOOR_OPERATION_TIME))
        ),
        door_wait_time=float(os.getenv("ELEVATOR_DOOR_WAIT_TIME", str(DOOR_WAIT_TIME))),
        tick_interval=float(os.getenv("ELEVATOR_TICK_INTERVAL", str(TICK_INTERVAL))),
    )
    logger.info(
        "Loaded elevator config: floors=%s-%s, travel=%ss, door=%ss, wait=%ss, tick=%ss",
        config.min_floor,
        config.max_floor,
        config.floor_travel_time,
        config.door_operation_time,
        config.door_wait_time,
        config.tick_interval,
    )
    return config


__all__ = [
    "ELEVATOR_ID",
    "ELEVATOR_STATUS",
    "ElevatorConfig",
    "load_config",
    "configure_logging",
    "close_redis_client",
    "get_redis_client",
    "MIN_FLOOR",
    "MAX_FLOOR",
    "FLOOR_TRAVEL_TIME",
    "DOOR_OPERATION_TIME",
    "DOOR_WAIT_TIME",
    "TICK_INTERVAL",
    "STATUS_PUBLISH_ENABLED",
    "REDIS_HOST",
    "REDIS_PORT",
    "REDIS_PASSWORD",
    "REDIS_DB",
]
