"""
Elevator state model for the controller.
"""

import enum
import json
from dataclasses import dataclass, field
from typing import List, Optional

from ..config import ElevatorConfig


class Direction(str, enum.Enum):
    """Travel direction of the car, or requested direction of a hall call."""

    UP = "up"
    DOWN = "down"
    NONE = "none"

    @classmethod
    def between(cls, from_floor: int, to_floor: int) -> "Direction":
        """
        Direction the car must travel to get from one floor to another.

        Args:
            from_floor: Starting floor
            to_floor: Target floor

        Returns:
            UP, DOWN, or NONE when both floors are the same
        """
        if to_floor > from_floor:
            return cls.UP
        if to_floor < from_floor:
            return cls.DOWN
        return cls.NONE


class MovementPhase(str, enum.Enum):
    """Possible movement states of the car."""

    IDLE = "idle"
    MOVING = "moving"
    EMERGENCY = "emergency"


class DoorPhase(str, enum.Enum):
    """Possible states of the car doors."""

    CLOSED = "closed"
    OPENING = "opening"
    OPEN = "open"
    CLOSING = "closing"


class ElevatorState:
    """
    The single mutable record of the car.

    Attributes:
        config: Floor bounds and timing constants
        current_floor: Floor the car is at, or last passed while moving
        direction: Current or most recently chosen travel direction
        movement_phase: IDLE, MOVING or EMERGENCY
        door_phase: CLOSED, OPENING, OPEN or CLOSING
        door_operation_started_at: Clock reading when the current door
            operation (or open-door wait) began, None when unset
        movement_started_at: Clock reading when travel to the next floor
            began, None when unset

    The controller owns the instance and mutates it under its lock; this
    class only reads fields.
    """

    def __init__(self, config: ElevatorConfig):
        self.config = config
        self.current_floor = config.min_floor
        self.direction = Direction.NONE
        self.movement_phase = MovementPhase.IDLE
        self.door_phase = DoorPhase.CLOSED
        self.door_operation_started_at: Optional[float] = None
        self.movement_started_at: Optional[float] = None

    @property
    def min_floor(self) -> int:
        return self.config.min_floor

    @property
    def max_floor(self) -> int:
        return self.config.max_floor

    def is_valid_floor(self, floor: int) -> bool:
        """Check if floor is within the servable range."""
        return self.min_floor <= floor <= self.max_floor

    def is_moving(self) -> bool:
        return self.movement_phase == MovementPhase.MOVING

    def is_busy(self) -> bool:
        """True while a movement or door operation is in flight."""
        return self.is_moving() or self.door_phase in (
            DoorPhase.OPENING,
            DoorPhase.CLOSING,
        )

    def to_dict(self) -> dict:
        return {
            "current_floor": self.current_floor,
            "direction": self.direction.value,
            "movement_phase": self.movement_phase.value,
            "door_phase": self.door_phase.value,
        }


@dataclass(frozen=True)
class ElevatorSnapshot:
    """
    Consistent point-in-time view of the car for external display.

    Attributes:
        current_floor: The floor where the car is
        movement_phase: Movement state
        direction: Travel direction
        door_phase: Door state
        destinations: Pending floors, ascending
    """

    current_floor: int
    movement_phase: MovementPhase
    direction: Direction
    door_phase: DoorPhase
    destinations: List[int] = field(default_factory=list)

    def to_dict(self) -> dict:
        """
        Convert the snapshot to a dictionary.

        Returns:
            Dictionary representation of the snapshot
        """
        return {
            "current_floor": self.current_floor,
            "movement_phase": self.movement_phase.value,
            "direction": self.direction.value,
            "door_phase": self.door_phase.value,
            "destinations": list(self.destinations),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: dict) -> "ElevatorSnapshot":
        """
        Create a snapshot from a dictionary.

        Args:
            data: Dictionary produced by to_dict()

        Returns:
            New ElevatorSnapshot instance
        """
        return cls(
            current_floor=data["current_floor"],
            movement_phase=MovementPhase(data["movement_phase"]),
            direction=Direction(data["direction"]),
            door_phase=DoorPhase(data["door_phase"]),
            destinations=list(data.get("destinations", [])),
        )

    @classmethod
    def from_json(cls, json_str: str) -> "ElevatorSnapshot":
        return cls.from_dict(json.loads(json_str))
