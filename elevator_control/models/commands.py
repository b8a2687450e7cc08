"""
Command models for the elevator controller.

The command set is closed. Every request the controller accepts is one of
these variants and is handled by ElevatorController.execute():

1. OpenDoors / CloseDoors - door buttons inside the car
2. PressFloorButton - destination button inside the car
3. CallElevator - hall call button (UP or DOWN) on a floor
4. EmergencyStop / EmergencyClear - emergency switch
"""

from dataclasses import asdict, dataclass
from typing import Union

from .elevator import Direction


@dataclass(frozen=True)
class OpenDoors:
    """Request to open the doors."""

    name = "open_doors"


@dataclass(frozen=True)
class CloseDoors:
    """Request to close the doors."""

    name = "close_doors"


@dataclass(frozen=True)
class PressFloorButton:
    """
    Destination request from inside the car.

    Attributes:
        floor: The selected floor
    """

    floor: int
    name = "press_floor_button"


@dataclass(frozen=True)
class CallElevator:
    """
    Hall call from a floor.

    Attributes:
        floor: The floor where the button was pressed
        direction: Direction the passenger wants to travel
    """

    floor: int
    direction: Direction
    name = "call_elevator"


@dataclass(frozen=True)
class EmergencyStop:
    """Stop the car and drop every pending destination."""

    name = "emergency_stop"


@dataclass(frozen=True)
class EmergencyClear:
    """Return the car to normal operation after an emergency stop."""

    name = "emergency_clear"


ElevatorCommand = Union[
    OpenDoors,
    CloseDoors,
    PressFloorButton,
    CallElevator,
    EmergencyStop,
    EmergencyClear,
]

COMMAND_TYPES = (
    OpenDoors,
    CloseDoors,
    PressFloorButton,
    CallElevator,
    EmergencyStop,
    EmergencyClear,
)


def command_to_dict(command: ElevatorCommand) -> dict:
    """
    Convert a command to a dictionary for logging or transport.

    Returns:
        Dictionary with a "command" tag plus the command's fields
    """
    data = {"command": command.name}
    for key, value in asdict(command).items():
        data[key] = value.value if isinstance(value, Direction) else value
    return data
