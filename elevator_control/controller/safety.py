"""
Door safety checks.

Doors must never open or close while the car is moving.
"""

from ..models.elevator import DoorPhase, ElevatorState, MovementPhase


def can_open_doors(state: ElevatorState) -> bool:
    """Opening is legal for an idle car whose doors are not already open."""
    if state.movement_phase != MovementPhase.IDLE:
        return False
    return state.door_phase != DoorPhase.OPEN


def can_close_doors(state: ElevatorState) -> bool:
    """Closing is legal for an idle car whose doors are not already closed."""
    if state.movement_phase != MovementPhase.IDLE:
        return False
    return state.door_phase != DoorPhase.CLOSED
