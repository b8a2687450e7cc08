import structlog
from typing import List, Optional

from ..exceptions import InvalidDirectionRequestError
from ..models.elevator import Direction, ElevatorState
from .floor_set import FloorSet

logger = structlog.get_logger(__name__)


class DestinationScheduler:
    """
    Pending destinations of the car, served with the SCAN elevator algorithm.

    Floors are kept in two directional sets: ``upward`` holds floors to be
    served while travelling up and ``downward`` those served while travelling
    down. A floor lives in at most one of them. The car keeps sweeping in its
    current direction, stopping at the nearest pending floor ahead, and only
    reverses once nothing is left ahead.

    Both sets lock internally, so requests may be added while the control
    loop is reading them.
    """

    def __init__(self):
        self.upward = FloorSet()
        self.downward = FloorSet(descending=True)

    def add_destination(self, floor: int, state: ElevatorState) -> bool:
        """
        Add a destination selected from inside the car.

        A car travelling up keeps collecting floors above it into ``upward``;
        floors behind it go to ``downward`` and wait for the reverse sweep
        (and symmetrically when travelling down). A stationary car files
        floors above it as upward and floors below it as downward.

        Args:
            floor: The target floor
            state: Current elevator state

        Returns:
            True if the floor was queued, False if it was the current floor,
            out of range, or already pending
        """
        current_floor = state.current_floor

        if not state.is_valid_floor(floor):
            logger.warning("destination_out_of_range", floor=floor)
            return False
        if floor == current_floor:
            logger.info("destination_is_current_floor", floor=floor)
            return False
        if self.contains(floor):
            logger.info("duplicate_destination_ignored", floor=floor)
            return False

        # Floors ahead of a sweep join it, floors behind wait for the reversal
        target = self.upward if floor > current_floor else self.downward
        target.add(floor)

        logger.info(
            "destination_added",
            floor=floor,
            current_floor=current_floor,
            direction=state.direction.value,
            destinations=self.all_destinations(),
        )
        return True

    def add_with_explicit_direction(
        self, floor: int, direction: Direction, state: ElevatorState
    ) -> bool:
        """
        Add a hall call, filed by the direction the passenger asked for.

        Args:
            floor: The floor where the call button was pressed
            direction: UP or DOWN
            state: Current elevator state

        Returns:
            True if the floor was queued, False if it was the current floor,
            out of range, or already pending

        Raises:
            InvalidDirectionRequestError: direction is NONE, DOWN at the lowest
                floor, or UP at the highest floor
        """
        self.validate_call_direction(floor, direction, state)

        if not state.is_valid_floor(floor):
            logger.warning("destination_out_of_range", floor=floor)
            return False
        if floor == state.current_floor:
            logger.info("destination_is_current_floor", floor=floor)
            return False
        if self.contains(floor):
            logger.info(
                "duplicate_destination_ignored", floor=floor, direction=direction.value
            )
            return False

        if direction == Direction.UP:
            self.upward.add(floor)
        else:
            self.downward.add(floor)

        logger.info(
            "hall_call_added",
            floor=floor,
            direction=direction.value,
            upward=list(self.upward),
            downward=list(self.downward),
        )
        return True

    @staticmethod
    def validate_call_direction(
        floor: int, direction: Direction, state: ElevatorState
    ) -> None:
        """Reject hall call directions with no physical meaning at floor."""
        if direction == Direction.NONE:
            raise InvalidDirectionRequestError("Cannot request direction NONE from elevator")
        if floor == state.min_floor and direction == Direction.DOWN:
            raise InvalidDirectionRequestError(f"Cannot request DOWN from ground floor {floor}")
        if floor == state.max_floor and direction == Direction.UP:
            raise InvalidDirectionRequestError(f"Cannot request UP from top floor {floor}")

    def get_next_destination(self, state: ElevatorState) -> Optional[int]:
        """
        Pick the next floor to travel to.

        Going up, the nearest pending upward floor above the car wins; when
        none is left the sweep turns at the highest downward floor, or at the
        lowest upward floor if nothing is pending downward. Going down is the
        mirror image. A car with no direction prefers the upward set.

        Returns:
            The next floor, or None when nothing is pending
        """
        if not self.has_destinations():
            return None

        current_floor = state.current_floor
        direction = state.direction

        if direction == Direction.UP:
            next_floor = self.upward.first_above(current_floor)
            if next_floor is None:
                next_floor = self.downward.highest()
            if next_floor is None:
                next_floor = self.upward.lowest()
        elif direction == Direction.DOWN:
            next_floor = self.downward.first_below(current_floor)
            if next_floor is None:
                next_floor = self.upward.lowest()
            if next_floor is None:
                next_floor = self.downward.highest()
        else:
            next_floor = self.upward.lowest()
            if next_floor is None:
                next_floor = self.downward.highest()

        logger.debug(
            "next_destination",
            next_floor=next_floor,
            current_floor=current_floor,
            direction=direction.value,
            upward=list(self.upward),
            downward=list(self.downward),
        )
        return next_floor

    def should_stop_at(self, floor: int, direction: Direction) -> bool:
        """
        Decide whether a car travelling in direction must stop at floor.

        The car stops for floors pending in the set of its own direction.
        A floor pending in the opposite set is only served now if nothing is
        pending beyond it, i.e. it is where the sweep turns around; otherwise
        it waits for the reverse sweep.
        """
        if direction == Direction.UP:
            if floor in self.upward:
                return True
            if floor in self.downward:
                return not self._pending_above(floor)
        elif direction == Direction.DOWN:
            if floor in self.downward:
                return True
            if floor in self.upward:
                return not self._pending_below(floor)
        else:
            return self.contains(floor)
        return False

    def remove_destination(self, floor: int) -> bool:
        """
        Remove a floor from whichever set holds it. Called on arrival.

        Returns:
            True if the floor was pending
        """
        removed = self.upward.discard(floor) or self.downward.discard(floor)
        if removed:
            logger.info(
                "destination_removed",
                floor=floor,
                upward=list(self.upward),
                downward=list(self.downward),
            )
        else:
            logger.warning("destination_not_pending", floor=floor)
        return removed

    def clear_all(self) -> None:
        self.upward.clear()
        self.downward.clear()
        logger.info("destinations_cleared")

    def contains(self, floor: int) -> bool:
        return floor in self.upward or floor in self.downward

    def has_destinations(self) -> bool:
        return bool(self.upward) or bool(self.downward)

    def destination_count(self) -> int:
        return len(self.upward) + len(self.downward)

    def all_destinations(self) -> List[int]:
        """Every pending floor, ascending."""
        return sorted([*self.upward, *self.downward])

    def _pending_above(self, floor: int) -> bool:
        return (
            self.upward.first_above(floor) is not None
            or self.downward.first_above(floor) is not None
        )

    def _pending_below(self, floor: int) -> bool:
        return (
            self.upward.first_below(floor) is not None
            or self.downward.first_below(floor) is not None
        )
