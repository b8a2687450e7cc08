"""
Elevator Controller

Owns the state of the single car and its pending destinations. External
callers issue commands (door buttons, floor buttons, hall calls, emergency
switch) and read snapshots; a periodic control loop advances door and
movement timers, dispatches the car with the SCAN scheduler and handles
arrivals.

Commands and ticks may arrive from different threads. Every read-validate-
mutate sequence runs under one lock, so a command never interleaves with a
tick and a snapshot never mixes fields from two points in time.
"""

import asyncio
import threading
import time
from typing import Callable, Optional, Union

import structlog

from ..channels import ELEVATOR_ID
from ..config import ElevatorConfig
from ..exceptions import (
    EmergencyBlockedError,
    InvalidDirectionRequestError,
    InvalidFloorError,
    InvalidTransitionError,
    PublishError,
)
from ..models.commands import (
    COMMAND_TYPES,
    CallElevator,
    CloseDoors,
    ElevatorCommand,
    EmergencyClear,
    EmergencyStop,
    OpenDoors,
    PressFloorButton,
    command_to_dict,
)
from ..models.elevator import (
    Direction,
    DoorPhase,
    ElevatorSnapshot,
    ElevatorState,
    MovementPhase,
)
from ..publisher import StatusPublisher
from ..scheduler.scheduler import DestinationScheduler
from .safety import can_close_doors, can_open_doors


class ElevatorController:
    """
    Controls a single elevator car.

    This controller:
    1. Validates and executes commands against the car state
    2. Advances door and movement timers once per tick
    3. Picks the next stop with the SCAN scheduler when idle
    4. Optionally broadcasts snapshots through a StatusPublisher
    """

    def __init__(
        self,
        config: ElevatorConfig,
        clock: Callable[[], float] = time.monotonic,
        publisher: Optional[StatusPublisher] = None,
        elevator_id: int = ELEVATOR_ID,
    ):
        """
        Initialize the controller with the car idle at the lowest floor.

        Args:
            config: Floor bounds and timing constants
            clock: Monotonic time source in seconds
            publisher: Where to broadcast snapshots, None to disable
            elevator_id: Identifier used in logs and status channel
        """
        self.config = config
        self.state = ElevatorState(config)
        self.scheduler = DestinationScheduler()
        self.publisher = publisher
        self.elevator_id = elevator_id
        self._clock = clock
        self._lock = threading.RLock()
        self._running = False
        self._loop_task: Optional[asyncio.Task] = None
        self._last_published: Optional[ElevatorSnapshot] = None
        self.logger = structlog.get_logger(__name__).bind(elevator_id=elevator_id)

    # ==================== Command API ====================

    def open_doors(self) -> bool:
        return self.execute(OpenDoors())

    def close_doors(self) -> bool:
        return self.execute(CloseDoors())

    def press_floor_button(self, floor: int) -> bool:
        """
        Press a floor button inside the car.

        Returns:
            True if the floor was queued or the doors were cycled, False if
            the request was already pending or otherwise ignored
        """
        return self.execute(PressFloorButton(floor=floor))

    def call_elevator(self, floor: int, direction: Union[Direction, str]) -> bool:
        """
        Press a hall call button on a floor.

        Returns:
            True if the call was queued or the doors were cycled, False if
            the floor was already pending
        """
        return self.execute(CallElevator(floor=floor, direction=direction))

    def emergency_stop(self) -> None:
        self.execute(EmergencyStop())

    def emergency_clear(self) -> bool:
        return self.execute(EmergencyClear())

    def snapshot(self) -> ElevatorSnapshot:
        """Read the car state and pending destinations atomically."""
        with self._lock:
            return ElevatorSnapshot(
                current_floor=self.state.current_floor,
                movement_phase=self.state.movement_phase,
                direction=self.state.direction,
                door_phase=self.state.door_phase,
                destinations=self.scheduler.all_destinations(),
            )

    def execute(self, command: ElevatorCommand) -> bool:
        """
        Execute a command atomically with respect to the control loop.

        Raises:
            CommandError: If the command is rejected; state is left unchanged
        """
        if not isinstance(command, COMMAND_TYPES):
            raise TypeError(f"Unsupported command: {command!r}")

        with self._lock:
            self.logger.info(
                "received_command",
                current_floor=self.state.current_floor,
                **command_to_dict(command),
            )

            if isinstance(command, EmergencyStop):
                self._emergency_stop()
                return True
            if isinstance(command, EmergencyClear):
                return self._emergency_clear()

            if self.state.movement_phase == MovementPhase.EMERGENCY:
                self.logger.error("emergency_blocked_command", command=command.name)
                raise EmergencyBlockedError()

            if isinstance(command, OpenDoors):
                return self._open_doors()
            if isinstance(command, CloseDoors):
                return self._close_doors()
            if isinstance(command, PressFloorButton):
                return self._press_floor_button(command.floor)
            return self._call_elevator(command.floor, command.direction)

    # ==================== Command handlers ====================

    def _open_doors(self, now: Optional[float] = None) -> bool:
        if self.state.door_phase == DoorPhase.OPEN:
            self.logger.debug("doors_already_open", floor=self.state.current_floor)
            return True

        if not can_open_doors(self.state):
            self.logger.warning(
                "open_doors_rejected",
                floor=self.state.current_floor,
                movement_phase=self.state.movement_phase.value,
                door_phase=self.state.door_phase.value,
            )
            raise InvalidTransitionError(
                "Cannot open doors in current elevator state"
            )

        self.state.door_phase = DoorPhase.OPENING
        self.state.door_operation_started_at = self._now(now)
        self.logger.info("doors_opening", floor=self.state.current_floor)
        return True

    def _close_doors(self, now: Optional[float] = None) -> bool:
        if self.state.door_phase == DoorPhase.CLOSED:
            self.logger.debug("doors_already_closed", floor=self.state.current_floor)
            return True

        if not can_close_doors(self.state):
            self.logger.warning(
                "close_doors_rejected",
                floor=self.state.current_floor,
                movement_phase=self.state.movement_phase.value,
                door_phase=self.state.door_phase.value,
            )
            raise InvalidTransitionError(
                "Cannot close doors in current elevator state"
            )

        self.state.door_phase = DoorPhase.CLOSING
        self.state.door_operation_started_at = self._now(now)
        self.logger.info("doors_closing", floor=self.state.current_floor)
        return True

    def _press_floor_button(self, floor: int) -> bool:
        self._validate_floor(floor)

        if self._is_current_floor_request(floor):
            self._cycle_doors()
            return True

        return self.scheduler.add_destination(floor, self.state)

    def _call_elevator(self, floor: int, direction: Union[Direction, str]) -> bool:
        try:
            direction = Direction(direction)
        except ValueError:
            raise InvalidDirectionRequestError(f"Unknown direction {direction!r}") from None
        self._validate_floor(floor)
        self.scheduler.validate_call_direction(floor, direction, self.state)

        if self._is_current_floor_request(floor):
            self._cycle_doors()
            return True

        return self.scheduler.add_with_explicit_direction(floor, direction, self.state)

    def _emergency_stop(self) -> None:
        self.logger.warning("emergency_stop", floor=self.state.current_floor)

        self.state.movement_phase = MovementPhase.EMERGENCY
        self.state.direction = Direction.NONE
        self.state.movement_started_at = None
        self.state.door_operation_started_at = None

        cleared = self.scheduler.destination_count()
        self.scheduler.clear_all()
        self.logger.error(
            "emergency_destinations_cleared",
            cleared=cleared,
            floor=self.state.current_floor,
        )

    def _emergency_clear(self) -> bool:
        if self.state.movement_phase != MovementPhase.EMERGENCY:
            raise InvalidTransitionError("Elevator is not in emergency mode")

        self.state.movement_phase = MovementPhase.IDLE
        self.state.direction = Direction.NONE
        self.logger.info("emergency_cleared", floor=self.state.current_floor)
        return True

    def _validate_floor(self, floor: int) -> None:
        if not self.state.is_valid_floor(floor):
            self.logger.warning(
                "invalid_floor",
                floor=floor,
                min_floor=self.state.min_floor,
                max_floor=self.state.max_floor,
            )
            raise InvalidFloorError(floor, self.state.min_floor, self.state.max_floor)

    def _is_current_floor_request(self, floor: int) -> bool:
        return (
            floor == self.state.current_floor
            and self.state.movement_phase == MovementPhase.IDLE
        )

    def _cycle_doors(self) -> None:
        """Serve a request for the floor the idle car is already at."""
        door_phase = self.state.door_phase
        self.logger.info(
            "current_floor_request",
            floor=self.state.current_floor,
            door_phase=door_phase.value,
        )
        if door_phase == DoorPhase.OPEN:
            self._close_doors()
        elif door_phase in (DoorPhase.CLOSED, DoorPhase.CLOSING):
            self._open_doors()
        # OPENING: already on the way

    # ==================== Control loop ====================

    def tick(self) -> None:
        """
        Advance the car by one control loop step.

        Never raises: a failing step is logged and retried on the next tick.
        """
        with self._lock:
            if self.state.movement_phase == MovementPhase.EMERGENCY:
                return
            try:
                now = self._clock()
                self._advance_doors(now)
                self._advance_movement(now)
            except Exception:
                self.logger.error(
                    "tick_failed", state=self.state.to_dict(), exc_info=True
                )

    def _advance_doors(self, now: float) -> None:
        # Doors are closed while moving
        if self.state.movement_phase == MovementPhase.MOVING:
            return

        door_phase = self.state.door_phase
        if door_phase == DoorPhase.CLOSED:
            return

        started_at = self.state.door_operation_started_at
        if started_at is None:
            self.logger.warning("door_timer_missing", door_phase=door_phase.value)
            self.state.door_operation_started_at = now
            return

        elapsed = now - started_at

        if door_phase == DoorPhase.OPENING:
            if elapsed >= self.config.door_operation_time:
                self.state.door_phase = DoorPhase.OPEN
                # Timer now measures the passenger wait
                self.state.door_operation_started_at = now
                self.logger.info("doors_opened", floor=self.state.current_floor)

        elif door_phase == DoorPhase.OPEN:
            if elapsed >= self.config.door_wait_time:
                self.logger.info(
                    "doors_auto_closing",
                    floor=self.state.current_floor,
                    open_for=elapsed,
                )
                self._close_doors(now)

        elif door_phase == DoorPhase.CLOSING:
            if elapsed >= self.config.door_operation_time:
                self.state.door_phase = DoorPhase.CLOSED
                self.state.door_operation_started_at = None
                self.logger.info("doors_closed", floor=self.state.current_floor)

                if (
                    not self.scheduler.has_destinations()
                    and self.state.movement_phase == MovementPhase.IDLE
                ):
                    self.logger.info(
                        "elevator_waiting", state=self.state.to_dict()
                    )

    def _advance_movement(self, now: float) -> None:
        # The car only moves with the doors closed
        if self.state.door_phase != DoorPhase.CLOSED:
            return

        if self.state.movement_phase == MovementPhase.IDLE:
            self._dispatch(now)
        elif self.state.movement_phase == MovementPhase.MOVING:
            self._travel(now)

    def _dispatch(self, now: float) -> None:
        if not self.scheduler.has_destinations():
            return

        next_floor = self.scheduler.get_next_destination(self.state)
        if next_floor is None:
            return

        current_floor = self.state.current_floor
        if next_floor == current_floor:
            self.logger.info("already_at_destination", floor=current_floor)
            self._arrive(now)
            return

        direction = Direction.between(current_floor, next_floor)
        self.state.movement_started_at = now
        self.state.direction = direction
        self.state.movement_phase = MovementPhase.MOVING
        self.logger.info(
            "started_moving",
            direction=direction.value,
            from_floor=current_floor,
            next_floor=next_floor,
        )

    def _travel(self, now: float) -> None:
        started_at = self.state.movement_started_at
        if started_at is None:
            self.logger.error("movement_timer_missing", floor=self.state.current_floor)
            self.state.movement_started_at = now
            return

        if now - started_at < self.config.floor_travel_time:
            return

        direction = self.state.direction
        if direction == Direction.NONE:
            self.logger.error("moving_without_direction", floor=self.state.current_floor)
            self._halt()
            return

        step = 1 if direction == Direction.UP else -1
        new_floor = self.state.current_floor + step
        if not self.state.is_valid_floor(new_floor):
            self.logger.error("cannot_move_to_invalid_floor", floor=new_floor)
            self._halt()
            return

        self.state.current_floor = new_floor
        self.logger.info("moved_to_floor", floor=new_floor, direction=direction.value)

        if self.scheduler.should_stop_at(new_floor, direction):
            self._arrive(now)
        else:
            self.state.movement_started_at = now

    def _halt(self) -> None:
        """Stop in place so the next tick dispatches from a clean state."""
        self.state.movement_phase = MovementPhase.IDLE
        self.state.movement_started_at = None

    def _arrive(self, now: float) -> None:
        floor = self.state.current_floor
        self.state.movement_phase = MovementPhase.IDLE

        self.scheduler.remove_destination(floor)
        self._open_doors(now)

        next_floor = self.scheduler.get_next_destination(self.state)
        if next_floor is not None:
            self.state.direction = Direction.between(floor, next_floor)
        else:
            self.state.direction = Direction.NONE

        self.state.movement_started_at = None
        self.logger.info(
            "arrived_at_floor",
            floor=floor,
            next_floor=next_floor,
            direction=self.state.direction.value,
            destinations=self.scheduler.all_destinations(),
        )

    def _now(self, now: Optional[float]) -> float:
        return self._clock() if now is None else now

    # ==================== Service lifecycle ====================

    async def start(self) -> None:
        """Start the periodic control loop as a background task."""
        if self._loop_task and not self._loop_task.done():
            return
        self._running = True
        self._loop_task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the control loop and wait for it to finish."""
        self._running = False

        if self._loop_task:
            self._loop_task.cancel()
            try:
                await self._loop_task
            except asyncio.CancelledError:
                pass
            self._loop_task = None

        self.logger.info("controller_stopped")

    async def _run(self) -> None:
        snapshot = self.snapshot()
        self.logger.info(
            "elevator_ready",
            floor=snapshot.current_floor,
            door_phase=snapshot.door_phase.value,
            tick_interval=self.config.tick_interval,
        )
        try:
            while self._running:
                self.tick()
                try:
                    await self.publish_status()
                except Exception:
                    self.logger.error("status_broadcast_crashed", exc_info=True)
                await asyncio.sleep(self.config.tick_interval)
        except asyncio.CancelledError:
            self.logger.info("control_loop_cancelled")
            raise

    async def publish_status(self) -> bool:
        """
        Broadcast the current snapshot if it changed since the last broadcast.

        Returns:
            True if a snapshot was published
        """
        if self.publisher is None:
            return False

        snapshot = self.snapshot()
        if snapshot == self._last_published:
            return False

        try:
            await self.publisher.publish(snapshot)
        except PublishError as e:
            self.logger.error("status_broadcast_failed", error=str(e))
            return False

        self._last_published = snapshot
        return True
