import logging
from typing import Callable, List

import pytest
import pytest_asyncio
import structlog
from fakeredis import FakeAsyncRedis
from httpx import ASGITransport, AsyncClient

from elevator_control.app.main import app, get_controller
from elevator_control.config import ElevatorConfig
from elevator_control.controller.controller import ElevatorController
from elevator_control.models.elevator import DoorPhase, ElevatorState
from elevator_control.scheduler.scheduler import DestinationScheduler


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def config() -> ElevatorConfig:
    return ElevatorConfig(
        min_floor=1,
        max_floor=20,
        floor_travel_time=4.0,
        door_operation_time=3.0,
        door_wait_time=5.0,
        tick_interval=1.0,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def state(config) -> ElevatorState:
    return ElevatorState(config)


@pytest.fixture
def scheduler() -> DestinationScheduler:
    return DestinationScheduler()


@pytest.fixture
def controller(config, clock) -> ElevatorController:
    return ElevatorController(config, clock=clock)


@pytest.fixture
def run_ticks(controller, clock) -> Callable[[float], List[int]]:
    """
    Advance the fake clock one tick interval at a time, ticking the controller.

    Returns the floors where the car arrived (doors started opening after
    a stop) during the run, in order.
    """

    def _run(seconds: float) -> List[int]:
        arrivals = []
        interval = controller.config.tick_interval
        for _ in range(int(round(seconds / interval))):
            before = controller.snapshot()
            clock.advance(interval)
            controller.tick()
            after = controller.snapshot()
            if (
                after.door_phase == DoorPhase.OPENING
                and before.door_phase != DoorPhase.OPENING
            ):
                arrivals.append(after.current_floor)
        return arrivals

    return _run


@pytest_asyncio.fixture
async def redis_client():
    """Create a FakeRedis client for testing."""
    client = FakeAsyncRedis(decode_responses=True)
    yield client
    await client.aclose()


@pytest_asyncio.fixture
async def async_client(controller):
    """
    Create an async client for the API, backed by the test controller.

    ASGITransport does not run the lifespan, so no control loop is started;
    tests drive the controller with the fake clock instead.

    Reference docs: https://fastapi.tiangolo.com/advanced/testing-dependencies/#use-the-appdependency_overrides-attribute
    """
    original_overrides = app.dependency_overrides.copy()
    app.dependency_overrides[get_controller] = lambda: controller
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as ac:
            yield ac
    finally:
        app.dependency_overrides = original_overrides


@pytest.fixture
def restore_logging():
    """Undo the global logging setup done by configure_logging()."""
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield
    root_logger.handlers = handlers
    root_logger.setLevel(level)
    structlog.reset_defaults()
