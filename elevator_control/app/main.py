# elevator_control/app/main.py
from contextlib import asynccontextmanager
from typing import List

import structlog
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from ..config import (
    REDIS_DB,
    REDIS_HOST,
    REDIS_PASSWORD,
    REDIS_PORT,
    STATUS_PUBLISH_ENABLED,
    close_redis_client,
    configure_logging,
    get_redis_client,
    load_config,
)
from ..controller.controller import ElevatorController
from ..exceptions import (
    CommandError,
    EmergencyBlockedError,
    InvalidDirectionRequestError,
    InvalidFloorError,
    InvalidTransitionError,
)
from ..models.elevator import Direction
from ..publisher import StatusPublisher

logger = structlog.get_logger(__name__)


# --- Startup and shutdown events ---
@asynccontextmanager
async def lifespan(app: FastAPI):  # pylint: disable=redefined-outer-name
    """Build the controller and run its control loop for the app's lifetime."""
    configure_logging()
    logger.info("application_starting")

    publisher = None
    if STATUS_PUBLISH_ENABLED:
        redis_client = await get_redis_client(
            host=REDIS_HOST, port=REDIS_PORT, db=REDIS_DB, password=REDIS_PASSWORD
        )
        publisher = StatusPublisher(redis_client)

    controller = ElevatorController(load_config(), publisher=publisher)
    app.state.controller = controller
    await controller.start()
    try:
        yield
    finally:
        logger.info("application_shutting_down")
        await controller.stop()
        if publisher is not None:
            await close_redis_client()
        logger.info("application_shutdown_complete")


app = FastAPI(title="Elevator Control", lifespan=lifespan)


def get_controller(request: Request) -> ElevatorController:
    """Dependency returning the controller owned by the running application."""
    return request.app.state.controller


# --- Request / response models ---
class InternalRequestModel(BaseModel):
    """Model for destination buttons inside the car."""

    destination_floor: int = Field(..., description="Target floor")

    model_config = ConfigDict(json_schema_extra={"example": {"destination_floor": 5}})


class ExternalRequestModel(BaseModel):
    """Model for hall call buttons on a floor."""

    floor: int = Field(..., description="Floor number where the button was pressed")
    direction: Direction = Field(..., description="Direction (up or down)")

    model_config = ConfigDict(
        json_schema_extra={"example": {"floor": 3, "direction": "up"}}
    )


class CommandResponse(BaseModel):
    command: str
    accepted: bool


class ElevatorStateResponse(BaseModel):
    current_floor: int
    movement_phase: str
    direction: str
    door_phase: str
    destinations: List[int]


# --- Error handling ---
ERROR_STATUS_CODES = {
    InvalidFloorError: 400,
    InvalidDirectionRequestError: 400,
    InvalidTransitionError: 409,
    EmergencyBlockedError: 503,
}


@app.exception_handler(CommandError)
async def command_error_handler(request: Request, exc: CommandError):
    status_code = ERROR_STATUS_CODES.get(type(exc), 400)
    logger.warning(
        "command_rejected",
        path=request.url.path,
        error=type(exc).__name__,
        status_code=status_code,
        message=str(exc),
    )
    return JSONResponse(
        status_code=status_code,
        content={"message": str(exc), "details": f"{request.method} {request.url.path}"},
    )


# --- Routes ---
@app.post("/api/doors/open", response_model=CommandResponse)
async def open_doors(controller: ElevatorController = Depends(get_controller)):
    """Press the open door button in the car."""
    return {"command": "open_doors", "accepted": controller.open_doors()}


@app.post("/api/doors/close", response_model=CommandResponse)
async def close_doors(controller: ElevatorController = Depends(get_controller)):
    """Press the close door button in the car."""
    return {"command": "close_doors", "accepted": controller.close_doors()}


@app.post("/api/requests/internal", response_model=CommandResponse, status_code=202)
async def create_internal_request(
    req: InternalRequestModel,
    controller: ElevatorController = Depends(get_controller),
):
    """Press a floor button in the car. Floors are served in SCAN order."""
    accepted = controller.press_floor_button(req.destination_floor)
    return {"command": "press_floor_button", "accepted": accepted}


@app.post("/api/requests/external", response_model=CommandResponse, status_code=202)
async def create_external_request(
    req: ExternalRequestModel,
    controller: ElevatorController = Depends(get_controller),
):
    """Press the UP or DOWN call button on a floor."""
    accepted = controller.call_elevator(req.floor, req.direction)
    return {"command": "call_elevator", "accepted": accepted}


@app.post("/api/emergency/stop", response_model=CommandResponse)
async def emergency_stop(controller: ElevatorController = Depends(get_controller)):
    """Immediately stop the car and drop every pending destination."""
    controller.emergency_stop()
    return {"command": "emergency_stop", "accepted": True}


@app.post("/api/emergency/clear", response_model=CommandResponse)
async def emergency_clear(controller: ElevatorController = Depends(get_controller)):
    """Restore normal operation after an emergency stop."""
    return {"command": "emergency_clear", "accepted": controller.emergency_clear()}


@app.get("/api/elevator", response_model=ElevatorStateResponse)
async def get_elevator(controller: ElevatorController = Depends(get_controller)):
    """Get the current state of the car and its pending destinations."""
    return controller.snapshot().to_dict()
