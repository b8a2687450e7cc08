"""
Exceptions raised by the elevator controller.

Every CommandError is a synchronous, recoverable rejection: the command
that raised it left the elevator state untouched.
"""


class ElevatorError(Exception):
    """Base exception for all elevator-related errors."""

    pass


class CommandError(ElevatorError):
    """Raised when a command is rejected."""

    pass


class InvalidFloorError(CommandError):
    """Raised when a floor lies outside the servable range."""

    def __init__(self, floor: int, min_floor: int, max_floor: int):
        self.floor = floor
        self.min_floor = min_floor
        self.max_floor = max_floor
        super().__init__(
            f"Invalid floor {floor}: must be between {min_floor} and {max_floor}"
        )


class InvalidTransitionError(CommandError):
    """Raised when a command is illegal in the current door or movement phase."""

    pass


class InvalidDirectionRequestError(CommandError):
    """Raised when a hall call asks for NONE, or for a direction that does not exist at that floor."""

    pass


class EmergencyBlockedError(CommandError):
    """Raised for any command other than an emergency clear while in emergency mode."""

    def __init__(self, message: str = "Elevator is in emergency mode; operations are blocked until cleared"):
        super().__init__(message)


class PublishError(ElevatorError):
    """Raised when a status snapshot cannot be published."""

    pass
