from .floor_set import FloorSet
from .scheduler import DestinationScheduler

__all__ = ["DestinationScheduler", "FloorSet"]
