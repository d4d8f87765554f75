"""Dispatch and scheduling core for a bank of elevator cars."""

from .request import Direction, Request, RequestKind
from .errors import (
    CapacityExceededError,
    CarUnavailableError,
    DispatchError,
    InvalidFloorError,
    InvalidRequestError,
    UnknownCarError,
)
from .queues import FloorQueue
from .car import Car
from .events import ArrivalEvent
from .config import DispatchConfig
from .dispatcher import Dispatcher
from .building import Building
from .driver import TickDriver

__all__ = [
    "ArrivalEvent",
    "Building",
    "CapacityExceededError",
    "Car",
    "CarUnavailableError",
    "DispatchConfig",
    "DispatchError",
    "Dispatcher",
    "Direction",
    "FloorQueue",
    "InvalidFloorError",
    "InvalidRequestError",
    "Request",
    "RequestKind",
    "TickDriver",
    "UnknownCarError",
]
