from __future__ import annotations

from typing import Optional


class DispatchError(Exception):
    pass


class InvalidFloorError(DispatchError, ValueError):
    """Raised when a request names a floor outside the building"""

    def __init__(self, floor: int, lowest: int, highest: int) -> None:
        super().__init__(f"Floor {floor} is outside the range {lowest}..{highest}")
        self.floor = floor
        self.lowest = lowest
        self.highest = highest


class InvalidRequestError(DispatchError, ValueError):
    """Raised when a request is malformed, e.g. an external call without a direction"""

    pass


class UnknownCarError(DispatchError, LookupError):
    def __init__(self, car_id: int) -> None:
        super().__init__(f"No car with id {car_id}")
        self.car_id = car_id


class CapacityExceededError(DispatchError):
    """Raised during selection when no car has spare capacity"""

    pass


class CarUnavailableError(DispatchError):
    """Raised when a car cannot move or is out of rotation"""

    def __init__(self, car_id: int, reason: Optional[str] = None) -> None:
        message = f"Car {car_id} is unavailable"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.car_id = car_id
        self.reason = reason
