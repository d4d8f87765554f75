from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional

from .errors import InvalidRequestError


class Direction(IntEnum):
    """Travel intent; the sign matches the direction of travel along the shaft."""

    DOWN = -1
    IDLE = 0
    UP = 1

    @property
    def opposite(self) -> "Direction":
        return Direction(-self.value)

    @classmethod
    def parse(cls, value: object) -> "Direction":
        if isinstance(value, Direction):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise InvalidRequestError(f"Unknown direction '{value}'") from None
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            raise InvalidRequestError(f"Unknown direction {value!r}") from None


class RequestKind(Enum):
    EXTERNAL = "external"
    INTERNAL = "internal"


@dataclass(frozen=True)
class Request:
    """A hall call (external) or a cabin selection (internal)."""

    source_floor: int
    direction: Direction
    kind: RequestKind
    destination_floor: Optional[int] = None
    car_id: Optional[int] = None
    requested_at: int = 0

    def __post_init__(self) -> None:
        if self.kind is RequestKind.EXTERNAL:
            if self.direction is Direction.IDLE:
                raise InvalidRequestError("External requests need an up or down direction")
            if self.destination_floor is not None:
                raise InvalidRequestError("External requests do not carry a destination")
        elif self.destination_floor is None:
            raise InvalidRequestError("Internal requests need a destination floor")

    @classmethod
    def external(cls, floor: int, direction: Direction, requested_at: int = 0) -> "Request":
        return cls(
            source_floor=floor,
            direction=Direction.parse(direction),
            kind=RequestKind.EXTERNAL,
            requested_at=requested_at,
        )

    @classmethod
    def internal(
        cls, car_id: int, source_floor: int, destination_floor: int, requested_at: int = 0
    ) -> "Request":
        direction = Direction.UP if destination_floor > source_floor else Direction.DOWN
        return cls(
            source_floor=source_floor,
            direction=direction,
            kind=RequestKind.INTERNAL,
            destination_floor=destination_floor,
            car_id=car_id,
            requested_at=requested_at,
        )

    @property
    def target_floor(self) -> int:
        """Floor the car has to visit to serve this request."""
        if self.destination_floor is not None:
            return self.destination_floor
        return self.source_floor
