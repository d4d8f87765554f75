from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, Tuple

if TYPE_CHECKING:
    from dispatch.request import Request


@dataclass(frozen=True)
class CarSnapshot:
    """Lightweight view of a car for selection decisions.

    ``direction`` is +1 for up, -1 for down and 0 for idle.
    """

    car_id: int
    current_floor: int
    direction: int
    up_stops: Tuple[int, ...]
    down_stops: Tuple[int, ...]
    pending_count: int
    load: int
    capacity: int

    @property
    def queue_size(self) -> int:
        return len(self.up_stops) + len(self.down_stops) + self.pending_count

    @property
    def available_capacity(self) -> int:
        return max(0, self.capacity - self.load)


class SelectionStrategy(Protocol):
    """Strategy interface for choosing which car serves a hall call."""

    def score(self, car: CarSnapshot, request: "Request") -> float:
        """
        Return the cost of sending ``car`` to ``request``; lower is better.

        Implementations must be pure functions of their inputs so that the
        same car states always produce the same assignment.
        """
        ...
