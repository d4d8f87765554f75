from __future__ import annotations

from typing import TYPE_CHECKING

from .interface import CarSnapshot
from .utils import sweep_distance

if TYPE_CHECKING:
    from dispatch.request import Request


class LookEtaStrategy:
    """Scores cars by the route they would actually drive under LOOK.

    Unlike the weighted cost, a car sweeping away from the caller pays for
    the whole detour to the end of its sweep and back.
    """

    def __init__(self, stop_penalty: float = 1.0) -> None:
        self.stop_penalty = max(0.0, stop_penalty)

    def score(self, car: CarSnapshot, request: "Request") -> float:
        floors, stops = sweep_distance(car, request.source_floor, request.direction)
        return floors + self.stop_penalty * stops
