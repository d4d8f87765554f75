from __future__ import annotations

from typing import TYPE_CHECKING

from .interface import CarSnapshot

if TYPE_CHECKING:
    from dispatch.request import Request


class NearestCarStrategy:
    """Sends the closest car, preferring one already heading the caller's way."""

    def score(self, car: CarSnapshot, request: "Request") -> float:
        distance = abs(car.current_floor - request.source_floor)
        # stays below one floor so it only separates equally distant cars
        misalignment = abs(car.direction - request.direction) / 4
        return distance + misalignment
