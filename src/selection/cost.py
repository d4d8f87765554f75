from __future__ import annotations

from typing import TYPE_CHECKING

from .interface import CarSnapshot

if TYPE_CHECKING:
    from dispatch.request import Request


class WeightedCostStrategy:
    """Scores cars by distance, queued work and direction alignment."""

    def __init__(
        self,
        distance_weight: float = 1.0,
        load_weight: float = 2.0,
        alignment_bonus: float = 5.0,
    ) -> None:
        self.distance_weight = distance_weight
        self.load_weight = load_weight
        self.alignment_bonus = alignment_bonus

    def score(self, car: CarSnapshot, request: "Request") -> float:
        cost = self.distance_weight * abs(car.current_floor - request.source_floor)
        cost += self.load_weight * car.queue_size
        if car.direction == request.direction:
            cost -= self.alignment_bonus
        return cost
