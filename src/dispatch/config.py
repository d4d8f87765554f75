from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Dict, Optional


@dataclass
class DispatchConfig:
    """Static configuration for one elevator bank."""

    num_floors: int = 10
    lowest_floor: int = 0
    car_count: int = 2
    capacity: int = 8
    start_floor: Optional[int] = None
    tick_interval: float = 2.0
    strategy: str = "cost"
    strategy_options: Dict[str, object] = field(default_factory=dict)
    # ticks a hall call may wait in a car's pending list before it is promoted
    pending_patience: Optional[int] = None

    def __post_init__(self) -> None:
        if self.num_floors < 2:
            raise ValueError("A building needs at least two floors")
        if self.car_count < 1:
            raise ValueError("A building needs at least one car")
        if self.capacity < 1:
            raise ValueError("Car capacity must be positive")
        if self.tick_interval <= 0:
            raise ValueError("Tick interval must be positive")
        if self.pending_patience is not None and self.pending_patience < 0:
            raise ValueError("Pending patience cannot be negative")
        if self.start_floor is None:
            self.start_floor = self.lowest_floor
        elif not self.lowest_floor <= self.start_floor <= self.highest_floor:
            raise ValueError(f"Start floor {self.start_floor} is outside the building")

    @property
    def highest_floor(self) -> int:
        return self.lowest_floor + self.num_floors - 1

    @classmethod
    def from_dict(cls, data: Dict) -> "DispatchConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")
        return cls(**data)
