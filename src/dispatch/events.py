from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from .request import Direction


@dataclass(frozen=True)
class ArrivalEvent:
    """Emitted each time a tick brings a car to a floor."""

    car_id: int
    floor: int
    direction: Direction
    tick: int
    # no further stops in ``direction``; the car turns or parks here
    turning: bool = False


EventCallback = Callable[[object], None]
