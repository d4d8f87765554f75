from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, Dict, List, Optional

from .car import Car
from .config import DispatchConfig
from .dispatcher import Dispatcher
from .errors import InvalidFloorError, InvalidRequestError
from .events import ArrivalEvent
from .request import Direction, Request

logger = logging.getLogger(__name__)

ArrivalListener = Callable[[ArrivalEvent], None]


@dataclass
class Building:
    """Button-press facade in front of a dispatcher.

    Floor numbers are validated here so that out-of-range requests never
    reach the dispatcher. Arrival notifications flow back through
    :meth:`on_arrival`.
    """

    dispatcher: Dispatcher
    num_floors: int
    lowest_floor: int = 0
    history_size: int = 50
    positions: Dict[int, int] = field(init=False)
    recent_arrivals: Deque[ArrivalEvent] = field(init=False)
    _listeners: List[ArrivalListener] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.num_floors < 2:
            raise ValueError("A building needs at least two floors")
        for car in self.dispatcher.cars.values():
            self.validate_floor(car.current_floor)
        self.positions = {car_id: car.current_floor for car_id, car in self.dispatcher.cars.items()}
        self.recent_arrivals = deque(maxlen=self.history_size)
        self._listeners = []
        self.dispatcher.on_event("arrival", self._handle_arrival)

    @classmethod
    def from_config(cls, config: DispatchConfig) -> "Building":
        cars = [
            Car(car_id, capacity=config.capacity, current_floor=config.start_floor)
            for car_id in range(config.car_count)
        ]
        dispatcher = Dispatcher(
            cars,
            config.strategy,
            config.strategy_options,
            pending_patience=config.pending_patience,
        )
        return cls(dispatcher=dispatcher, num_floors=config.num_floors, lowest_floor=config.lowest_floor)

    @property
    def highest_floor(self) -> int:
        return self.lowest_floor + self.num_floors - 1

    def validate_floor(self, floor: int) -> None:
        if not self.lowest_floor <= floor <= self.highest_floor:
            raise InvalidFloorError(floor, self.lowest_floor, self.highest_floor)

    def on_arrival(self, callback: ArrivalListener) -> None:
        self._listeners.append(callback)

    async def request_elevator(self, floor: int, direction: Direction) -> Optional[int]:
        """Hall button press. Returns the assigned car, or None if the call is queued."""
        self.validate_floor(floor)
        direction = Direction.parse(direction)
        if direction is Direction.UP and floor == self.highest_floor:
            raise InvalidRequestError("There is no up call from the top floor")
        if direction is Direction.DOWN and floor == self.lowest_floor:
            raise InvalidRequestError("There is no down call from the lowest floor")
        request = Request.external(floor, direction, self.dispatcher.tick_count)
        return await self.dispatcher.assign(request)

    async def select_floor(self, car_id: int, destination_floor: int) -> None:
        """Cabin button press inside ``car_id``."""
        self.validate_floor(destination_floor)
        car = self.dispatcher.get_car(car_id)
        request = Request.internal(car_id, car.current_floor, destination_floor, self.dispatcher.tick_count)
        await self.dispatcher.assign(request)

    async def board(self, car_id: int, riders: int = 1) -> int:
        return await self.dispatcher.board(car_id, riders)

    async def alight(self, car_id: int, riders: int = 1) -> int:
        return await self.dispatcher.alight(car_id, riders)

    async def tick(self) -> List[ArrivalEvent]:
        return await self.dispatcher.tick()

    def snapshot(self) -> dict:
        return {
            "tick": self.dispatcher.tick_count,
            "floors": {"lowest": self.lowest_floor, "highest": self.highest_floor},
            "strategy": self.dispatcher.strategy_name,
            "deferred": len(self.dispatcher.deferred),
            "cars": [
                {
                    "id": car.car_id,
                    "floor": car.current_floor,
                    "direction": car.direction.name.lower(),
                    "status": car.status,
                    "load": car.load,
                    "capacity": car.capacity,
                    "up_stops": car.up_queue.floors(),
                    "down_stops": car.down_queue.floors(),
                    "pending": [
                        {"floor": request.source_floor, "direction": request.direction.name.lower()}
                        for request in car.pending
                    ],
                }
                for car in self.dispatcher.cars.values()
            ],
        }

    def _handle_arrival(self, event: object) -> None:
        if not isinstance(event, ArrivalEvent):
            return
        self.positions[event.car_id] = event.floor
        self.recent_arrivals.append(event)
        for listener in self._listeners:
            listener(event)
