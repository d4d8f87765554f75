from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Awaitable, Callable, Deque, Dict, Iterable, List, Optional, Set, Tuple

from selection import CarSnapshot, SelectionStrategy, get_strategy

from .car import Car
from .errors import CapacityExceededError, CarUnavailableError, InvalidRequestError, UnknownCarError
from .events import ArrivalEvent, EventCallback
from .request import Request, RequestKind

logger = logging.getLogger(__name__)

MotionHook = Callable[[Car, int], Awaitable[None]]


class Dispatcher:
    """Routes requests to cars and advances every car once per tick.

    Each car's state is only touched while holding that car's lock, so
    admissions and tick steps for different cars never wait on each other.
    Events are published to callbacks registered with :meth:`on_event`:
    ``arrival``, ``deferred``, ``car_unavailable`` and ``restore``.
    """

    def __init__(
        self,
        cars: Iterable[Car],
        strategy_name: str = "cost",
        strategy_options: Optional[Dict[str, object]] = None,
        *,
        strategy: Optional[SelectionStrategy] = None,
        pending_patience: Optional[int] = None,
        motion_hook: Optional[MotionHook] = None,
    ) -> None:
        self.cars: Dict[int, Car] = {}
        for car in cars:
            if car.car_id in self.cars:
                raise ValueError(f"Duplicate car id {car.car_id}")
            self.cars[car.car_id] = car
        self.strategy_name = strategy_name
        self.strategy_options = dict(strategy_options or {})
        self.strategy: SelectionStrategy = strategy or get_strategy(strategy_name, **self.strategy_options)
        self.pending_patience = pending_patience
        self.motion_hook = motion_hook
        self.deferred: Deque[Request] = deque()
        self.tick_count: int = 0
        self.event_hooks: Dict[str, List[EventCallback]] = {}

    def on_event(self, event: str, callback: EventCallback) -> None:
        self.event_hooks.setdefault(event, []).append(callback)

    def get_car(self, car_id: int) -> Car:
        car = self.cars.get(car_id)
        if car is None:
            raise UnknownCarError(car_id)
        return car

    def set_strategy(self, name: str, **options) -> None:
        self.strategy = get_strategy(name, **options)
        self.strategy_name = name
        self.strategy_options = options
        logger.info("Selection strategy set to %s", name)

    # region Assignment
    async def assign(self, request: Request, *, exclude: Iterable[int] = ()) -> Optional[int]:
        """Admit a request to the cheapest eligible car.

        Returns the chosen car id, or None when every car is full or out of
        service; in that case the request is deferred and retried on the
        next tick.
        """
        if request.kind is RequestKind.INTERNAL:
            if request.car_id is None:
                raise InvalidRequestError("Internal requests must name their car")
            await self.select_floor(request.car_id, request.target_floor)
            return request.car_id
        return await self._assign(request, exclude=set(exclude), retry=False)

    async def _assign(self, request: Request, exclude: Set[int], retry: bool) -> Optional[int]:
        while True:
            snapshots = await self.snapshot_cars(exclude)
            try:
                car_id = self.select_car(snapshots, request)
            except CapacityExceededError:
                self._defer(request, retry)
                return None

            car = self.cars[car_id]
            async with car.lock:
                # the car may have filled up or failed since it was scored
                if car.in_service() and car.has_spare_capacity:
                    car.admit_external(request)
                    break
            exclude.add(car_id)

        logger.info(
            "Assigned %s call at floor %s to car %s",
            request.direction.name,
            request.source_floor,
            car_id,
        )
        return car_id

    def select_car(self, snapshots: Iterable[CarSnapshot], request: Request) -> int:
        candidates = [snapshot for snapshot in snapshots if snapshot.available_capacity > 0]
        if not candidates:
            raise CapacityExceededError(f"No car can take the call at floor {request.source_floor}")
        best = min(candidates, key=lambda snapshot: (self.strategy.score(snapshot, request), snapshot.car_id))
        return best.car_id

    async def snapshot_cars(self, exclude: Iterable[int] = ()) -> List[CarSnapshot]:
        excluded = set(exclude)
        snapshots: List[CarSnapshot] = []
        for car_id in sorted(self.cars):
            if car_id in excluded:
                continue
            car = self.cars[car_id]
            async with car.lock:
                if car.in_service():
                    snapshots.append(self._snapshot(car))
        return snapshots

    async def select_floor(self, car_id: int, destination_floor: int) -> bool:
        """Queue a cabin selection on a specific car; False if it was a no-op."""
        car = self.get_car(car_id)
        async with car.lock:
            if not car.in_service():
                raise CarUnavailableError(car_id, car.status)
            admitted = car.admit_internal(destination_floor)
        if not admitted:
            logger.debug("Car %s is already at floor %s", car_id, destination_floor)
        return admitted

    def _defer(self, request: Request, retry: bool) -> None:
        self.deferred.append(request)
        if retry:
            logger.debug("Call at floor %s still waiting for a car", request.source_floor)
            return
        logger.warning("No car available for call at floor %s; deferring", request.source_floor)
        self._emit("deferred", request)

    # endregion

    # region Tick loop
    async def tick(self) -> List[ArrivalEvent]:
        """Run one scheduling pass and return the arrivals it produced."""
        self.tick_count += 1
        await self._retry_deferred()
        if self.pending_patience is not None:
            await self._promote_stale_calls()

        active = [car for car in self.cars.values() if car.needs_tick()]
        results = await asyncio.gather(*(self._step(car) for car in active))
        return [event for event in results if event is not None]

    async def _step(self, car: Car) -> Optional[ArrivalEvent]:
        async with car.lock:
            if not car.in_service():
                return None
            floor = car.next_floor()
            if floor is None:
                return None
            direction = car.direction

        # the lock is released while the car travels
        if self.motion_hook is not None:
            try:
                await self.motion_hook(car, floor)
            except CarUnavailableError as exc:
                async with car.lock:
                    lost = car.request_for_stop(floor, direction, self.tick_count)
                await self._take_out_of_service(car, "faulted", exc.reason, lost=[lost])
                return None

        stranded: Optional[Request] = None
        async with car.lock:
            if car.in_service():
                car.move_to(floor)
                turning = not car.has_stops_ahead()
            else:
                stranded = car.request_for_stop(floor, direction, self.tick_count)

        if stranded is not None:
            # taken out of service mid-move; its other stops were already handed back
            await self.assign(stranded)
            return None

        event = ArrivalEvent(
            car_id=car.car_id,
            floor=floor,
            direction=direction,
            tick=self.tick_count,
            turning=turning,
        )
        logger.info("Car %s arrived at floor %s heading %s", car.car_id, floor, direction.name)
        self._emit("arrival", event)
        return event

    async def _retry_deferred(self) -> None:
        if not self.deferred:
            return
        waiting = list(self.deferred)
        self.deferred.clear()
        for request in waiting:
            await self._assign(request, exclude=set(), retry=True)

    async def _promote_stale_calls(self) -> None:
        cutoff = self.tick_count - self.pending_patience
        for car in self.cars.values():
            async with car.lock:
                if not car.in_service() or not car.pending:
                    continue
                promoted = car.promote_stale(cutoff)
            if promoted:
                logger.info("Car %s promoted %s long-waiting calls", car.car_id, promoted)

    # endregion

    # region Service management
    async def mark_unavailable(
        self, car_id: int, reason: Optional[str] = None
    ) -> List[Tuple[Request, Optional[int]]]:
        """Take a failed car out of rotation and re-route everything it held."""
        return await self._take_out_of_service(self.get_car(car_id), "faulted", reason)

    async def start_maintenance(
        self, car_id: int, reason: Optional[str] = None
    ) -> List[Tuple[Request, Optional[int]]]:
        return await self._take_out_of_service(self.get_car(car_id), "maintenance", reason)

    async def restore(self, car_id: int) -> None:
        car = self.get_car(car_id)
        async with car.lock:
            car.restore_service()
        logger.info("Car %s back in service", car_id)
        self._emit("restore", {"car_id": car_id, "tick": self.tick_count})

    async def board(self, car_id: int, riders: int) -> int:
        """Record riders entering a car; returns how many actually fit."""
        car = self.get_car(car_id)
        async with car.lock:
            accepted = car.board(riders)
        if accepted < riders:
            logger.warning("Car %s full: %s of %s riders boarded", car_id, accepted, riders)
        return accepted

    async def alight(self, car_id: int, riders: int) -> int:
        car = self.get_car(car_id)
        async with car.lock:
            return car.alight(riders)

    async def _take_out_of_service(
        self,
        car: Car,
        status: str,
        reason: Optional[str],
        lost: Iterable[Request] = (),
    ) -> List[Tuple[Request, Optional[int]]]:
        async with car.lock:
            orphaned = list(lost)
            if car.in_service():
                orphaned.extend(car.take_out_of_service(status, self.tick_count))
            elif not orphaned:
                logger.debug("Car %s is already out of service (%s)", car.car_id, car.status)
                return []

        logger.warning(
            "Car %s out of service (%s%s); re-routing %s requests",
            car.car_id,
            status,
            f": {reason}" if reason else "",
            len(orphaned),
        )
        self._emit(
            "car_unavailable",
            {"car_id": car.car_id, "status": status, "reason": reason, "tick": self.tick_count},
        )
        rerouted: List[Tuple[Request, Optional[int]]] = []
        for request in orphaned:
            rerouted.append((request, await self.assign(request)))
        return rerouted

    # endregion

    def _snapshot(self, car: Car) -> CarSnapshot:
        return CarSnapshot(
            car_id=car.car_id,
            current_floor=car.current_floor,
            direction=int(car.direction),
            up_stops=tuple(car.up_queue.floors()),
            down_stops=tuple(car.down_queue.floors()),
            pending_count=len(car.pending),
            load=car.load,
            capacity=car.capacity,
        )

    def _emit(self, event: str, payload: object) -> None:
        for callback in self.event_hooks.get(event, []):
            callback(payload)
