from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, Iterable, List, Optional

from .errors import InvalidRequestError
from .queues import FloorQueue
from .request import Direction, Request, RequestKind

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Car:
    """A single elevator car scheduling its own stops with LOOK.

    Stops ahead of the car in the up direction live in ``up_queue`` and are
    served lowest first; stops in the down direction live in ``down_queue``
    and are served highest first. Hall calls that cannot be served on the
    current sweep wait in ``pending`` until the car changes direction.

    A hall call behind the car (an up call below it or a down call above
    it) can also be queued as a *turn call*: the last stop of the sweep
    running towards it, where the car turns round to pick the caller up.
    If that sweep later grows past the caller, the call goes back to
    ``pending`` when the car stops there.
    """

    car_id: int
    capacity: int = 8
    current_floor: int = 0
    direction: Direction = Direction.IDLE
    load: int = 0
    status: str = "in_service"  # in_service, faulted, maintenance
    up_queue: FloorQueue = field(default_factory=lambda: FloorQueue(ascending=True))
    down_queue: FloorQueue = field(default_factory=lambda: FloorQueue(ascending=False))
    pending: Deque[Request] = field(default_factory=deque)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)
    turn_calls: Dict[int, Request] = field(default_factory=dict, init=False, repr=False)

    def in_service(self) -> bool:
        return self.status == "in_service"

    @property
    def has_spare_capacity(self) -> bool:
        return self.load < self.capacity

    @property
    def queue_size(self) -> int:
        return len(self.up_queue) + len(self.down_queue) + len(self.pending)

    def is_empty(self) -> bool:
        return not (self.up_queue or self.down_queue or self.pending)

    def needs_tick(self) -> bool:
        return self.in_service() and (not self.is_empty() or self.direction is not Direction.IDLE)

    # region Admission
    def admit_external(self, request: Request) -> None:
        """Admit a hall call, deferring it to ``pending`` if it is behind the sweep."""
        if request.kind is not RequestKind.EXTERNAL:
            raise InvalidRequestError("admit_external only accepts external requests")

        if self.direction is Direction.IDLE:
            if self._place_by_position(request):
                self._leave_idle(request.source_floor, request.direction)
                logger.debug("Car %s admitted call at %s while idle", self.car_id, request.source_floor)
                return
        elif self._is_compatible(request) and self._enqueue(request.source_floor, request.direction):
            logger.debug(
                "Car %s admitted %s call at %s",
                self.car_id,
                request.direction.name,
                request.source_floor,
            )
            return

        self.pending.append(request)
        logger.debug(
            "Car %s deferred %s call at %s (car at %s heading %s)",
            self.car_id,
            request.direction.name,
            request.source_floor,
            self.current_floor,
            self.direction.name,
        )

    def admit_internal(self, destination_floor: int) -> bool:
        """Queue a cabin selection. Returns False when the car is already there."""
        if destination_floor == self.current_floor:
            return False
        direction = Direction.UP if destination_floor > self.current_floor else Direction.DOWN
        self._queue_for(direction).push(destination_floor)
        if self.direction is Direction.IDLE:
            self._leave_idle(destination_floor, direction)
        logger.debug("Car %s admitted destination %s", self.car_id, destination_floor)
        return True

    def reprocess_pending(self) -> None:
        """Re-test pending hall calls against the current direction."""
        if not self.pending:
            return
        remaining: Deque[Request] = deque()
        for request in self.pending:
            if self.direction is Direction.IDLE:
                placed = self._place_by_position(request)
            else:
                placed = self._is_compatible(request) and self._enqueue(
                    request.source_floor, request.direction
                )
            if not placed:
                remaining.append(request)
        moved = len(self.pending) - len(remaining)
        self.pending = remaining
        if moved:
            logger.debug("Car %s moved %s pending calls into its queues", self.car_id, moved)

    def promote_stale(self, cutoff_tick: int) -> int:
        """Queue pending calls issued at or before ``cutoff_tick`` as turn calls.

        The car keeps its direction. A promoted caller becomes the far end of
        the sweep that runs towards it; callers that would not be the far end
        stay pending.
        """
        stale = [request for request in self.pending if request.requested_at <= cutoff_tick]
        if not stale:
            return 0
        left = {id(request) for request in self._park(stale)}
        self.pending = deque(
            request
            for request in self.pending
            if request.requested_at > cutoff_tick or id(request) in left
        )
        return len(stale) - len(left)

    # endregion

    def next_floor(self) -> Optional[int]:
        """Pop the next stop, reversing only once the active queue is exhausted."""
        if self.is_empty():
            self._set_direction(Direction.IDLE)
            return None

        if self.direction is Direction.IDLE:
            if not (self.up_queue or self.down_queue):
                self._park_pending()
            self._set_direction(Direction.UP if self.up_queue else Direction.DOWN)

        queue = self._queue_for(self.direction)
        if not queue:
            self._set_direction(self.direction.opposite)
            if not (self.up_queue or self.down_queue):
                self._park_pending()
            queue = self._queue_for(self.direction)
            if not queue:
                # parking can leave the stops on the other side of the car
                self._set_direction(self.direction.opposite)
                queue = self._queue_for(self.direction)

        if not queue:
            return None
        return queue.pop()

    def has_stops_ahead(self) -> bool:
        """True while the current sweep still has stops to serve."""
        if self.direction is Direction.IDLE:
            return False
        return bool(self._queue_for(self.direction))

    def move_to(self, floor: int) -> None:
        logger.debug("Car %s moving from %s to %s", self.car_id, self.current_floor, floor)
        self.current_floor = floor
        caller = self.turn_calls.pop(floor, None)
        if caller is not None and caller.direction is not self.direction and self.has_stops_ahead():
            # the sweep now runs past this caller; pick them up on the way back
            logger.debug("Car %s passing turn call at %s", self.car_id, floor)
            self.pending.append(caller)

    def board(self, riders: int) -> int:
        accepted = max(0, min(riders, self.capacity - self.load))
        self.load += accepted
        return accepted

    def alight(self, riders: int) -> int:
        released = max(0, min(riders, self.load))
        self.load -= released
        return released

    def take_out_of_service(self, status: str, requested_at: int = 0) -> List[Request]:
        """Mark the car out of rotation and hand back everything it was holding."""
        self.status = status
        orphaned = [self.request_for_stop(floor, Direction.UP, requested_at) for floor in self.up_queue.clear()]
        orphaned.extend(
            self.request_for_stop(floor, Direction.DOWN, requested_at) for floor in self.down_queue.clear()
        )
        orphaned.extend(self.pending)
        self.pending = deque()
        self.turn_calls.clear()
        self.direction = Direction.IDLE
        return orphaned

    def request_for_stop(self, floor: int, direction: Direction, requested_at: int = 0) -> Request:
        """Hall call another car needs in order to cover a stop of this one."""
        caller = self.turn_calls.pop(floor, None)
        if caller is not None:
            return caller
        return Request.external(floor, direction, requested_at)

    def restore_service(self) -> None:
        self.status = "in_service"

    def _queue_for(self, direction: Direction) -> FloorQueue:
        return self.down_queue if direction is Direction.DOWN else self.up_queue

    def _is_compatible(self, request: Request) -> bool:
        if request.direction is Direction.UP:
            return request.source_floor > self.current_floor
        if request.direction is Direction.DOWN:
            return request.source_floor < self.current_floor
        return False

    def _enqueue(self, floor: int, direction: Direction) -> bool:
        # a floor lives in at most one directional queue
        if floor in self._queue_for(direction.opposite):
            return False
        self._queue_for(direction).push(floor)
        return True

    def _place_by_position(self, request: Request) -> bool:
        floor = request.source_floor
        if floor == self.current_floor or self._is_compatible(request):
            return self._enqueue(floor, request.direction)
        return self._queue_turn_call(request)

    def _queue_turn_call(self, request: Request) -> bool:
        floor = request.source_floor
        approach = request.direction.opposite
        queue = self._queue_for(approach)
        if floor in self._queue_for(request.direction):
            return False
        # the caller must be the last stop of the sweep towards it
        if any((floor - stop) * approach < 0 for stop in queue):
            return False
        self.turn_calls.setdefault(floor, request)
        queue.push(floor)
        return True

    def _park(self, requests: Iterable[Request]) -> Deque[Request]:
        """Queue what can be reached, farthest caller first; return the rest in order."""
        requests = list(requests)
        placed = set()
        for request in sorted(requests, key=lambda r: abs(r.source_floor - self.current_floor), reverse=True):
            if self._place_by_position(request):
                placed.add(id(request))
        return deque(request for request in requests if id(request) not in placed)

    def _park_pending(self) -> None:
        self.pending = self._park(self.pending)

    def _leave_idle(self, floor: int, fallback: Direction) -> None:
        if floor > self.current_floor:
            self._set_direction(Direction.UP)
        elif floor < self.current_floor:
            self._set_direction(Direction.DOWN)
        else:
            self._set_direction(fallback)

    def _set_direction(self, direction: Direction) -> None:
        if direction is self.direction:
            return
        logger.debug("Car %s direction %s -> %s", self.car_id, self.direction.name, direction.name)
        self.direction = direction
        self.reprocess_pending()
