from __future__ import annotations

from typing import Iterable, Tuple

from .interface import CarSnapshot


def sweep_distance(car: CarSnapshot, floor: int, direction: int) -> Tuple[int, int]:
    """Estimate how far a car travels along its LOOK sweep before it can pick
    up a caller at ``floor`` heading ``direction`` (+1 up, -1 down).

    Returns ``(floors_travelled, stops_on_the_way)``. The estimate follows the
    car to the end of its current sweep, reverses, and reverses again if the
    caller is behind it going the same way. Down sweeps are computed as
    mirrored up sweeps.
    """

    if car.direction == 0:
        return abs(car.current_floor - floor), 0
    if car.direction > 0:
        return _up_sweep(car.current_floor, car.up_stops, car.down_stops, floor, direction > 0)
    return _up_sweep(
        -car.current_floor,
        [-stop for stop in car.down_stops],
        [-stop for stop in car.up_stops],
        -floor,
        direction < 0,
    )


def _up_sweep(
    position: int, ahead: Iterable[int], behind: Iterable[int], floor: int, same_way: bool
) -> Tuple[int, int]:
    ahead = list(ahead)
    behind = list(behind)
    if same_way and floor >= position:
        stops = sum(1 for stop in ahead if position <= stop < floor)
        return floor - position, stops

    top = max([position, *ahead])
    if not same_way:
        turn = max(top, floor)
        stops = len(ahead) + sum(1 for stop in behind if stop > floor)
        return (turn - position) + (turn - floor), stops

    bottom = min([floor, *behind])
    return (top - position) + (top - bottom) + (floor - bottom), len(ahead) + len(behind)
