"""CLI for replaying LiftDispatch scenarios defined in JSON configs."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import math
from collections import defaultdict, deque
from dataclasses import dataclass
from pathlib import Path
from typing import Deque, Dict, Iterable, List, Optional

from dispatch import ArrivalEvent, Building, DispatchConfig, Direction


@dataclass
class Rider:
    origin: int
    destination: int
    called_at: int
    car_id: Optional[int] = None
    boarded_at: Optional[int] = None
    alighted_at: Optional[int] = None

    @property
    def direction(self) -> Direction:
        return Direction.UP if self.destination > self.origin else Direction.DOWN


class ScenarioRunner:
    """Plays hall calls against a building and boards riders as cars arrive."""

    def __init__(self, building: Building, calls: Iterable[Dict], events: Iterable[Dict]) -> None:
        self.building = building
        self.calls_by_tick: Dict[int, List[Dict]] = defaultdict(list)
        for call in calls:
            self.calls_by_tick[call.get("tick", 0)].append(call)
        self.events = list(events)
        self.waiting: Dict[int, List[Rider]] = defaultdict(list)
        self.riders: List[Rider] = []
        self.arrivals = 0
        self.outages: Deque[Dict] = deque()
        building.dispatcher.on_event("car_unavailable", self.outages.append)

    async def run(self, duration: int) -> None:
        for _ in range(duration):
            current = self.building.dispatcher.tick_count
            await self._apply_scheduled_events(current)
            await self._evacuate()
            await self._place_calls(current)
            for event in await self.building.tick():
                self.arrivals += 1
                await self._handle_arrival(event)
            await self._evacuate()

    async def _place_calls(self, current_tick: int) -> None:
        for call in self.calls_by_tick.pop(current_tick, []):
            rider = Rider(origin=call["floor"], destination=call["destination"], called_at=current_tick)
            self.riders.append(rider)
            self.waiting[rider.origin].append(rider)
            await self.building.request_elevator(rider.origin, rider.direction)

    async def _apply_scheduled_events(self, current_tick: int) -> None:
        dispatcher = self.building.dispatcher
        for event in self.events:
            if event.get("type") != "outage":
                continue
            car_id = event.get("car_id")
            if car_id is None:
                continue
            if current_tick == event.get("start_tick"):
                await dispatcher.mark_unavailable(car_id, event.get("reason", "scheduled outage"))
            if current_tick == event.get("end_tick"):
                await dispatcher.restore(car_id)

    async def _evacuate(self) -> None:
        """Unload riders from cars that left service and let them call again."""
        while self.outages:
            car_id = self.outages.popleft()["car_id"]
            floor = self.building.dispatcher.get_car(car_id).current_floor
            for rider in self.riders:
                if rider.car_id != car_id or rider.alighted_at is not None:
                    continue
                await self.building.alight(car_id)
                rider.car_id = None
                rider.boarded_at = None
                rider.origin = floor
                self.waiting[floor].append(rider)
                await self.building.request_elevator(floor, rider.direction)

    async def _handle_arrival(self, event: ArrivalEvent) -> None:
        for rider in self.riders:
            if rider.car_id == event.car_id and rider.alighted_at is None and rider.destination == event.floor:
                rider.alighted_at = event.tick
                await self.building.alight(event.car_id)

        still_waiting: List[Rider] = []
        for rider in self.waiting.get(event.floor, []):
            if rider.direction != event.direction and not event.turning:
                still_waiting.append(rider)
                continue
            if await self.building.board(event.car_id) == 0:
                still_waiting.append(rider)
                # the car was full; call again for the next one
                await self.building.request_elevator(rider.origin, rider.direction)
                continue
            rider.car_id = event.car_id
            rider.boarded_at = event.tick
            await self.building.select_floor(event.car_id, rider.destination)
        self.waiting[event.floor] = still_waiting

    def metrics(self) -> Dict[str, object]:
        waits = [r.boarded_at - r.called_at for r in self.riders if r.boarded_at is not None]
        rides = [r.alighted_at - r.boarded_at for r in self.riders if r.alighted_at is not None]
        return {
            "ticks": self.building.dispatcher.tick_count,
            "arrivals": self.arrivals,
            "riders": len(self.riders),
            "delivered": len(rides),
            "average_wait": _average(waits),
            "wait_p95": _percentile(waits, 0.95),
            "average_ride": _average(rides),
            "ride_p95": _percentile(rides, 0.95),
        }


def _average(values: List[int]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


def _percentile(values: List[int], percentile: float) -> float:
    if not values:
        return 0.0
    sorted_vals = sorted(values)
    k = (len(sorted_vals) - 1) * percentile
    f = math.floor(k)
    c = math.ceil(k)
    if f == c:
        return float(sorted_vals[int(k)])
    return float(sorted_vals[f] * (c - k) + sorted_vals[c] * (k - f))


def build_building(config: Dict) -> Building:
    return Building.from_config(DispatchConfig.from_dict(config.get("building", {})))


def save_results(output_path: Optional[Path], data: Dict) -> None:
    if not output_path:
        return
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(data, indent=2))


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("config", type=Path, help="Path to a JSON scenario configuration file")
    parser.add_argument(
        "--output",
        type=Path,
        help="Optional file path to write the final metrics as JSON",
    )
    parser.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, ...)")
    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    config = json.loads(args.config.read_text())
    building = build_building(config)
    runner = ScenarioRunner(building, config.get("calls", []), config.get("events", []))
    duration = config.get("duration", 100)
    asyncio.run(runner.run(duration))

    final_metrics = runner.metrics()
    results = {
        "scenario": config.get("name", args.config.stem),
        "description": config.get("description"),
        "duration": duration,
        "strategy": building.dispatcher.strategy_name,
        "final_metrics": final_metrics,
    }

    save_results(args.output, results)

    print(f"Scenario: {results['scenario']}")
    if results["description"]:
        print(results["description"])
    print(f"Strategy: {results['strategy']}")
    print(f"Duration: {results['duration']} ticks")
    print("Final metrics:")
    for key, value in final_metrics.items():
        print(f"  {key}: {value}")
    if args.output:
        print(f"Saved metrics to {args.output}")


if __name__ == "__main__":
    main()
