import asyncio

from run_scenario import ScenarioRunner, _percentile, build_building

OUTAGE_SCENARIO = {
    "building": {"num_floors": 6, "car_count": 2, "capacity": 4},
    "calls": [
        {"tick": 0, "floor": 0, "destination": 5},
        {"tick": 0, "floor": 3, "destination": 1},
    ],
    "events": [
        {"type": "outage", "car_id": 0, "start_tick": 1, "end_tick": 8},
    ],
}


def test_riders_in_a_failed_car_still_reach_their_floor():
    building = build_building(OUTAGE_SCENARIO)
    runner = ScenarioRunner(building, OUTAGE_SCENARIO["calls"], OUTAGE_SCENARIO["events"])
    asyncio.run(runner.run(12))

    metrics = runner.metrics()
    assert metrics["riders"] == 2
    assert metrics["delivered"] == 2
    assert all(rider.car_id == 1 for rider in runner.riders)
    failed = building.dispatcher.cars[0]
    assert failed.load == 0
    assert failed.in_service()


def test_percentile_interpolates():
    assert _percentile([], 0.95) == 0.0
    assert _percentile([1, 2, 3, 4], 0.5) == 2.5
