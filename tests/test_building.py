import asyncio

import pytest

from dispatch import (
    Building,
    Car,
    Dispatcher,
    DispatchConfig,
    Direction,
    InvalidFloorError,
    InvalidRequestError,
    UnknownCarError,
)


def run(coro):
    return asyncio.run(coro)


def make_building(*floors, num_floors=10):
    cars = [Car(car_id, current_floor=floor) for car_id, floor in enumerate(floors or (0,))]
    return Building(dispatcher=Dispatcher(cars), num_floors=num_floors)


def test_request_elevator_returns_the_assigned_car():
    building = make_building(1, 9)
    assert run(building.request_elevator(3, "up")) == 0
    assert building.dispatcher.cars[0].up_queue.floors() == [3]


def test_out_of_range_floors_never_reach_the_dispatcher():
    building = make_building(0)

    with pytest.raises(InvalidFloorError):
        run(building.request_elevator(10, Direction.DOWN))
    with pytest.raises(ValueError):
        run(building.request_elevator(-1, Direction.UP))
    with pytest.raises(InvalidFloorError):
        run(building.select_floor(0, 12))

    car = building.dispatcher.cars[0]
    assert car.is_empty()
    assert not building.dispatcher.deferred


def test_calls_past_the_ends_of_the_shaft_are_rejected():
    building = make_building(0)
    with pytest.raises(InvalidRequestError):
        run(building.request_elevator(9, Direction.UP))
    with pytest.raises(InvalidRequestError):
        run(building.request_elevator(0, Direction.DOWN))
    with pytest.raises(InvalidRequestError):
        run(building.request_elevator(4, Direction.IDLE))


def test_select_floor_goes_to_the_named_car():
    building = make_building(0, 0)
    run(building.select_floor(1, 6))

    assert building.dispatcher.cars[0].is_empty()
    assert building.dispatcher.cars[1].up_queue.floors() == [6]


def test_select_current_floor_is_idempotent():
    building = make_building(4)
    run(building.select_floor(0, 4))
    run(building.select_floor(0, 4))

    car = building.dispatcher.cars[0]
    assert car.is_empty()
    assert car.direction is Direction.IDLE


def test_select_floor_on_unknown_car():
    building = make_building(0)
    with pytest.raises(UnknownCarError):
        run(building.select_floor(3, 2))


def test_arrivals_update_positions_and_reach_listeners():
    async def scenario():
        building = make_building(0)
        heard = []
        building.on_arrival(heard.append)
        await building.select_floor(0, 2)
        await building.tick()
        return building, heard

    building, heard = run(scenario())
    assert [(e.car_id, e.floor, e.direction) for e in heard] == [(0, 2, Direction.UP)]
    assert building.positions == {0: 2}
    assert list(building.recent_arrivals) == heard


def test_from_config_builds_the_whole_bank():
    config = DispatchConfig(num_floors=20, lowest_floor=-2, car_count=3, capacity=5, start_floor=0)
    building = Building.from_config(config)

    assert building.highest_floor == 17
    assert sorted(building.dispatcher.cars) == [0, 1, 2]
    assert all(car.capacity == 5 and car.current_floor == 0 for car in building.dispatcher.cars.values())
    # basement floors are valid
    assert run(building.request_elevator(-2, Direction.UP)) is not None


def test_cars_must_start_inside_the_building():
    with pytest.raises(InvalidFloorError):
        make_building(12)


def test_snapshot_describes_every_car():
    building = make_building(0, 5)
    run(building.request_elevator(7, Direction.DOWN))
    state = building.snapshot()

    assert state["floors"] == {"lowest": 0, "highest": 9}
    assert state["strategy"] == "cost"
    assert [car["id"] for car in state["cars"]] == [0, 1]
    assert state["cars"][1]["up_stops"] == [7]
    assert state["cars"][1]["direction"] == "up"
