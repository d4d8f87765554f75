import asyncio

import pytest

from dispatch import Car, Dispatcher, TickDriver


def test_run_ticks_collects_arrivals_and_calls_hook():
    async def scenario():
        dispatcher = Dispatcher([Car(0)])
        published = []

        async def after_tick(events):
            published.append(list(events))

        driver = TickDriver(dispatcher, tick_interval=1.0, after_tick=after_tick)
        await dispatcher.select_floor(0, 3)
        await dispatcher.select_floor(0, 1)
        arrivals = await driver.run_ticks(3)
        return dispatcher, published, arrivals

    dispatcher, published, arrivals = run(scenario())
    assert [event.floor for event in arrivals] == [1, 3]
    assert len(published) == 3
    assert dispatcher.tick_count == 3


def test_background_loop_ticks_until_stopped():
    async def scenario():
        dispatcher = Dispatcher([Car(0)])
        driver = TickDriver(dispatcher, tick_interval=0.01)
        await driver.start()
        assert driver.running
        await asyncio.sleep(0.1)
        await driver.stop()
        return dispatcher, driver

    dispatcher, driver = run(scenario())
    assert dispatcher.tick_count > 1
    assert not driver.running


def test_tick_interval_must_be_positive():
    with pytest.raises(ValueError):
        TickDriver(Dispatcher([Car(0)]), tick_interval=0)


def run(coro):
    return asyncio.run(coro)
