import pytest

from dispatch import DispatchConfig


def test_defaults():
    config = DispatchConfig()
    assert config.tick_interval == 2.0
    assert config.start_floor == config.lowest_floor
    assert config.highest_floor == 9
    assert config.strategy == "cost"
    assert config.pending_patience is None


def test_from_dict():
    config = DispatchConfig.from_dict(
        {
            "num_floors": 30,
            "car_count": 4,
            "strategy": "look_eta",
            "strategy_options": {"stop_penalty": 2},
            "pending_patience": 15,
        }
    )
    assert config.car_count == 4
    assert config.strategy_options == {"stop_penalty": 2}
    assert config.highest_floor == 29


def test_from_dict_rejects_unknown_keys():
    with pytest.raises(ValueError, match="elevator_count"):
        DispatchConfig.from_dict({"elevator_count": 3})


@pytest.mark.parametrize(
    "overrides",
    [
        {"num_floors": 1},
        {"car_count": 0},
        {"capacity": 0},
        {"tick_interval": 0},
        {"pending_patience": -1},
        {"start_floor": 10},
    ],
)
def test_invalid_values(overrides):
    with pytest.raises(ValueError):
        DispatchConfig(**overrides)
