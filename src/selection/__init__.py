from __future__ import annotations

from typing import Dict, Type

from .cost import WeightedCostStrategy
from .eta import LookEtaStrategy
from .interface import CarSnapshot, SelectionStrategy
from .nearest import NearestCarStrategy

__all__ = [
    "CarSnapshot",
    "LookEtaStrategy",
    "NearestCarStrategy",
    "SelectionStrategy",
    "WeightedCostStrategy",
    "get_strategy",
]


STRATEGY_REGISTRY: Dict[str, Type[SelectionStrategy]] = {
    "cost": WeightedCostStrategy,
    "nearest": NearestCarStrategy,
    "look_eta": LookEtaStrategy,
}


def get_strategy(name: str, **kwargs) -> SelectionStrategy:
    cls = STRATEGY_REGISTRY.get(name.lower())
    if cls is None:
        raise ValueError(f"Unknown strategy '{name}'. Available: {', '.join(STRATEGY_REGISTRY)}")
    return cls(**kwargs)
