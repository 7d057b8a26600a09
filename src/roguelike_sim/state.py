"""Structured game state for the roguelike city sim.

Dataclasses keep the state lightweight and serialisable.  A session owns a
single :class:`GameState`; cities are edited between turns by whatever drives
the session and the turn resolver only touches the resource table and the
two turn counters.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List


RESOURCE_FOOD = "food"
RESOURCE_MATERIALS = "materials"
RESOURCE_PRODUCTION = "production"
RESOURCE_KNOWLEDGE = "knowledge"
RESOURCE_UNITY = "unity"
RESOURCE_GOLD = "gold"

DEFAULT_RESOURCE_KEYS: tuple[str, ...] = (
    RESOURCE_FOOD,
    RESOURCE_MATERIALS,
    RESOURCE_PRODUCTION,
    RESOURCE_KNOWLEDGE,
    RESOURCE_UNITY,
    RESOURCE_GOLD,
)

ResourceTable = Dict[str, int]


@dataclass(slots=True)
class RoleAssignment:
    role_id: str
    workers: int = 0


@dataclass(slots=True)
class BuildingInstance:
    building_id: str
    # Informational only; capacity comes from the building definition.
    workers_assigned: int = 0


@dataclass(slots=True)
class CityState:
    """A city and the population the player has put to work in it.

    ``population`` and ``role_assignments`` are edited independently, so the
    assignments may ask for more workers than the city has.  The resolver
    reconciles the two every turn.
    """

    id: str
    label: str = ""
    population: int = 0
    tags: List[str] = field(default_factory=list)
    role_assignments: List[RoleAssignment] = field(default_factory=list)
    buildings: List[BuildingInstance] = field(default_factory=list)


@dataclass
class GameState:
    seed: str = "seed"
    turn: int = 0
    era: str = "bronze"
    era_turn: int = 0
    entropy: float = 0.0
    resources: ResourceTable = field(default_factory=dict)
    cities: List[CityState] = field(default_factory=list)

    def city(self, city_id: str) -> CityState:
        for city in self.cities:
            if city.id == city_id:
                return city
        raise KeyError(city_id)


__all__ = [
    "BuildingInstance",
    "CityState",
    "DEFAULT_RESOURCE_KEYS",
    "GameState",
    "RESOURCE_FOOD",
    "RESOURCE_GOLD",
    "RESOURCE_KNOWLEDGE",
    "RESOURCE_MATERIALS",
    "RESOURCE_PRODUCTION",
    "RESOURCE_UNITY",
    "ResourceTable",
    "RoleAssignment",
]
