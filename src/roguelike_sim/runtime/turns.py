"""Per-turn resource production.

A turn converts each city's role assignments into productive workers and
those workers into resources:

* building instances give each role a worker capacity,
* raw assignments are scaled down proportionally (floor) when they exceed the
  city's population,
* the scaled value is clamped to the role's capacity, and
* every effective worker yields the role's per-worker production.

Deltas from all cities are summed into one :class:`TurnPlan` before anything
is written, so :func:`commit_turn` is the only place the game state changes.
Unknown role or building ids and negative counts contribute nothing; the
resolver never raises on content it cannot resolve.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from fractions import Fraction
from typing import Any, Iterable, Mapping

from roguelike_sim.content import BuildingDef, RoleDef
from roguelike_sim.state import DEFAULT_RESOURCE_KEYS, CityState, GameState


@dataclass(slots=True)
class TurnConfig:
    resource_keys: tuple[str, ...] = DEFAULT_RESOURCE_KEYS
    seed_resource_keys: bool = True


@dataclass(slots=True)
class CityProduction:
    city_id: str
    population: int
    total_assigned: int = 0
    scaled: bool = False
    capacity_by_role: dict[str, int] = field(default_factory=dict)
    assigned_by_role: dict[str, int] = field(default_factory=dict)
    effective_by_role: dict[str, int] = field(default_factory=dict)
    delta: dict[str, int] = field(default_factory=dict)

    @property
    def effective_workers(self) -> int:
        return sum(self.effective_by_role.values())


@dataclass(slots=True)
class TurnPlan:
    turn: int
    delta: dict[str, int] = field(default_factory=dict)
    cities: list[CityProduction] = field(default_factory=list)

    def produced(self, kind: str) -> int:
        return self.delta.get(kind, 0)


def ensure_turn_cfg(owner: Any) -> TurnConfig:
    cfg = getattr(owner, "turn_cfg", None)
    if not isinstance(cfg, TurnConfig):
        cfg = TurnConfig()
        owner.turn_cfg = cfg
    return cfg


def ensure_resource_keys(state: GameState, keys: Iterable[str] = DEFAULT_RESOURCE_KEYS) -> dict[str, int]:
    if state.resources is None:
        state.resources = {}
    for key in keys:
        if key not in state.resources:
            state.resources[key] = 0
    return state.resources


def _capacity_by_role(city: CityState, building_defs_by_id: Mapping[str, BuildingDef]) -> dict[str, int]:
    capacity: dict[str, int] = {}
    for instance in city.buildings:
        bdef = building_defs_by_id.get(instance.building_id)
        if bdef is None or not bdef.role_id:
            continue
        capacity[bdef.role_id] = capacity.get(bdef.role_id, 0) + max(0, int(bdef.capacity))
    return capacity


def plan_city(
    city: CityState,
    role_defs_by_id: Mapping[str, RoleDef],
    building_defs_by_id: Mapping[str, BuildingDef],
) -> CityProduction:
    population = int(city.population)
    result = CityProduction(city_id=city.id, population=population)
    result.capacity_by_role = _capacity_by_role(city, building_defs_by_id)

    assigned: dict[str, int] = {}
    total = 0
    for ra in city.role_assignments:
        if not ra.role_id:
            continue
        workers = max(0, int(ra.workers))
        assigned[ra.role_id] = assigned.get(ra.role_id, 0) + workers
        total += workers
    result.total_assigned = total

    if total > population:
        # floor(assigned * population / total); leftover workers are dropped
        scale = Fraction(0) if population <= 0 else Fraction(population, total)
        assigned = {role_id: int(workers * scale) for role_id, workers in assigned.items()}
        result.scaled = True
    result.assigned_by_role = assigned

    for role_id, workers in assigned.items():
        result.effective_by_role[role_id] = min(workers, result.capacity_by_role.get(role_id, 0))

    for role_id, workers in result.effective_by_role.items():
        if workers <= 0:
            continue
        role = role_defs_by_id.get(role_id)
        if role is None:
            continue
        for entry in role.production or ():
            if not entry.type:
                continue
            result.delta[entry.type] = result.delta.get(entry.type, 0) + max(0, int(entry.amount)) * workers
    return result


def plan_turn(
    state: GameState,
    role_defs_by_id: Mapping[str, RoleDef],
    building_defs_by_id: Mapping[str, BuildingDef],
) -> TurnPlan:
    plan = TurnPlan(turn=state.turn + 1)
    for city in state.cities:
        city_plan = plan_city(city, role_defs_by_id, building_defs_by_id)
        plan.cities.append(city_plan)
        for kind, amount in city_plan.delta.items():
            plan.delta[kind] = plan.delta.get(kind, 0) + amount
    return plan


def commit_turn(state: GameState, plan: TurnPlan) -> None:
    resources = ensure_resource_keys(state, ())
    for kind, amount in plan.delta.items():
        resources[kind] = resources.get(kind, 0) + amount
    state.turn += 1
    state.era_turn += 1


def _advance(
    state: GameState,
    role_defs_by_id: Mapping[str, RoleDef],
    building_defs_by_id: Mapping[str, BuildingDef],
    cfg: TurnConfig,
) -> TurnPlan:
    if cfg.seed_resource_keys:
        ensure_resource_keys(state, cfg.resource_keys)
    plan = plan_turn(state, role_defs_by_id, building_defs_by_id)
    commit_turn(state, plan)
    return plan


def resolve_turn(
    state: GameState,
    role_defs_by_id: Mapping[str, RoleDef],
    building_defs_by_id: Mapping[str, BuildingDef],
    *,
    cfg: TurnConfig | None = None,
) -> None:
    """Advance ``state`` by exactly one turn."""

    _advance(state, role_defs_by_id, building_defs_by_id, cfg or TurnConfig())


def run_turns(
    state: GameState,
    role_defs_by_id: Mapping[str, RoleDef],
    building_defs_by_id: Mapping[str, BuildingDef],
    turns: int,
    *,
    cfg: TurnConfig | None = None,
) -> list[TurnPlan]:
    if turns < 0:
        raise ValueError(f"turns must be non-negative, got {turns}")
    cfg = cfg or TurnConfig()
    return [_advance(state, role_defs_by_id, building_defs_by_id, cfg) for _ in range(turns)]


__all__ = [
    "CityProduction",
    "TurnConfig",
    "TurnPlan",
    "commit_turn",
    "ensure_resource_keys",
    "ensure_turn_cfg",
    "plan_city",
    "plan_turn",
    "resolve_turn",
    "run_turns",
]
