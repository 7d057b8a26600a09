"""Headless sandbox session for stepping a game by hand.

The sandbox owns one :class:`GameState` together with the loaded role and
building content.  It exposes the editing operations a front-end needs
(adding cities, placing buildings, assigning workers) and advances the game
through the turn resolver.  Telemetry is kept on the sandbox, not on the
game state, so a turn still only changes resources and turn counters.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional

from roguelike_sim.content import (
    BUILDINGS_RELATIVE_PATH,
    ROLES_RELATIVE_PATH,
    BuildingDef,
    RoleDef,
    index_by_id,
    load_building_defs,
    load_role_defs,
)
from roguelike_sim.runtime.snapshot import save_snapshot, snapshot_game
from roguelike_sim.runtime.telemetry import DebugConfig, EventRing, Metrics, ensure_metrics, record_event
from roguelike_sim.runtime.turns import TurnConfig, TurnPlan, ensure_resource_keys, ensure_turn_cfg, run_turns
from roguelike_sim.state import BuildingInstance, CityState, GameState, RoleAssignment


@dataclass(slots=True)
class SandboxConfig:
    default_population: int = 5
    max_population: int = 50
    turn_batch: int = 10


@dataclass(slots=True)
class SimSandbox:
    state: GameState = field(default_factory=GameState)
    roles: List[RoleDef] = field(default_factory=list)
    buildings: List[BuildingDef] = field(default_factory=list)
    config: SandboxConfig = field(default_factory=SandboxConfig)
    turn_cfg: TurnConfig = field(default_factory=TurnConfig)
    metrics: Metrics = field(default_factory=Metrics)
    debug_cfg: DebugConfig = field(default_factory=lambda: DebugConfig(level="standard"))
    event_ring: Optional[EventRing] = None

    def __post_init__(self) -> None:
        ensure_resource_keys(self.state, self.turn_cfg.resource_keys)

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------
    def load_content(self, root: Path) -> None:
        """Load roles and buildings from ``root``.

        A missing file keeps whatever was loaded before for that family and
        is reported as a ``CONTENT_MISSING`` event.
        """

        root = Path(root)
        roles = self._load_family(root / ROLES_RELATIVE_PATH, load_role_defs)
        if roles is not None:
            self.roles = roles
        buildings = self._load_family(root / BUILDINGS_RELATIVE_PATH, load_building_defs)
        if buildings is not None:
            self.buildings = buildings

    def _load_family(self, path: Path, loader) -> Optional[list]:
        try:
            defs = loader(path)
        except FileNotFoundError:
            record_event(self, {"type": "CONTENT_MISSING", "path": str(path)})
            return None
        record_event(self, {"type": "CONTENT_LOADED", "path": str(path), "count": len(defs)})
        return defs

    # ------------------------------------------------------------------
    # City editing
    # ------------------------------------------------------------------
    def _clamp_population(self, population: int) -> int:
        return max(0, min(int(self.config.max_population), int(population)))

    def add_city(self, label: Optional[str] = None, population: Optional[int] = None) -> CityState:
        if population is None:
            population = self.config.default_population
        city = CityState(
            id=str(uuid.uuid4()),
            label=label or f"City {len(self.state.cities) + 1}",
            population=self._clamp_population(population),
        )
        self.state.cities.append(city)
        return city

    def remove_city(self, city_id: str) -> None:
        city = self.state.city(city_id)
        self.state.cities.remove(city)

    def set_population(self, city_id: str, population: int) -> int:
        city = self.state.city(city_id)
        city.population = self._clamp_population(population)
        return city.population

    def add_building(self, city_id: str, building_id: Optional[str] = None) -> Optional[BuildingInstance]:
        city = self.state.city(city_id)
        if building_id is None:
            if not self.buildings:
                return None
            building_id = self.buildings[0].id
        instance = BuildingInstance(building_id=building_id)
        city.buildings.append(instance)
        return instance

    def remove_building(self, city_id: str, index: int) -> BuildingInstance:
        return self.state.city(city_id).buildings.pop(index)

    def add_role_assignment(
        self, city_id: str, role_id: Optional[str] = None, workers: int = 0
    ) -> Optional[RoleAssignment]:
        city = self.state.city(city_id)
        if role_id is None:
            if not self.roles:
                return None
            role_id = self.roles[0].id
        assignment = RoleAssignment(role_id=role_id, workers=int(workers))
        city.role_assignments.append(assignment)
        return assignment

    def set_workers(self, city_id: str, index: int, workers: int) -> RoleAssignment:
        assignment = self.state.city(city_id).role_assignments[index]
        assignment.workers = int(workers)
        return assignment

    def remove_role_assignment(self, city_id: str, index: int) -> RoleAssignment:
        return self.state.city(city_id).role_assignments.pop(index)

    # ------------------------------------------------------------------
    # Turns
    # ------------------------------------------------------------------
    def step(self) -> TurnPlan:
        return self.run(1)[0]

    def run(self, turns: Optional[int] = None) -> List[TurnPlan]:
        if turns is None:
            turns = self.config.turn_batch
        plans = run_turns(
            self.state,
            index_by_id(self.roles),
            index_by_id(self.buildings),
            turns,
            cfg=ensure_turn_cfg(self),
        )
        for plan in plans:
            self._record_turn(plan)
        return plans

    def _record_turn(self, plan: TurnPlan) -> None:
        metrics = ensure_metrics(self)
        metrics.inc("turns.resolved")
        for kind, amount in sorted(plan.delta.items()):
            metrics.inc(f"production.{kind}", amount)
        metrics.set_gauge("turn.last_delta", dict(plan.delta))
        record_event(
            self,
            {
                "type": "TURN_RESOLVED",
                "turn": plan.turn,
                "delta": dict(plan.delta),
                "effective_workers": {cp.city_id: cp.effective_workers for cp in plan.cities},
            },
        )

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------
    def resources_view(self) -> List[str]:
        return [f"{kind}: {value}" for kind, value in self.state.resources.items()]

    def status_line(self) -> str:
        return f"Turn: {self.state.turn}  EraTurn: {self.state.era_turn}"

    def export_state(self, path: Path) -> str:
        return save_snapshot(snapshot_game(self.state), Path(path))

    def summary(self) -> dict[str, Any]:
        return {
            "turn": self.state.turn,
            "era": self.state.era,
            "era_turn": self.state.era_turn,
            "cities": len(self.state.cities),
            "resources": dict(self.state.resources),
            "metrics_signature": ensure_metrics(self).snapshot_signature(),
        }


__all__ = ["SandboxConfig", "SimSandbox"]
