"""Roguelike city sim package public façade."""

from .content import (
    BuildingDef,
    ContentCatalog,
    ContentError,
    ResourceEntry,
    RoleDef,
    index_by_id,
    load_content_catalog,
)
from .runtime.sandbox import SandboxConfig, SimSandbox
from .runtime.turns import TurnPlan, ensure_resource_keys, plan_turn, resolve_turn, run_turns
from .state import DEFAULT_RESOURCE_KEYS, BuildingInstance, CityState, GameState, RoleAssignment

__all__ = [
    "BuildingDef",
    "BuildingInstance",
    "CityState",
    "ContentCatalog",
    "ContentError",
    "DEFAULT_RESOURCE_KEYS",
    "GameState",
    "ResourceEntry",
    "RoleAssignment",
    "RoleDef",
    "SandboxConfig",
    "SimSandbox",
    "TurnPlan",
    "ensure_resource_keys",
    "index_by_id",
    "load_content_catalog",
    "plan_turn",
    "resolve_turn",
    "run_turns",
]
