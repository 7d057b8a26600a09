"""Runtime helpers: turn resolution, snapshots and the sandbox session."""

from .sandbox import SandboxConfig, SimSandbox
from .snapshot import GameSnapshotV1, game_signature, load_snapshot, restore_game, save_snapshot, snapshot_game
from .turns import (
    CityProduction,
    TurnConfig,
    TurnPlan,
    commit_turn,
    ensure_resource_keys,
    plan_city,
    plan_turn,
    resolve_turn,
    run_turns,
)

__all__ = [
    "CityProduction",
    "GameSnapshotV1",
    "SandboxConfig",
    "SimSandbox",
    "TurnConfig",
    "TurnPlan",
    "commit_turn",
    "ensure_resource_keys",
    "game_signature",
    "load_snapshot",
    "plan_city",
    "plan_turn",
    "resolve_turn",
    "restore_game",
    "run_turns",
    "save_snapshot",
    "snapshot_game",
]
