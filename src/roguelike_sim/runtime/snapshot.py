from __future__ import annotations

import gzip
import json
from dataclasses import dataclass, fields, is_dataclass
from hashlib import sha256
from pathlib import Path
from typing import Any, Mapping

from roguelike_sim.state import BuildingInstance, CityState, GameState, RoleAssignment

SNAPSHOT_SCHEMA_VERSION = "game_snapshot_v1"
_REQUIRED_KEYS = ("seed", "turn", "game")

_SNAPSHOT_TYPES: dict[str, type] = {
    cls.__name__: cls for cls in (GameState, CityState, RoleAssignment, BuildingInstance)
}


@dataclass(slots=True)
class GameSnapshotV1:
    schema_version: str
    seed: str
    turn: int
    game: Mapping[str, Any]


def to_snapshot_dict(obj: Any) -> Any:
    if is_dataclass(obj) and not isinstance(obj, type):
        payload = {field.name: to_snapshot_dict(getattr(obj, field.name)) for field in fields(obj)}
        return {"__type__": obj.__class__.__name__, "data": payload}

    if isinstance(obj, Mapping):
        return {str(k): to_snapshot_dict(v) for k, v in sorted(obj.items(), key=lambda item: str(item[0]))}

    if isinstance(obj, (list, tuple)):
        return [to_snapshot_dict(item) for item in obj]

    return obj


def from_snapshot_dict(obj: Any) -> Any:
    if isinstance(obj, Mapping):
        if "__type__" in obj and "data" in obj:
            cls = _SNAPSHOT_TYPES.get(obj["__type__"])
            if cls is None:
                raise ValueError(f"Unknown snapshot type: {obj['__type__']}")
            data = obj["data"]
            kwargs = {field.name: from_snapshot_dict(data[field.name]) for field in fields(cls) if field.name in data}
            return cls(**kwargs)
        return {key: from_snapshot_dict(value) for key, value in obj.items()}

    if isinstance(obj, list):
        return [from_snapshot_dict(item) for item in obj]

    return obj


def snapshot_game(state: GameState) -> GameSnapshotV1:
    return GameSnapshotV1(
        schema_version=SNAPSHOT_SCHEMA_VERSION,
        seed=state.seed,
        turn=state.turn,
        game=to_snapshot_dict(state),
    )


def restore_game(snapshot: GameSnapshotV1) -> GameState:
    try:
        game = from_snapshot_dict(snapshot.game)
    except (KeyError, TypeError) as exc:
        raise ValueError(f"Malformed snapshot payload: {exc}") from exc
    if not isinstance(game, GameState):
        raise ValueError("Snapshot payload is not a GameState")
    if not isinstance(game.resources, (dict, type(None))) or not isinstance(game.cities, list):
        raise ValueError("Snapshot payload has malformed resources or cities")
    return game


def _canonical_dumps(data: Mapping[str, Any]) -> str:
    return json.dumps(data, sort_keys=True, separators=(",", ":"))


def save_snapshot(snapshot: GameSnapshotV1, path: Path, *, gzip_output: bool = False) -> str:
    snapshot_dict = {
        "schema_version": snapshot.schema_version,
        "seed": snapshot.seed,
        "turn": snapshot.turn,
        "game": snapshot.game,
    }

    payload = _canonical_dumps(snapshot_dict).encode("utf-8")
    digest = sha256(payload).hexdigest()

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if gzip_output:
        with gzip.open(path, "wb") as fp:
            fp.write(payload)
    else:
        with open(path, "wb") as fp:
            fp.write(payload)

    return digest


def load_snapshot(path: Path) -> GameSnapshotV1:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(path)

    raw: bytes
    try:
        if path.suffix.endswith("gz"):
            with gzip.open(path, "rb") as fp:
                raw = fp.read()
        else:
            with open(path, "rb") as fp:
                raw = fp.read()
    except (OSError, EOFError) as exc:
        raise ValueError(f"Unreadable snapshot {path}: {exc}") from exc

    try:
        data = json.loads(raw.decode("utf-8"))
    except UnicodeDecodeError as exc:
        raise ValueError(f"Snapshot {path} is not UTF-8 JSON") from exc
    if not isinstance(data, Mapping):
        raise ValueError(f"Snapshot {path} must be a JSON object")
    missing = [key for key in _REQUIRED_KEYS if key not in data]
    if missing:
        raise ValueError(f"Snapshot {path} is missing {', '.join(missing)}")
    schema = data.get("schema_version", SNAPSHOT_SCHEMA_VERSION)
    if schema != SNAPSHOT_SCHEMA_VERSION:
        raise ValueError(f"Unsupported snapshot schema: {schema}")
    return GameSnapshotV1(
        schema_version=schema,
        seed=data["seed"],
        turn=data["turn"],
        game=data["game"],
    )


def game_signature(state: GameState) -> str:
    summary = {
        "seed": state.seed,
        "turn": state.turn,
        "era": state.era,
        "era_turn": state.era_turn,
        "resources": {k: int(v) for k, v in sorted((state.resources or {}).items())},
        "cities": [
            {
                "id": city.id,
                "population": city.population,
                "assignments": [[ra.role_id, ra.workers] for ra in city.role_assignments],
                "buildings": [b.building_id for b in city.buildings],
            }
            for city in state.cities
        ],
    }
    return sha256(_canonical_dumps(summary).encode("utf-8")).hexdigest()


__all__ = [
    "GameSnapshotV1",
    "SNAPSHOT_SCHEMA_VERSION",
    "from_snapshot_dict",
    "game_signature",
    "load_snapshot",
    "restore_game",
    "save_snapshot",
    "snapshot_game",
    "to_snapshot_dict",
]
