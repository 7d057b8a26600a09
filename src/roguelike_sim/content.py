"""Content definitions for roles and buildings.

Roles and buildings are authored as top-level JSON arrays, one file per
family (``content/roles/core.json`` and ``content/buildings/core.json``).
This module turns those rows into immutable records and indexes them by id
so the turn resolver can look them up.  Field names follow the authored JSON
(``eraUnlock``, ``roleId``); snake_case spellings are accepted as well.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, TypeVar

ROLES_RELATIVE_PATH = Path("content") / "roles" / "core.json"
BUILDINGS_RELATIVE_PATH = Path("content") / "buildings" / "core.json"


class ContentError(RuntimeError):
    """Raised when a content document cannot be turned into definitions."""


@dataclass(frozen=True, slots=True)
class ResourceEntry:
    type: str
    amount: int = 0


@dataclass(frozen=True, slots=True)
class RoleDef:
    """Worker occupation; ``production`` is per worker, per turn."""

    id: str
    label: str = ""
    era_unlock: Optional[str] = None
    tags: Tuple[str, ...] = ()
    production: Tuple[ResourceEntry, ...] = ()

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "RoleDef":
        entries: List[ResourceEntry] = []
        for raw in payload.get("production") or ():
            if not isinstance(raw, Mapping):
                raise ContentError(f"Role {payload.get('id')!r} has a non-object production entry: {raw!r}")
            entries.append(ResourceEntry(type=str(raw.get("type") or ""), amount=_as_int(raw.get("amount"))))
        return cls(
            id=str(payload.get("id") or ""),
            label=str(payload.get("label") or ""),
            era_unlock=_optional_str(_first(payload, "eraUnlock", "era_unlock")),
            tags=_tags(payload.get("tags")),
            production=tuple(entries),
        )


@dataclass(frozen=True, slots=True)
class BuildingDef:
    """Structure hosting one role; ``capacity`` bounds productive workers."""

    id: str
    label: str = ""
    era_unlock: Optional[str] = None
    tags: Tuple[str, ...] = ()
    role_id: Optional[str] = None
    capacity: int = 0

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "BuildingDef":
        return cls(
            id=str(payload.get("id") or ""),
            label=str(payload.get("label") or ""),
            era_unlock=_optional_str(_first(payload, "eraUnlock", "era_unlock")),
            tags=_tags(payload.get("tags")),
            role_id=_optional_str(_first(payload, "roleId", "role_id")),
            capacity=_as_int(payload.get("capacity")),
        )


def _first(payload: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in payload:
            return payload[key]
    return None


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value)
    return text or None


def _tags(value: Any) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,) if value else ()
    if not isinstance(value, (list, tuple)):
        raise ContentError(f"Expected a tag list, got {value!r}")
    return tuple(str(tag) for tag in value)


def _as_int(value: Any) -> int:
    if value is None or value == "":
        return 0
    if isinstance(value, float) and not value.is_integer():
        raise ContentError(f"Expected an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ContentError(f"Expected an integer, got {value!r}") from exc


_Def = TypeVar("_Def", RoleDef, BuildingDef)


def index_by_id(defs: Iterable[_Def]) -> Dict[str, _Def]:
    """Return ``{id: def}``; empty ids are skipped, duplicates are rejected."""

    indexed: Dict[str, _Def] = {}
    for definition in defs:
        if not definition.id:
            continue
        if definition.id in indexed:
            raise ContentError(f"Duplicate content id: {definition.id}")
        indexed[definition.id] = definition
    return indexed


def _load_array(path: Path) -> List[Mapping[str, Any]]:
    if not path.exists():
        raise FileNotFoundError(path)
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ContentError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(document, list):
        raise ContentError(f"{path} must contain a top-level JSON array")
    for index, row in enumerate(document):
        if not isinstance(row, Mapping):
            raise ContentError(f"{path}[{index}] is not a JSON object")
    return document


def load_role_defs(path: Path) -> List[RoleDef]:
    return [RoleDef.from_payload(row) for row in _load_array(Path(path))]


def load_building_defs(path: Path) -> List[BuildingDef]:
    return [BuildingDef.from_payload(row) for row in _load_array(Path(path))]


@dataclass(slots=True)
class ContentCatalog:
    """Loaded roles and buildings with id indices."""

    roles: List[RoleDef] = field(default_factory=list)
    buildings: List[BuildingDef] = field(default_factory=list)

    @property
    def roles_by_id(self) -> Dict[str, RoleDef]:
        return index_by_id(self.roles)

    @property
    def buildings_by_id(self) -> Dict[str, BuildingDef]:
        return index_by_id(self.buildings)

    def buildings_hosting(self, role_id: str) -> List[BuildingDef]:
        return [b for b in self.buildings if b.role_id == role_id]


def load_content_catalog(root: Path) -> ContentCatalog:
    root = Path(root)
    return ContentCatalog(
        roles=load_role_defs(root / ROLES_RELATIVE_PATH),
        buildings=load_building_defs(root / BUILDINGS_RELATIVE_PATH),
    )


__all__ = [
    "BUILDINGS_RELATIVE_PATH",
    "BuildingDef",
    "ContentCatalog",
    "ContentError",
    "ROLES_RELATIVE_PATH",
    "ResourceEntry",
    "RoleDef",
    "index_by_id",
    "load_building_defs",
    "load_content_catalog",
    "load_role_defs",
]
