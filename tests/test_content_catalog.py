import json
from pathlib import Path

import pytest

from roguelike_sim.content import (
    BuildingDef,
    ContentCatalog,
    ContentError,
    ResourceEntry,
    RoleDef,
    index_by_id,
    load_building_defs,
    load_content_catalog,
    load_role_defs,
)


REPO_ROOT = Path(__file__).resolve().parents[1]


def _write(path: Path, payload) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_role_from_authored_payload() -> None:
    role = RoleDef.from_payload(
        {
            "id": "farmer",
            "label": "Farmer",
            "eraUnlock": "bronze",
            "tags": ["agriculture"],
            "production": [{"type": "food", "amount": 2}, {"type": "gold"}],
        }
    )

    assert role.id == "farmer"
    assert role.era_unlock == "bronze"
    assert role.tags == ("agriculture",)
    assert role.production == (ResourceEntry("food", 2), ResourceEntry("gold", 0))


def test_building_accepts_snake_case_and_defaults() -> None:
    building = BuildingDef.from_payload({"id": "farm", "role_id": "farmer", "capacity": "4"})

    assert building.role_id == "farmer"
    assert building.capacity == 4
    assert building.label == ""
    assert building.era_unlock is None
    assert building.tags == ()


def test_building_with_empty_role_has_no_role() -> None:
    building = BuildingDef.from_payload({"id": "granary", "roleId": "", "capacity": 3})

    assert building.role_id is None


def test_non_integer_capacity_is_rejected() -> None:
    with pytest.raises(ContentError):
        BuildingDef.from_payload({"id": "farm", "capacity": "lots"})


@pytest.mark.parametrize("capacity", [2.9, -0.5, float("nan")])
def test_fractional_capacity_is_rejected(capacity: float) -> None:
    with pytest.raises(ContentError):
        BuildingDef.from_payload({"id": "farm", "capacity": capacity})


def test_integral_float_amount_is_accepted() -> None:
    role = RoleDef.from_payload({"id": "farmer", "production": [{"type": "food", "amount": 2.0}]})

    assert role.production == (ResourceEntry("food", 2),)

    with pytest.raises(ContentError):
        RoleDef.from_payload({"id": "farmer", "production": [{"type": "food", "amount": 1.5}]})


@pytest.mark.parametrize("tags", [3, {"a": 1}, True])
def test_tags_must_be_a_list(tags) -> None:
    with pytest.raises(ContentError):
        RoleDef.from_payload({"id": "x", "tags": tags})


def test_tags_accept_single_string_and_empty_values() -> None:
    assert RoleDef.from_payload({"id": "x", "tags": "trade"}).tags == ("trade",)
    assert BuildingDef.from_payload({"id": "x", "tags": ""}).tags == ()
    assert BuildingDef.from_payload({"id": "x", "tags": []}).tags == ()


def test_index_by_id_skips_blank_and_rejects_duplicates() -> None:
    indexed = index_by_id([RoleDef(id="a"), RoleDef(id=""), RoleDef(id="b")])
    assert sorted(indexed) == ["a", "b"]

    with pytest.raises(ContentError):
        index_by_id([RoleDef(id="a"), RoleDef(id="a", label="again")])


def test_load_role_defs_from_array(tmp_path: Path) -> None:
    path = _write(
        tmp_path / "roles.json",
        [{"id": "miner", "production": [{"type": "materials", "amount": 2}]}, {"id": "scholar"}],
    )

    roles = load_role_defs(path)

    assert [role.id for role in roles] == ["miner", "scholar"]
    assert roles[1].production == ()


def test_load_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_building_defs(tmp_path / "missing.json")


@pytest.mark.parametrize(
    "text",
    ['{"id": "farm"}', "[1, 2]", "[{\"id\": \"farm\"", '[{"id": "x", "production": ["food"]}]'],
)
def test_malformed_documents_raise_content_error(tmp_path: Path, text: str) -> None:
    path = tmp_path / "roles.json"
    path.write_text(text, encoding="utf-8")

    with pytest.raises(ContentError):
        load_role_defs(path)


def test_load_content_catalog_from_directory(tmp_path: Path) -> None:
    _write(tmp_path / "content" / "roles" / "core.json", [{"id": "farmer"}])
    _write(
        tmp_path / "content" / "buildings" / "core.json",
        [{"id": "farm", "roleId": "farmer", "capacity": 5}, {"id": "big_farm", "roleId": "farmer", "capacity": 9}],
    )

    catalog = load_content_catalog(tmp_path)

    assert isinstance(catalog, ContentCatalog)
    assert list(catalog.roles_by_id) == ["farmer"]
    assert [b.id for b in catalog.buildings_hosting("farmer")] == ["farm", "big_farm"]


def test_shipped_content_is_consistent() -> None:
    catalog = load_content_catalog(REPO_ROOT)

    roles = catalog.roles_by_id
    for building in catalog.buildings:
        if building.role_id:
            assert building.role_id in roles
        assert building.capacity >= 0
    assert roles["farmer"].production == (ResourceEntry("food", 2),)
