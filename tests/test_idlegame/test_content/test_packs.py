import pytest

from idlegame.content.packs import (
    ActivePackNotFoundError,
    ContentPackError,
    DependencyCycleError,
    DuplicateIdError,
    MissingDependencyError,
    MissingOverrideTargetError,
    PackFormatError,
    PackMetadata,
    merge_content_packs,
    resolve_scoped_id,
)


@pytest.fixture
def base_and_expansion():
    return {
        "base": {
            "pack": {
                "name": "Base",
                "version": "1.0.0",
                "dependencies": [],
                "loreNamespace": "base",
            },
            "stats": {"additions": [{"id": "strength", "label": "Strength", "baseValue": 1}]},
            "equipment": [{"id": "gloves", "name": "Gloves"}],
        },
        "expansion": {
            "pack": {
                "name": "Expansion",
                "version": "1.0.0",
                "dependencies": ["base"],
                "loreNamespace": "expansion",
            },
            "stats": {"overrides": [{"id": "base:strength", "baseValue": 5}]},
            "tasks": [{"id": "quest", "label": "Quest"}],
        },
    }


def test_resolve_scoped_id():
    assert resolve_scoped_id("base", "sword") == "base:sword"
    assert resolve_scoped_id("base", "expansion:sword") == "expansion:sword"


@pytest.mark.parametrize("pack_id, raw_id", [
    ("base", ""),
    ("base", None),
    ("", "sword"),
    ("base", ":sword"),
    ("base", "base:"),
])
def test_resolve_scoped_id_rejects_bad_ids(pack_id, raw_id):
    with pytest.raises(PackFormatError):
        resolve_scoped_id(pack_id, raw_id)


def test_merge_is_dependency_ordered_with_overrides(base_and_expansion):
    merged = merge_content_packs(base_and_expansion, active_pack_ids=["expansion"])

    assert merged.active_pack_ids == ["expansion"]
    assert merged.resolved_order == ["base", "expansion"]
    assert merged.stats[0]["id"] == "base:strength"
    assert merged.stats[0]["baseValue"] == 5
    assert merged.stats[0]["label"] == "Strength"
    assert merged.stats[0]["sourcePackId"] == "expansion"
    assert merged.equipment[0]["id"] == "base:gloves"
    assert merged.equipment[0]["sourcePackId"] == "base"
    assert merged.tasks[0]["id"] == "expansion:quest"


def test_merge_does_not_mutate_sources(base_and_expansion):
    merge_content_packs(base_and_expansion)

    assert base_and_expansion["base"]["stats"]["additions"][0] == {
        "id": "strength", "label": "Strength", "baseValue": 1,
    }


def test_metadata_defaults():
    merged = merge_content_packs({"solo": {}})

    assert merged.metadata == [
        PackMetadata(id="solo", name="solo", version="0.0.0", dependencies=(), lore_namespace="solo")
    ]


def test_default_activation_uses_every_pack_in_sorted_order():
    merged = merge_content_packs({"zeta": {}, "alpha": {}, "mid": {"pack": {"dependencies": ["zeta"]}}})

    assert merged.active_pack_ids == ["alpha", "mid", "zeta"]
    assert merged.resolved_order == ["alpha", "zeta", "mid"]


def test_dependencies_visited_lexicographically():
    packs = {
        "top": {"pack": {"dependencies": ["b", "a"]}},
        "a": {},
        "b": {},
    }

    assert merge_content_packs(packs, ["top"]).resolved_order == ["a", "b", "top"]


def test_inactive_packs_are_not_merged(base_and_expansion):
    base_and_expansion["unused"] = {"equipment": [{"id": "junk"}]}

    merged = merge_content_packs(base_and_expansion, ["expansion"])

    assert "unused" not in merged.resolved_order
    assert [e["id"] for e in merged.equipment] == ["base:gloves"]


def test_duplicate_ids_across_packs_fail():
    packs = {
        "base": {"pack": {"dependencies": []}, "equipment": [{"id": "base:shared", "name": "Shared A"}]},
        "alt": {"pack": {"dependencies": []}, "equipment": [{"id": "base:shared", "name": "Shared B"}]},
    }

    with pytest.raises(DuplicateIdError, match="Duplicate content id collision in equipment"):
        merge_content_packs(packs)


def test_duplicate_stat_additions_fail():
    packs = {"base": {"stats": [{"id": "grit"}, {"id": "grit"}]}}

    with pytest.raises(DuplicateIdError):
        merge_content_packs(packs)


def test_override_of_missing_stat_fails():
    packs = {"base": {"stats": {"overrides": [{"id": "luck", "baseValue": 3}]}}}

    with pytest.raises(MissingOverrideTargetError, match="base:luck"):
        merge_content_packs(packs)


def test_missing_dependency_fails():
    with pytest.raises(MissingDependencyError, match="'core' required by 'expansion'"):
        merge_content_packs({"expansion": {"pack": {"dependencies": ["core"]}}})


def test_dependency_cycle_names_the_path():
    packs = {
        "a": {"pack": {"dependencies": ["b"]}},
        "b": {"pack": {"dependencies": ["a"]}},
    }

    with pytest.raises(DependencyCycleError) as excinfo:
        merge_content_packs(packs, ["a"])

    assert excinfo.value.cycle == ["a", "b", "a"]
    assert "a -> b -> a" in str(excinfo.value)


def test_unknown_active_pack_fails(base_and_expansion):
    with pytest.raises(ActivePackNotFoundError):
        merge_content_packs(base_and_expansion, ["dlc"])


@pytest.mark.parametrize("packs", [
    {"base": []},
    {"base": {"pack": "meta"}},
    {"base": {"pack": {"dependencies": "core"}}},
    {"base": {"pack": {"dependencies": [""]}}},
    {"base": {"equipment": {"id": "x"}}},
    {"base": {"tasks": ["quest"]}},
    {"base": {"stats": "strength"}},
    {"base": {"stats": {"additions": {"id": "x"}}}},
])
def test_malformed_packs_fail(packs):
    with pytest.raises(PackFormatError):
        merge_content_packs(packs)


def test_all_merge_errors_share_a_base_class():
    for error_type in (
        PackFormatError,
        DuplicateIdError,
        MissingDependencyError,
        DependencyCycleError,
        MissingOverrideTargetError,
        ActivePackNotFoundError,
    ):
        assert issubclass(error_type, ContentPackError)


def test_empty_merge():
    merged = merge_content_packs()

    assert merged.resolved_order == []
    assert merged.stats == []
