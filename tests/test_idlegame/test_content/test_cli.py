import logging
from pathlib import Path

from idlegame.content.cli import main, validate_packs


PROJECT_PACKS = Path(__file__).resolve().parents[3] / "content" / "packs"


def test_valid_packs_exit_zero(write_pack, valid_equipment, caplog):
    write_pack("base", stats=[{"id": "grit", "category": "utility"}], equipment=[valid_equipment])
    packs_dir = write_pack("expansion", pack={"dependencies": ["base"]})

    with caplog.at_level(logging.INFO):
        code = validate_packs(packs_dir)

    assert code == 0
    assert "Content validation passed for 2 pack(s): base, expansion." in caplog.text


def test_invalid_equipment_exits_one_with_itemized_errors(write_pack, valid_equipment, caplog):
    packs_dir = write_pack(
        "base",
        equipment=[dict(valid_equipment, baseEffects={"x": 0}), dict(valid_equipment, id="b", slot="tail")],
    )

    with caplog.at_level(logging.ERROR):
        code = validate_packs(packs_dir)

    assert code == 1
    assert "- entry[0].baseEffects.x: must be a finite number greater than 0." in caplog.text
    assert "- entry[1].slot: 'tail' is invalid." in caplog.text


def test_unknown_stat_category_is_reported(write_pack, caplog):
    packs_dir = write_pack("base", stats=[{"id": "grit", "category": "mystic"}])

    with caplog.at_level(logging.ERROR):
        assert validate_packs(packs_dir) == 1

    assert "stats: Stat 'base:grit' has unknown category 'mystic'" in caplog.text


def test_merge_failure_exits_one(write_pack, caplog):
    packs_dir = write_pack("expansion", pack={"dependencies": ["base"]})

    with caplog.at_level(logging.ERROR):
        assert validate_packs(packs_dir) == 1

    assert "Failed to validate content" in caplog.text


def test_main_honors_active_packs(write_pack):
    write_pack("base")
    packs_dir = write_pack("broken", equipment=[{"id": "x"}])

    assert main([str(packs_dir), "--active", "base"]) == 0
    assert main([str(packs_dir)]) == 1


def test_shipped_content_is_valid():
    assert main([str(PROJECT_PACKS)]) == 0


def test_undecodable_pack_file_exits_one(write_pack, caplog):
    packs_dir = write_pack("base")
    (packs_dir / "base" / "tasks.json").write_bytes(b"\xff\xfe[]")

    with caplog.at_level(logging.ERROR):
        assert validate_packs(packs_dir) == 1

    assert "Failed to validate content" in caplog.text


def test_malformed_stat_dependencies_are_reported(write_pack, caplog):
    packs_dir = write_pack("base", stats=[{"id": "grit", "derivedDependencies": 5}])

    with caplog.at_level(logging.ERROR):
        assert validate_packs(packs_dir) == 1

    assert "stats: Stat 'base:grit' derivedDependencies must be a list of non-empty strings" in caplog.text
