import json
import logging

from idlegame.content.loader import (
    LoadResult,
    load_content,
    load_equipment_definitions,
    load_task_definitions,
)
from idlegame.progression.tasks import build_default_task_definitions


def test_load_content_merges_directory(write_pack):
    write_pack("base", equipment=[{"id": "gloves"}])
    packs_dir = write_pack("expansion", pack={"dependencies": ["base"]}, tasks=[{"id": "quest"}])

    merged = load_content(packs_dir, ["expansion"])

    assert merged.resolved_order == ["base", "expansion"]
    assert merged.tasks[0]["id"] == "expansion:quest"


def test_task_definitions_from_packs(write_pack, stats, jobs):
    packs_dir = write_pack("base", tasks=[{"id": "lift", "type": "stat", "stat": "strength"}])

    result = load_task_definitions(packs_dir, stats, jobs)

    assert result.ok
    assert result.error is None
    assert result.value[0]["id"] == "base:lift"


def test_task_definitions_fall_back_without_directory(stats, jobs):
    result = load_task_definitions(None, stats, jobs)

    assert result.used_fallback
    assert result.value == build_default_task_definitions(stats, jobs)


def test_task_definitions_fall_back_on_merge_error(write_pack, stats, jobs, caplog):
    packs_dir = write_pack("expansion", pack={"dependencies": ["base"]})

    with caplog.at_level(logging.WARNING):
        result = load_task_definitions(packs_dir, stats, jobs)

    assert result.used_fallback
    assert "Missing pack 'base'" in result.error
    assert "content packs failed to load" in caplog.text
    assert result.value == build_default_task_definitions(stats, jobs)


def test_task_definitions_fall_back_when_packs_define_no_tasks(write_pack, stats, jobs):
    packs_dir = write_pack("base", stats=[{"id": "grit"}])

    result = load_task_definitions(packs_dir, stats, jobs)

    assert result.used_fallback
    assert result.error == "Content packs define no tasks."


def test_task_definitions_fall_back_on_missing_directory(tmp_path, stats, jobs):
    result = load_task_definitions(tmp_path / "missing", stats, jobs)

    assert result.used_fallback
    assert "not found" in result.error


def test_equipment_file_loads(tmp_path, valid_equipment):
    path = tmp_path / "equipment.json"
    path.write_text(json.dumps([valid_equipment]), encoding="utf-8")

    result = load_equipment_definitions(path)

    assert result == LoadResult.loaded([valid_equipment])


def test_invalid_equipment_file_is_logged_and_skipped(tmp_path, valid_equipment, caplog):
    path = tmp_path / "equipment.json"
    path.write_text(json.dumps([dict(valid_equipment, slot="tail")]), encoding="utf-8")

    with caplog.at_level(logging.ERROR):
        result = load_equipment_definitions(path)

    assert result.used_fallback
    assert result.value == []
    assert "entry[0].slot" in caplog.text


def test_missing_or_broken_equipment_file(tmp_path):
    broken = tmp_path / "broken.json"
    broken.write_text("[", encoding="utf-8")

    assert load_equipment_definitions(None).used_fallback
    assert load_equipment_definitions(tmp_path / "missing.json").value == []
    assert load_equipment_definitions(broken).used_fallback


def test_task_definitions_fall_back_on_undecodable_pack_file(write_pack, stats, jobs):
    packs_dir = write_pack("base")
    (packs_dir / "base" / "tasks.json").write_bytes(b"\xff\xfe[]")

    result = load_task_definitions(packs_dir, stats, jobs)

    assert result.used_fallback
    assert result.value == build_default_task_definitions(stats, jobs)


def test_undecodable_equipment_file_falls_back(tmp_path):
    path = tmp_path / "equipment.json"
    path.write_bytes(b"\xff\xfe[]")

    result = load_equipment_definitions(path)

    assert result.used_fallback
    assert result.value == []
