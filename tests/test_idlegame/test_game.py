import json
from pathlib import Path

import pytest

from idlegame.game import GameConfig, IdleGame
from idlegame.progression.tasks import IDLE_TASK_ID
from idlegame.save.service import SAVE_KEY, load_game


PROJECT_ROOT = Path(__file__).resolve().parents[2]


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


def make_game(storage, clock, **config):
    return IdleGame(GameConfig(**config), storage=storage, clock=clock, sleep=clock.sleep)


def test_config_defaults():
    config = GameConfig()

    assert config.tick_interval == 0.1
    assert config.autosave_interval == 10.0
    assert config.packs_dir is None
    assert config.active_pack_ids == []


def test_start_without_content_uses_builtins(memory_storage, clock):
    game = make_game(memory_storage, clock)
    game.start()

    assert game.is_started
    assert game.engine.active_task_id == IDLE_TASK_ID
    assert "courier" in game.catalog
    assert game.equipment_definitions == []
    # Selecting idle during startup must not write a save
    assert memory_storage.get_item(SAVE_KEY) is None


def test_start_loads_existing_save(memory_storage, clock):
    memory_storage.set_item(SAVE_KEY, json.dumps({
        "saveVersion": 2,
        "runtimeState": {"money": 120, "job": {"xp": 0, "level": 4}},
    }))
    game = make_game(memory_storage, clock)

    game.start()

    assert game.engine.state.money == 120
    assert game.engine.state.job.level == 4


def test_start_with_shipped_content(memory_storage, clock):
    game = make_game(
        memory_storage,
        clock,
        packs_dir=PROJECT_ROOT / "content" / "packs",
        equipment_path=PROJECT_ROOT / "data" / "equipment.json",
    )

    game.start()

    assert "base:strength-training" in game.catalog
    assert game.catalog.get("frontier:artisan").job_id == "artisan"
    assert len(game.equipment_definitions) == 4


def test_invalid_equipment_file_is_skipped(tmp_path, memory_storage, clock):
    path = tmp_path / "equipment.json"
    path.write_text(json.dumps([{"id": "bad"}]), encoding="utf-8")
    game = make_game(memory_storage, clock, equipment_path=path)

    game.start()

    assert game.equipment_definitions == []


def test_selecting_a_task_saves_immediately(memory_storage, clock):
    game = make_game(memory_storage, clock)
    game.start()

    game.engine.select_task("courier")

    assert memory_storage.get_item(SAVE_KEY) is not None


def test_run_advances_progression(memory_storage, clock):
    game = make_game(memory_storage, clock)
    game.start()
    game.engine.select_task("strength")

    # First tick has a zero delta, then 26 ticks of 0.1s
    game.run(max_ticks=27)

    assert game.engine.state.task_progress["strength"].level == 1
    assert game.engine.state.stats["strength"].points == 1


def test_autosave_follows_tick_time(memory_storage, clock):
    game = make_game(memory_storage, clock, autosave_interval=1.0)
    game.start()

    game.update(0.6)
    assert memory_storage.get_item(SAVE_KEY) is None
    game.update(0.6)
    assert memory_storage.get_item(SAVE_KEY) is not None


def test_shutdown_writes_final_save(memory_storage, clock):
    game = make_game(memory_storage, clock)
    game.start()
    game.engine.state.money = 77

    assert game.shutdown()

    assert not game.is_started
    assert not game.save_service.is_running
    assert load_game(memory_storage).money == 77


def test_shutdown_without_storage(clock):
    game = make_game(None, clock)
    game.start()

    assert not game.shutdown()


def test_equipment_view_uses_owned_ids(memory_storage, clock):
    game = make_game(memory_storage, clock, equipment_path=PROJECT_ROOT / "data" / "equipment.json")
    game.start()
    game.engine.state.owned_equipment_ids = ["iron-helm", "ghost"]
    game.engine.state.equipped_by_slot = {"head": "iron-helm"}

    view = game.equipment_view

    assert [item["id"] for item in view.owned] == ["iron-helm"]
    assert view.is_equipped("iron-helm")


def test_headless_entry_point(tmp_path):
    from idlegame.__main__ import main

    saves = tmp_path / "saves"

    assert main(["--saves", str(saves), "--task", "courier", "--ticks", "2"]) == 0
    assert (saves / f"{SAVE_KEY}.json").exists()
    assert main(["--saves", str(saves), "--task", "flying", "--ticks", "1"]) == 1
