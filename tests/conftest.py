import json
import pytest


@pytest.fixture
def event_bus():
    """Fresh EventBus for each test."""
    from idlecore.core.events import EventBus
    return EventBus()


@pytest.fixture
def memory_storage():
    """Empty in-memory key-value storage."""
    from idlecore.resources.storage import MemoryStorage
    return MemoryStorage()


@pytest.fixture
def stats():
    """Built-in stat registry."""
    from idlegame.progression.stats import StatRegistry
    return StatRegistry.default()


@pytest.fixture
def jobs():
    """Built-in job registry."""
    from idlegame.progression.jobs import JobRegistry
    return JobRegistry.default()


@pytest.fixture
def catalog(stats, jobs):
    """Task catalog covering every built-in stat and job."""
    from idlegame.progression.tasks import TaskCatalog
    return TaskCatalog.default(stats, jobs)


@pytest.fixture
def engine(catalog, stats, jobs, event_bus):
    """Progression engine on a fresh default state."""
    from idlegame.progression.engine import ProgressionEngine
    return ProgressionEngine(catalog, stats, jobs, event_bus=event_bus)


@pytest.fixture
def recorder(event_bus):
    """Collects published events; call recorder.listen(EventType) first."""

    class Recorder:
        def __init__(self):
            self.events = []

        def listen(self, *event_types):
            for event_type in event_types:
                event_bus.subscribe(event_type, self.events.append, weak=False)
            return self

        def names(self):
            return [event.name for event in self.events]

    return Recorder()


@pytest.fixture
def write_pack(tmp_path):
    """Write a pack directory: write_pack("base", pack={...}, stats=[...])."""
    packs_dir = tmp_path / "packs"
    packs_dir.mkdir()

    def _write(pack_id, **files):
        pack_dir = packs_dir / pack_id
        pack_dir.mkdir(exist_ok=True)
        for name, content in files.items():
            (pack_dir / f"{name}.json").write_text(json.dumps(content), encoding="utf-8")
        return packs_dir

    _write.packs_dir = packs_dir
    return _write


@pytest.fixture
def valid_equipment():
    """One valid equipment definition."""
    return {
        "id": "work-gloves",
        "name": "Work Gloves",
        "slot": "hands",
        "tier": 1,
        "tags": ["starter"],
        "baseEffects": {"warehouseSpeed": 0.05},
        "flavorText": "Stiff leather.",
        "loreRefs": ["base:warehouse"],
    }
