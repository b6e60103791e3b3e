import json

import pytest

from idlegame.content.files import load_pack_files


def test_reads_every_pack_directory(write_pack):
    write_pack("base", pack={"name": "Base"}, stats=[{"id": "grit"}])
    packs_dir = write_pack("expansion", tasks=[{"id": "quest"}])

    packs = load_pack_files(packs_dir)

    assert list(packs) == ["base", "expansion"]
    assert packs["base"] == {"pack": {"name": "Base"}, "stats": [{"id": "grit"}]}
    assert packs["expansion"] == {"tasks": [{"id": "quest"}]}


def test_ignores_loose_files_and_unknown_names(write_pack):
    packs_dir = write_pack("base", notes={"x": 1})
    (packs_dir / "README.json").write_text("{}", encoding="utf-8")

    assert load_pack_files(packs_dir) == {"base": {}}


def test_missing_directory_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_pack_files(tmp_path / "nowhere")


def test_malformed_json_propagates(write_pack):
    packs_dir = write_pack("base")
    (packs_dir / "base" / "stats.json").write_text("{not json", encoding="utf-8")

    with pytest.raises(json.JSONDecodeError):
        load_pack_files(packs_dir)
