import pytest
import utils.file_manager as fm

def test_defaults_seeded(data_dir):
    assert (data_dir / "records.json").exists()
    cfg = fm.read_json("config.json")
    assert cfg["goal_amount"] == 1000
    assert fm.load_records() == []

def test_save_and_load_records():
    fm.save_records([{"id": "a", "date": "2024-01-01"}, "junk"])
    assert fm.load_records() == [{"id": "a", "date": "2024-01-01"}]

def test_missing_records_file(data_dir):
    (data_dir / "records.json").unlink()
    assert fm.load_records() == []

def test_update_config_goal():
    changed = fm.update_config({"goal_amount": 2500, "unknown": 1})
    assert changed == {"goal_amount": 2500}
    assert fm.goal_amount() == 2500.0
    assert fm.get_config()["sample_data"]["days"] == 30

@pytest.mark.parametrize("goal", [0, -5, "abc", None, True])
def test_update_config_rejects_bad_goal(goal):
    with pytest.raises(ValueError):
        fm.update_config({"goal_amount": goal})
    assert fm.goal_amount() == 1000.0

def test_goal_falls_back_when_config_is_bad():
    fm.write_json("config.json", {"goal_amount": 0})
    assert fm.goal_amount() == fm.DEFAULT_GOAL

def test_corrupt_config_uses_defaults(data_dir):
    (data_dir / "config.json").write_text("[[", encoding="utf-8")
    assert fm.get_config()["export"]["filename_prefix"] == "financial-tracker"
    assert fm.log_level() == "INFO"

@pytest.mark.parametrize("changes", [{"export": "x"}, {"sample_data": 5}, {"logging": "debug"}])
def test_update_config_rejects_non_object_sections(changes):
    with pytest.raises(ValueError):
        fm.update_config(changes)
    assert fm.read_json("config.json") == fm.DEFAULTS["config.json"]

def test_update_config_rejects_non_dict_body():
    with pytest.raises(ValueError):
        fm.update_config([["goal_amount", 5]])

def test_stored_sections_with_wrong_type_fall_back():
    fm.write_json("config.json", {"export": "x", "sample_data": 5, "logging": "debug", "goal_amount": 750})
    cfg = fm.get_config()
    assert cfg["export"]["filename_prefix"] == "financial-tracker"
    assert cfg["sample_data"]["days"] == 30
    assert fm.log_level() == "INFO"
    assert fm.goal_amount() == 750.0
