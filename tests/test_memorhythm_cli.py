import json

import pytest

import memorhythm
from game_config import GameConfig, get_config


@pytest.fixture(autouse=True)
def default_config(monkeypatch, tmp_path):
    monkeypatch.delenv("MEMORHYTHM_CONFIG_PATH", raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("game_config.user_config_dir", lambda *args, **kwargs: str(tmp_path / "user"))
    get_config.cache_clear()
    yield
    get_config.cache_clear()


def test_demo_with_perfect_input_climbs_rounds():
    results = memorhythm.run_demo(config=GameConfig(), seed=12345, rounds=3)
    assert [result["round"] for result in results] == [1, 2, 3]
    assert all(result["passed"] for result in results)
    assert all(result["total"] == 100 for result in results)


def test_demo_with_missed_input_stays_on_round_one():
    results = memorhythm.run_demo(config=GameConfig(), seed=12345, rounds=2, offset_px=5000.0)
    assert [result["round"] for result in results] == [1, 1]
    assert not any(result["passed"] for result in results)


def test_sequence_command_prints_targets(capsys):
    assert memorhythm.main(["sequence", "--round", "2", "--seed", "7"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["ok"] is True
    assert payload["seed"] == 7
    assert len(payload["targets"]) == 4
    assert payload["targets"][0]["time_ms"] == 0


def test_sequence_command_is_deterministic(capsys):
    memorhythm.main(["sequence", "--seed", "99"])
    first = capsys.readouterr().out
    memorhythm.main(["sequence", "--seed", "99"])
    assert capsys.readouterr().out == first


def test_demo_command_with_leaderboard(capsys):
    assert memorhythm.main(["demo", "--rounds", "2", "--user", "ada"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert len(payload["results"]) == 2
    assert payload["leaderboard"]["round"][0] == {"user": "ada", "score": 2, "round": 2, "rank": 1}


def test_config_command(capsys):
    assert memorhythm.main(["config"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["config_path"] is None
    assert payload["config"]["scoring"]["max_position_error_px"] == 150.0


def test_bad_config_file_reports_error(capsys, tmp_path):
    (tmp_path / "memorhythm_config.json").write_text("[]", encoding="utf-8")
    assert memorhythm.main(["config"]) == 2
    payload = json.loads(capsys.readouterr().out)
    assert payload["ok"] is False
