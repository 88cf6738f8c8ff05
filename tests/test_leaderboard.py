import threading

import pytest

from game_config import LeaderboardConfig
from leaderboard import CATEGORIES, Leaderboard, UnknownCategoryError, normalize_category
from sequence_models import ScoreSubmission


def _submission(user, position=50, rhythm=50, total=50, round_number=1):
    return ScoreSubmission(user=user, position=position, rhythm=rhythm, total=total, round=round_number)


@pytest.fixture
def board():
    return Leaderboard()


def test_first_submission_updates_every_category(board):
    assert board.submit(_submission("ada", 80, 70, 75, 3)) == list(CATEGORIES)
    assert [entry.to_dict() for entry in board.top("total")] == [
        {"user": "ada", "score": 75, "round": 3, "rank": 1}
    ]
    assert board.best("round", "ada") == 3


def test_only_strictly_better_values_replace_the_best(board):
    board.submit(_submission("ada", 80, 70, 75, 3))
    assert board.submit(_submission("ada", 80, 90, 60, 2)) == ["rhythm"]
    assert board.best("position", "ada") == 80
    assert board.best("rhythm", "ada") == 90
    assert board.best("total", "ada") == 75
    assert board.best("round", "ada") == 3
    assert board.submit(_submission("ada", 10, 10, 10, 1)) == []


def test_rankings_sort_by_score_then_user(board):
    board.submit(_submission("carol", total=60))
    board.submit(_submission("bob", total=90))
    board.submit(_submission("alice", total=60))
    entries = board.top("total")
    assert [(entry.user, entry.score, entry.rank) for entry in entries] == [
        ("bob", 90, 1),
        ("alice", 60, 2),
        ("carol", 60, 3),
    ]


def test_limit_defaults_and_caps():
    board = Leaderboard(LeaderboardConfig(max_entries=50, default_limit=3, max_limit=5))
    for index in range(20):
        board.submit(_submission(f"user{index:02d}", total=index))
    assert len(board.top("total")) == 3
    assert len(board.top("total", 4)) == 4
    assert len(board.top("total", 500)) == 5
    assert [entry.score for entry in board.top("total", 0)] == [19]
    assert [entry.score for entry in board.top("total", -3)] == [19]


def test_rankings_are_trimmed_to_max_entries():
    board = Leaderboard(LeaderboardConfig(max_entries=3, default_limit=10, max_limit=10))
    for index, total in enumerate([10, 40, 30, 20]):
        board.submit(_submission(f"player{index}", total=total))
    assert [entry.score for entry in board.top("total")] == [40, 30, 20]
    assert board.best("total", "player0") is None


@pytest.mark.parametrize("category", ["TOTAL", " rhythm ", "Round"])
def test_category_names_are_normalized(board, category):
    board.submit(_submission("ada"))
    assert len(board.top(category)) == 1
    assert normalize_category(category) in CATEGORIES


@pytest.mark.parametrize("category", ["accuracy", "", None])
def test_unknown_category(board, category):
    with pytest.raises(UnknownCategoryError):
        board.top(category)


def test_clear(board):
    board.submit(_submission("ada"))
    board.clear()
    assert all(board.top(category) == [] for category in CATEGORIES)


def test_concurrent_submissions_keep_the_best(board):
    def worker(offset):
        for value in range(offset, 100, 4):
            board.submit(_submission("ada", total=value))

    threads = [threading.Thread(target=worker, args=(offset,)) for offset in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert board.best("total", "ada") == 99
