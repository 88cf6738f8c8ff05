"""
leaderboard.py

In-memory best-score rankings per category.

Purpose
- Receive the flat {user, position, rhythm, total, round} record handed off after scoring.
- Keep each user's best value per category and serve the top entries.

Rules
- A category is updated only when the new value beats the user's current best.
- Each ranking is trimmed to max_entries after an update.
- Ordering is highest score first, ties broken by user name.
- A requested limit is clamped to [1, max_limit].
- Thread-safe: the web server may call in from its request thread.

Nothing is persisted. The process owns the data for its lifetime.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Dict, List, Optional

from game_config import LeaderboardConfig
from sequence_models import ScoreSubmission

CATEGORIES = ("position", "rhythm", "total", "round")


class UnknownCategoryError(ValueError):
    pass


@dataclass(frozen=True)
class LeaderboardEntry:
    user: str
    score: int
    round: int
    rank: int

    def to_dict(self) -> Dict[str, object]:
        return {"user": self.user, "score": int(self.score), "round": int(self.round), "rank": int(self.rank)}


@dataclass
class _BestRecord:
    score: int
    round: int


def normalize_category(category: str) -> str:
    normalized = str(category or "").strip().lower()
    if normalized not in CATEGORIES:
        raise UnknownCategoryError(f"Invalid leaderboard category: {category}")
    return normalized


class Leaderboard:
    def __init__(self, config: Optional[LeaderboardConfig] = None) -> None:
        self._config = config if config is not None else LeaderboardConfig()
        self._lock = threading.RLock()
        self._rankings: Dict[str, Dict[str, _BestRecord]] = {category: {} for category in CATEGORIES}

    def submit(self, submission: ScoreSubmission) -> List[str]:
        values = {
            "position": int(submission.position),
            "rhythm": int(submission.rhythm),
            "total": int(submission.total),
            "round": int(submission.round),
        }

        updated_categories: List[str] = []
        with self._lock:
            for category in CATEGORIES:
                ranking = self._rankings[category]
                current = ranking.get(submission.user)
                new_value = values[category]
                if current is not None and new_value <= current.score:
                    continue
                ranking[submission.user] = _BestRecord(score=new_value, round=int(submission.round))
                self._trim(category)
                updated_categories.append(category)
        return updated_categories

    def _sorted_users(self, category: str) -> List[str]:
        ranking = self._rankings[category]
        return sorted(ranking.keys(), key=lambda user: (-ranking[user].score, user))

    def _trim(self, category: str) -> None:
        ranking = self._rankings[category]
        max_entries = int(self._config.max_entries)
        if len(ranking) <= max_entries:
            return
        for user in self._sorted_users(category)[max_entries:]:
            del ranking[user]

    def top(self, category: str, limit: Optional[int] = None) -> List[LeaderboardEntry]:
        normalized = normalize_category(category)
        effective_limit = int(limit) if limit is not None else int(self._config.default_limit)
        effective_limit = max(1, min(effective_limit, int(self._config.max_limit)))

        with self._lock:
            ranking = self._rankings[normalized]
            users = self._sorted_users(normalized)[:effective_limit]
            return [
                LeaderboardEntry(user=user, score=ranking[user].score, round=ranking[user].round, rank=rank)
                for rank, user in enumerate(users, start=1)
            ]

    def best(self, category: str, user: str) -> Optional[int]:
        normalized = normalize_category(category)
        with self._lock:
            record = self._rankings[normalized].get(str(user))
            return record.score if record is not None else None

    def clear(self) -> None:
        with self._lock:
            for ranking in self._rankings.values():
                ranking.clear()
