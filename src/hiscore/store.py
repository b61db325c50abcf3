"""In-memory leaderboard storage.

Thread Safety:
    Every access to the score list goes through ``ScoreStore._lock``.
    Ranking also prunes the list, so there is no lock-free read path.

Ranking:
    ``remaining_health`` descending, then ``elapsed`` ascending. Sorting is
    stable, so equal scores keep their submission order across calls.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Iterable

    from hiscore.models import Score

# Size of the published leaderboard
NUM_SCORES: Final = 20


def rank_key(score: Score) -> tuple[int, float]:
    return (-score.remaining_health, score.elapsed)


class ScoreStore:
    """Owns the list of admitted scores."""

    def __init__(self, scores: Iterable[Score] = ()) -> None:
        self._scores: list[Score] = list(scores)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._scores)

    def append(self, score: Score) -> None:
        """Add a score to the end; ranking is deferred to the next read."""
        with self._lock:
            self._scores.append(score)

    def rank_and_truncate(self, n: int = NUM_SCORES) -> list[Score]:
        """Sort the stored scores, drop everything past rank ``n``, return the rest.

        Destructive: pruned scores are gone for good. Returns a copy, so the
        caller never holds a reference into the store.
        """
        if n < 0:
            msg = f"n must be non-negative: {n}"
            raise ValueError(msg)

        with self._lock:
            self._scores.sort(key=rank_key)
            del self._scores[n:]
            return list(self._scores)

    def reset_all(self) -> None:
        with self._lock:
            self._scores = []
