"""Server-Sent Events publication of the leaderboard.

Each subscriber gets its own generator ticking every ``interval`` seconds.
There is no shared broadcast buffer: every tick of every subscriber runs its
own ``rank_and_truncate``, which is idempotent once the store holds at most
``limit`` scores.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Final

from hiscore.store import NUM_SCORES

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable, Sequence

    from hiscore.models import Score
    from hiscore.store import ScoreStore

    type DisconnectCheck = Callable[[], Awaitable[bool]]

TICK_INTERVAL: Final = 0.5  # seconds


def encode_frame(scores: Sequence[Score]) -> str:
    """Encode scores as a single compact ``data:`` event."""
    payload = json.dumps([s.model_dump(mode="json") for s in scores], separators=(",", ":"))
    return f"data: {payload}\n\n"


class LeaderboardPublisher:
    """Streams the top scores to any number of independent subscribers."""

    def __init__(self, store: ScoreStore, *, interval: float = TICK_INTERVAL, limit: int = NUM_SCORES) -> None:
        self.store = store
        self.interval = interval
        self.limit = limit
        self._subscribers = 0
        self._log = logging.getLogger(__name__)

    @property
    def subscribers(self) -> int:
        return self._subscribers

    async def frames(self, is_disconnected: DisconnectCheck) -> AsyncIterator[str]:
        """Yield one leaderboard frame per tick until the subscriber goes away.

        Cancellation (client disconnect or server shutdown) interrupts the
        sleep and ends the generator. An encoding failure ends only this
        subscriber's stream.
        """
        self._subscribers += 1
        self._log.debug("Subscriber joined (%d active)", self._subscribers)

        try:
            while True:
                await asyncio.sleep(self.interval)
                if await is_disconnected():
                    return

                scores = self.store.rank_and_truncate(self.limit)
                try:
                    frame = encode_frame(scores)
                except (TypeError, ValueError):
                    self._log.exception("Could not encode leaderboard, closing stream")
                    return

                yield frame
        finally:
            self._subscribers -= 1
            self._log.debug("Subscriber left (%d active)", self._subscribers)
