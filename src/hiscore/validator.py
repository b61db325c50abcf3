"""Admission checks for submitted scores.

Checks run in order and stop at the first failure:
    1. token signature
    2. remaining_health >= 0
    3. 1 <= len(player_name) <= 3
    4. the token is at least ``elapsed`` seconds old

Only the lower bound on token age is enforced. A player may idle before
submitting, so a token much older than ``elapsed`` is accepted.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final

from hiscore.misc.utils import unix_now
from hiscore.models import Token

if TYPE_CHECKING:
    from collections.abc import Callable
    from logging import Logger

    from hiscore.models import Score
    from hiscore.store import ScoreStore
    from hiscore.tokens import TokenCodec

NAME_LEN_MIN: Final = 1
NAME_LEN_MAX: Final = 3


class ScoreRejected(ValueError):  # noqa: N818
    """Raised when a submitted score fails admission."""


class SubmissionValidator:
    """Checks submissions and appends admitted scores to the store."""

    codec: TokenCodec
    store: ScoreStore

    _clock: Callable[[], int]
    _log: Logger

    def __init__(self, codec: TokenCodec, store: ScoreStore, clock: Callable[[], int] = unix_now) -> None:
        self.codec = codec
        self.store = store
        self._clock = clock
        self._log = logging.getLogger(__name__)

    def check(self, score: Score) -> None:
        """Raise ``ScoreRejected`` if ``score`` may not be admitted."""
        if not self.codec.verify(score.token):
            msg = "invalid token signature"
            raise ScoreRejected(msg)

        if score.remaining_health < 0:
            msg = f"remaining_health is negative: {score.remaining_health}"
            raise ScoreRejected(msg)

        if not (NAME_LEN_MIN <= len(score.player_name) <= NAME_LEN_MAX):
            msg = f"player_name must be {NAME_LEN_MIN}-{NAME_LEN_MAX} characters: {score.player_name!r}"
            raise ScoreRejected(msg)

        # The token must have been minted at least `elapsed` seconds ago
        wall_clock_elapsed = float(self._clock() - score.token.start)
        if wall_clock_elapsed < score.elapsed:
            self._log.warning(
                "Received odd elapsed time from %r: %s (token says %s)",
                score.player_name,
                score.elapsed,
                wall_clock_elapsed,
            )
            msg = f"elapsed time exceeds token age: {score.elapsed} > {wall_clock_elapsed}"
            raise ScoreRejected(msg)

    def admit(self, score: Score) -> Score:
        """Validate ``score`` and store it without its token.

        Returns:
            The stored score

        Raises:
            ScoreRejected: on the first failed check; nothing is stored
        """
        self.check(score)
        admitted = score.model_copy(update={"token": Token()})
        self.store.append(admitted)
        return admitted
