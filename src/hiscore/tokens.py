"""Stateless play tokens.

A token binds the Unix time at which a play session began to an HMAC-SHA256
signature under a process-wide key, so a client cannot claim an earlier
start (and with it a longer elapsed time) than the server observed.

Nothing is stored server-side: validity is re-derived from the signature on
every check, and tokens never expire at this layer. The age check lives in
``hiscore.validator``.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
from typing import Final

from hiscore.misc.utils import unix_now
from hiscore.models import Token

KEY_SIZE: Final = 16  # bytes


def _encode_start(start: int) -> bytes:
    # 64-bit little-endian, two's complement; raises OverflowError outside int64
    return start.to_bytes(8, "little", signed=True)


class TokenCodec:
    """Mints and checks play tokens under a single immutable key."""

    def __init__(self, key: bytes) -> None:
        if not key:
            msg = "HMAC key must not be empty"
            raise ValueError(msg)
        self._key = bytes(key)

    @classmethod
    def generate(cls) -> TokenCodec:
        """Create a codec with a fresh random key.

        Errors from the OS randomness source propagate; callers treat them
        as fatal.
        """
        return cls(secrets.token_bytes(KEY_SIZE))

    def _sign(self, start: int) -> bytes:
        return hmac.new(self._key, _encode_start(start), hashlib.sha256).digest()

    def issue(self, now: int | None = None) -> Token:
        start = unix_now() if now is None else now
        signature = base64.b64encode(self._sign(start)).decode("ascii")
        return Token(start=start, hmac=signature)

    def verify(self, token: Token) -> bool:
        """Return True if ``token.hmac`` is the signature of ``token.start``.

        Malformed base64 and out-of-range start times fail verification
        instead of raising.
        """
        try:
            expected = self._sign(token.start)
            # binascii.Error and non-ASCII input are both ValueError
            signature = base64.b64decode(token.hmac, validate=True)
        except (OverflowError, ValueError):
            return False

        return hmac.compare_digest(signature, expected)
