"""Wire models for play tokens and submitted scores."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Token(BaseModel):
    """Server-attested start of a play session.

    ``hmac`` is the base64 HMAC-SHA256 of ``start``; see ``hiscore.tokens``.
    The default instance is the empty token kept on admitted scores.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    start: int = 0  # Unix seconds
    hmac: str = ""


class Score(BaseModel):
    """A finished game as submitted by the client.

    Missing fields decode to zero values and are left for the validator to
    reject, so every bad submission fails the same way. Strict: strings,
    booleans and fractional numbers are not coerced into the numeric fields.
    """

    model_config = ConfigDict(extra="ignore", frozen=True, strict=True)

    player_name: str = ""
    elapsed: float = Field(default=0.0, allow_inf_nan=False)  # seconds
    remaining_health: int = 0
    token: Token = Field(default_factory=Token)
