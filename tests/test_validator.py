import logging

import pytest

from hiscore.models import Score, Token
from hiscore.validator import ScoreRejected, SubmissionValidator

NOW = 1_700_000_000


@pytest.fixture()
def validator(codec, store):
    return SubmissionValidator(codec, store, clock=lambda: NOW)


def mk(codec, *, name="AAA", elapsed=10.0, health=50, age=60) -> Score:
    return Score(player_name=name, elapsed=elapsed, remaining_health=health, token=codec.issue(now=NOW - age))


def test_admit_strips_token_and_appends(codec, store, validator):
    admitted = validator.admit(mk(codec))

    assert admitted.token == Token()
    assert store.rank_and_truncate() == [admitted]


def test_bad_signature_rejected(codec, store, validator):
    score = mk(codec).model_copy(update={"token": Token(start=NOW - 60, hmac="AAAA")})
    with pytest.raises(ScoreRejected, match="signature"):
        validator.admit(score)
    assert len(store) == 0


def test_missing_token_rejected(store, validator):
    with pytest.raises(ScoreRejected, match="signature"):
        validator.admit(Score(player_name="AAA", elapsed=0.0, remaining_health=1))
    assert len(store) == 0


def test_negative_health_rejected(codec, store, validator):
    with pytest.raises(ScoreRejected, match="remaining_health"):
        validator.admit(mk(codec, health=-1))
    assert len(store) == 0


def test_zero_health_accepted(codec, validator):
    validator.admit(mk(codec, health=0))


@pytest.mark.parametrize("name", ["", "ABCD", "LONGNAME"])
def test_bad_name_length_rejected(codec, store, validator, name):
    with pytest.raises(ScoreRejected, match="player_name"):
        validator.admit(mk(codec, name=name))
    assert len(store) == 0


@pytest.mark.parametrize("name", ["A", "AB", "ABC", "ÅÄÖ"])
def test_good_name_length_accepted(codec, store, validator, name):
    validator.admit(mk(codec, name=name))
    assert len(store) == 1


def test_elapsed_longer_than_token_age_rejected(codec, store, validator, caplog):
    with caplog.at_level(logging.WARNING, logger="hiscore.validator"), pytest.raises(ScoreRejected, match="elapsed"):
        validator.admit(mk(codec, elapsed=61.0, age=60))

    assert len(store) == 0
    assert "odd elapsed time" in caplog.text


def test_elapsed_equal_to_token_age_accepted(codec, validator):
    validator.admit(mk(codec, elapsed=60.0, age=60))


def test_idle_before_submit_accepted(codec, validator):
    # No upper bound on how stale the token may be
    validator.admit(mk(codec, elapsed=1.0, age=86_400))


def test_signature_checked_before_payload(store, validator):
    # Every other field is bad too; the token is reported first
    score = Score(player_name="", elapsed=1e9, remaining_health=-5, token=Token(start=NOW, hmac="bad"))
    with pytest.raises(ScoreRejected, match="signature"):
        validator.check(score)
