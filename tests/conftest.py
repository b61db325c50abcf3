import pytest
from fastapi.testclient import TestClient

from hiscore.app import create_app
from hiscore.publisher import LeaderboardPublisher
from hiscore.store import ScoreStore
from hiscore.tokens import TokenCodec

ADMIN_PW = "s3cret"


@pytest.fixture()
def codec():
    return TokenCodec(b"0123456789abcdef")


@pytest.fixture()
def store():
    return ScoreStore()


@pytest.fixture()
def client(codec, store):
    app = create_app(
        store=store,
        codec=codec,
        admin_password=ADMIN_PW,
        publisher=LeaderboardPublisher(store, interval=0),
    )
    return TestClient(app)
