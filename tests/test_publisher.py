import asyncio
import json

from hiscore.models import Score
from hiscore.publisher import LeaderboardPublisher, encode_frame
from hiscore.store import ScoreStore


def collect(publisher: LeaderboardPublisher, n_frames: int) -> list[str]:
    """Run one subscriber that disconnects after ``n_frames`` frames."""
    checks = 0

    async def is_disconnected() -> bool:
        nonlocal checks
        checks += 1
        return checks > n_frames

    async def run() -> list[str]:
        return [frame async for frame in publisher.frames(is_disconnected)]

    return asyncio.run(run())


def parse(frame: str) -> list[dict]:
    assert frame.startswith("data: ")
    assert frame.endswith("\n\n")
    return json.loads(frame.removeprefix("data: "))


def test_encode_frame_is_compact_sse():
    frame = encode_frame([Score(player_name="AAA", elapsed=1.5, remaining_health=3)])
    assert frame == (
        'data: [{"player_name":"AAA","elapsed":1.5,"remaining_health":3,"token":{"start":0,"hmac":""}}]\n\n'
    )


def test_encode_frame_empty():
    assert encode_frame([]) == "data: []\n\n"


def test_frames_until_disconnect():
    store = ScoreStore([Score(player_name="BBB", elapsed=10.0, remaining_health=80)])
    publisher = LeaderboardPublisher(store, interval=0)

    frames = collect(publisher, 3)

    assert len(frames) == 3
    assert all(parse(f)[0]["player_name"] == "BBB" for f in frames)
    assert publisher.subscribers == 0


def test_frames_rank_and_truncate_store():
    store = ScoreStore(Score(player_name="P", elapsed=float(i), remaining_health=i) for i in range(10))
    publisher = LeaderboardPublisher(store, interval=0, limit=4)

    (frame,) = collect(publisher, 1)

    assert [s["remaining_health"] for s in parse(frame)] == [9, 8, 7, 6]
    assert len(store) == 4


def test_frames_reflect_new_scores():
    store = ScoreStore()
    publisher = LeaderboardPublisher(store, interval=0)
    checks = 0

    async def is_disconnected() -> bool:
        nonlocal checks
        checks += 1
        if checks == 2:
            store.append(Score(player_name="NEW", elapsed=1.0, remaining_health=1))
        return checks > 2

    async def run() -> list[str]:
        return [frame async for frame in publisher.frames(is_disconnected)]

    first, second = asyncio.run(run())
    assert parse(first) == []
    assert parse(second)[0]["player_name"] == "NEW"


def test_cancel_stops_subscriber():
    store = ScoreStore()
    publisher = LeaderboardPublisher(store, interval=60)

    async def never() -> bool:
        return False

    async def run() -> None:
        async def first_frame() -> str:
            return await anext(publisher.frames(never))

        task = asyncio.create_task(first_frame())
        await asyncio.sleep(0)
        assert publisher.subscribers == 1
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)

    asyncio.run(run())
    assert publisher.subscribers == 0


def test_independent_subscribers():
    store = ScoreStore([Score(player_name="A", elapsed=1.0, remaining_health=1)])
    publisher = LeaderboardPublisher(store, interval=0)

    async def subscriber(n: int) -> list[str]:
        seen = 0

        async def is_disconnected() -> bool:
            nonlocal seen
            seen += 1
            return seen > n

        return [frame async for frame in publisher.frames(is_disconnected)]

    async def run() -> list[list[str]]:
        return await asyncio.gather(subscriber(2), subscriber(5))

    short, long = asyncio.run(run())
    assert len(short) == 2
    assert len(long) == 5
    assert publisher.subscribers == 0
