from datetime import datetime, timedelta, timezone

import pytest

from activity_feed import ActivityFeedService, ActivityKind, NewActivity


class FakeClock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def feed(clock):
    return ActivityFeedService(clock=clock)


@pytest.fixture
def make_activity():
    def _make(kind=ActivityKind.PROFILE_VIEW, actor="u1", target="u2", **extra):
        return NewActivity(
            type=kind,
            actor_id=actor,
            actor_name=f"User {actor}",
            actor_photo="/placeholder.svg",
            target_id=target,
            **extra,
        )

    return _make
