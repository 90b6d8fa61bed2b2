import random
from datetime import datetime, timedelta, timezone

from badges import BadgeType, UserSnapshot, derive_badges

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def never():
    return 0.0


def always():
    return 0.99


def types(badges):
    return [b.type for b in badges]


def test_verified_and_recently_active():
    user = UserSnapshot(
        id="u1",
        is_verified=True,
        is_premium=False,
        created_at=NOW - timedelta(days=30),
        last_active=NOW - timedelta(hours=2),
    )
    for _ in range(20):
        assert types(derive_badges(user, rng=never, now=NOW)) == [
            BadgeType.VERIFIED,
            BadgeType.RECENTLY_ACTIVE,
        ]


def test_no_badges_when_nothing_holds():
    user = UserSnapshot(
        id="u1",
        created_at=NOW - timedelta(days=90),
        last_active=NOW - timedelta(days=3),
    )
    assert derive_badges(user, rng=never, now=NOW) == []


def test_missing_dates_never_qualify():
    assert derive_badges(UserSnapshot(id="u1"), rng=never, now=NOW) == []


def test_all_badges_in_fixed_order():
    user = UserSnapshot(
        id="u1",
        is_verified=True,
        is_premium=True,
        created_at=NOW - timedelta(days=7),
        last_active=NOW - timedelta(hours=24),
    )
    assert types(derive_badges(user, rng=always, now=NOW)) == [
        BadgeType.VERIFIED,
        BadgeType.PREMIUM,
        BadgeType.NEW_USER,
        BadgeType.RECENTLY_ACTIVE,
        BadgeType.POPULAR,
    ]


def test_badge_presentation_fields():
    user = UserSnapshot(id="u1", is_premium=True)
    (badge,) = derive_badges(user, rng=never, now=NOW)
    assert badge.id == "premium"
    assert badge.label == "Premium"
    assert badge.color == "text-purple-500"
    assert badge.description == "Premium member"


def test_popular_threshold_is_exclusive():
    user = UserSnapshot(id="u1")
    assert derive_badges(user, rng=lambda: 0.7, now=NOW) == []
    assert types(derive_badges(user, rng=lambda: 0.71, now=NOW)) == [BadgeType.POPULAR]


def test_naive_datetimes_are_treated_as_utc():
    user = UserSnapshot(id="u1", created_at=(NOW - timedelta(days=1)).replace(tzinfo=None))
    assert types(derive_badges(user, rng=never, now=NOW)) == [BadgeType.NEW_USER]


def test_popular_shows_for_about_thirty_percent():
    rng = random.Random(1234)
    user = UserSnapshot(id="u1")
    trials = 5000
    shown = sum(bool(derive_badges(user, rng=rng.random, now=NOW)) for _ in range(trials))
    assert 0.26 < shown / trials < 0.34
