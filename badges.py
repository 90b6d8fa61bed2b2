# badges.py
# Presentation badges derived from a point-in-time user snapshot.
import random
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, List, Optional

from pydantic import BaseModel

from config import NEW_USER_WINDOW, POPULAR_THRESHOLD, RECENTLY_ACTIVE_WINDOW


class BadgeType(str, Enum):
    VERIFIED = "verified"
    POPULAR = "popular"
    NEW_USER = "new_user"
    PREMIUM = "premium"
    TOP_PICK = "top_pick"
    RECENTLY_ACTIVE = "recently_active"


class ProfileBadge(BaseModel):
    id: str
    type: BadgeType
    label: str
    icon: str
    color: str
    description: str


class UserSnapshot(BaseModel):
    id: Optional[str] = None
    is_verified: bool = False
    is_premium: bool = False
    created_at: Optional[datetime] = None
    last_active: Optional[datetime] = None


def _badge(badge_type: BadgeType, label: str, icon: str, color: str, description: str) -> ProfileBadge:
    return ProfileBadge(
        id=badge_type.value,
        type=badge_type,
        label=label,
        icon=icon,
        color=color,
        description=description,
    )


BADGE_CATALOG = {
    BadgeType.VERIFIED: _badge(BadgeType.VERIFIED, "Verified", "✓", "text-blue-500", "Identity verified"),
    BadgeType.PREMIUM: _badge(BadgeType.PREMIUM, "Premium", "👑", "text-purple-500", "Premium member"),
    BadgeType.NEW_USER: _badge(BadgeType.NEW_USER, "New", "✨", "text-green-500", "New to the app"),
    BadgeType.RECENTLY_ACTIVE: _badge(
        BadgeType.RECENTLY_ACTIVE, "Active", "🟢", "text-green-500", "Recently active"
    ),
    BadgeType.POPULAR: _badge(BadgeType.POPULAR, "Popular", "🔥", "text-orange-500", "Popular in your area"),
    BadgeType.TOP_PICK: _badge(BadgeType.TOP_PICK, "Top Pick", "⭐", "text-yellow-500", "One of today's top picks"),
}


def _within(moment: Optional[datetime], window, now: datetime) -> bool:
    if moment is None:
        return False
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return now - moment <= window


def derive_badges(
    user: UserSnapshot,
    rng: Optional[Callable[[], float]] = None,
    now: Optional[datetime] = None,
) -> List[ProfileBadge]:
    """
    Return the badges `user` qualifies for, in a fixed order:
    verified, premium, new_user, recently_active, popular.

    `popular` is a stand-in for a real popularity score: it is shown when
    `rng()` exceeds POPULAR_THRESHOLD. Pass `rng` to pin the draw in tests.
    """
    rng = rng or random.random
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    earned = []
    if user.is_verified:
        earned.append(BadgeType.VERIFIED)
    if user.is_premium:
        earned.append(BadgeType.PREMIUM)
    if _within(user.created_at, NEW_USER_WINDOW, now):
        earned.append(BadgeType.NEW_USER)
    if _within(user.last_active, RECENTLY_ACTIVE_WINDOW, now):
        earned.append(BadgeType.RECENTLY_ACTIVE)
    # TODO: replace the coin flip with a score built from recent likes and matches
    if rng() > POPULAR_THRESHOLD:
        earned.append(BadgeType.POPULAR)

    return [BADGE_CATALOG[b] for b in earned]
