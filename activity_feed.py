# activity_feed.py
# Bounded in-memory activity log plus the read queries the feed screens use.
import logging
import threading
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict

from config import DEFAULT_ACTIVITY_LIMIT, MAX_ACTIVITY_ITEMS, RECENT_QUERY_LIMIT, RECENT_WINDOW

logger = logging.getLogger(__name__)


class ActivityKind(str, Enum):
    PROFILE_VIEW = "profile_view"
    LIKE = "like"
    SUPER_LIKE = "super_like"
    MATCH = "match"
    STORY_VIEW = "story_view"
    STORY_REACTION = "story_reaction"


LIKE_KINDS = {ActivityKind.LIKE, ActivityKind.SUPER_LIKE}
STORY_KINDS = {ActivityKind.STORY_VIEW, ActivityKind.STORY_REACTION}

FEED_FILTERS = {
    "all": None,
    "views": {ActivityKind.PROFILE_VIEW},
    "likes": LIKE_KINDS,
    "stories": STORY_KINDS,
}


class NewActivity(BaseModel):
    """What a caller reports: everything except id and timestamp."""

    type: ActivityKind
    actor_id: str
    actor_name: str
    actor_photo: str = "/placeholder.svg"
    target_id: str
    metadata: Optional[Dict[str, Any]] = None


class ActivityItem(NewActivity):
    model_config = ConfigDict(frozen=True)

    id: str
    timestamp: datetime


class ActivitySummary(BaseModel):
    total_views: int = 0
    total_likes: int = 0
    recent_views: int = 0
    recent_likes: int = 0
    story_views: int = 0
    story_reactions: int = 0


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def is_recent(timestamp: datetime, now: Optional[datetime] = None) -> bool:
    """True when ``timestamp`` falls within the last 24 hours (inclusive)."""
    now = _as_utc(now or utcnow())
    return now - _as_utc(timestamp) <= RECENT_WINDOW


def filter_activities(items: Iterable[ActivityItem], feed_filter: str = "all") -> List[ActivityItem]:
    """Apply one of the feed tab filters: all, views, likes, stories."""
    if feed_filter not in FEED_FILTERS:
        raise ValueError(f"unknown feed filter: {feed_filter}")
    kinds = FEED_FILTERS[feed_filter]
    if kinds is None:
        return list(items)
    return [a for a in items if a.type in kinds]


def time_ago(timestamp: datetime, now: Optional[datetime] = None) -> str:
    diff = _as_utc(now or utcnow()) - _as_utc(timestamp)
    minutes = int(diff.total_seconds() // 60)
    if minutes < 60:
        return f"{minutes}m ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h ago"
    return f"{hours // 24}d ago"


def _detached(items: Iterable[ActivityItem]) -> List[ActivityItem]:
    # stored events never leave the log; callers get deep copies
    return [a.model_copy(deep=True) for a in items]


# ----------------------
# Durable mirror capability
# ----------------------
class ActivityMirror:
    """Optional durable copy of the log.

    ``durable`` decides, once at service construction, whether reads are
    answered by the mirror or by memory.
    """

    durable = False

    def save(self, item: ActivityItem) -> None:
        raise NotImplementedError

    def load_for_target(self, target_id: str, limit: int) -> List[ActivityItem]:
        raise NotImplementedError


class NullMirror(ActivityMirror):
    def save(self, item: ActivityItem) -> None:
        return None

    def load_for_target(self, target_id: str, limit: int) -> List[ActivityItem]:
        return []


# ----------------------
# Service
# ----------------------
class ActivityFeedService:
    def __init__(
        self,
        mirror: Optional[ActivityMirror] = None,
        max_items: int = MAX_ACTIVITY_ITEMS,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._mirror = mirror or NullMirror()
        self._max_items = max_items
        self._clock = clock
        self._lock = threading.Lock()
        self._activities: List[ActivityItem] = []
        if self._mirror.durable:
            self._read = self._read_durable
        else:
            self._read = self._read_memory

    def now(self) -> datetime:
        return self._clock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._activities)

    def snapshot(self) -> List[ActivityItem]:
        """Copy of the whole log, newest first."""
        with self._lock:
            items = list(self._activities)
        return _detached(items)

    def record(self, activity: NewActivity) -> ActivityItem:
        item = ActivityItem(
            **activity.model_dump(),
            id=uuid.uuid4().hex,
            timestamp=self._clock(),
        )
        with self._lock:
            self._activities.insert(0, item)
            if len(self._activities) > self._max_items:
                del self._activities[self._max_items:]

        try:
            self._mirror.save(item)
        except Exception:
            logger.exception("Mirroring activity %s failed", item.id)
        return item.model_copy(deep=True)

    def get_user_activity(self, user_id: str, limit: int = DEFAULT_ACTIVITY_LIMIT) -> List[ActivityItem]:
        return self._read(user_id, max(limit, 0))

    def _read_memory(self, user_id: str, limit: int) -> List[ActivityItem]:
        with self._lock:
            matches = [a for a in self._activities if a.target_id == user_id][:limit]
        return _detached(matches)

    def _read_durable(self, user_id: str, limit: int) -> List[ActivityItem]:
        try:
            return self._mirror.load_for_target(user_id, limit)
        except Exception:
            logger.exception("Get user activity error for %s", user_id)
            return []

    def get_recent_profile_views(self, user_id: str) -> List[ActivityItem]:
        now = self._clock()
        return [
            a for a in self.get_user_activity(user_id, RECENT_QUERY_LIMIT)
            if a.type == ActivityKind.PROFILE_VIEW and is_recent(a.timestamp, now)
        ]

    def get_recent_likes(self, user_id: str) -> List[ActivityItem]:
        now = self._clock()
        return [
            a for a in self.get_user_activity(user_id, RECENT_QUERY_LIMIT)
            if a.type in LIKE_KINDS and is_recent(a.timestamp, now)
        ]

    def get_activity_summary(self, activities: Iterable[ActivityItem]) -> ActivitySummary:
        return summarize(activities, self._clock())


def summarize(activities: Iterable[ActivityItem], now: Optional[datetime] = None) -> ActivitySummary:
    now = now or utcnow()
    summary = ActivitySummary()
    for a in activities:
        recent = is_recent(a.timestamp, now)
        if a.type == ActivityKind.PROFILE_VIEW:
            summary.total_views += 1
            if recent:
                summary.recent_views += 1
        elif a.type in LIKE_KINDS:
            summary.total_likes += 1
            if recent:
                summary.recent_likes += 1
        elif a.type == ActivityKind.STORY_VIEW:
            summary.story_views += 1
        elif a.type == ActivityKind.STORY_REACTION:
            summary.story_reactions += 1
    return summary
