import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import List

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse

import database
from activity_feed import (
    FEED_FILTERS,
    ActivityFeedService,
    ActivityItem,
    ActivitySummary,
    NewActivity,
    filter_activities,
    time_ago,
)
from badges import ProfileBadge, UserSnapshot, derive_badges
from config import (
    AUTH_TOKEN,
    DATABASE_FILE,
    DEFAULT_ACTIVITY_LIMIT,
    MAX_ACTIVITY_ITEMS,
    MIRROR_ENABLED,
    RECENT_QUERY_LIMIT,
)

logger = logging.getLogger(__name__)

if AUTH_TOKEN == "changeme":
    logger.warning("AUTH_TOKEN is still 'changeme'. Please set a secure token in your .env")


@asynccontextmanager
async def lifespan(app: FastAPI):
    database.init_db(DATABASE_FILE)
    yield


app = FastAPI(title="SparkFeed Activity Server", lifespan=lifespan)

# ----------------------
# Shared feed
# ----------------------
if MIRROR_ENABLED:
    feed = ActivityFeedService(mirror=database.SqliteActivityMirror(DATABASE_FILE))
else:
    feed = ActivityFeedService()


def get_feed() -> ActivityFeedService:
    return feed


def get_db_file() -> str:
    return DATABASE_FILE


# ----------------------
# Response models
# ----------------------
class ActivityView(ActivityItem):
    time_ago: str


def to_view(item: ActivityItem, now: datetime) -> ActivityView:
    return ActivityView(**item.model_dump(), time_ago=time_ago(item.timestamp, now))


# ----------------------
# Middleware to check Bearer token for every request
# ----------------------
@app.middleware("http")
async def check_auth_middleware(request: Request, call_next):
    if request.url.path == "/":
        return await call_next(request)
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return JSONResponse(status_code=401, content={"detail": "Missing or invalid Authorization header"})
    token = auth_header.split("Bearer ")[1]
    if token != AUTH_TOKEN:
        return JSONResponse(status_code=403, content={"detail": "Invalid token"})
    return await call_next(request)


@app.get("/")
def root():
    return {"status": "ok", "service": "SparkFeed activity server"}


# ----------------------
# Activity feed endpoints
# ----------------------
@app.post("/activity")
def record_activity(payload: NewActivity, service: ActivityFeedService = Depends(get_feed)):
    item = service.record(payload)
    return {"status": "recorded", "id": item.id}


@app.get("/activity/{user_id}", response_model=List[ActivityView])
def user_activity(
    user_id: str,
    limit: int = Query(DEFAULT_ACTIVITY_LIMIT, ge=1, le=MAX_ACTIVITY_ITEMS),
    filter: str = Query("all"),
    service: ActivityFeedService = Depends(get_feed),
):
    if filter not in FEED_FILTERS:
        raise HTTPException(status_code=400, detail=f"Unknown filter '{filter}'")
    items = filter_activities(service.get_user_activity(user_id, limit), filter)
    now = service.now()
    return [to_view(a, now) for a in items]


@app.get("/activity/{user_id}/views", response_model=List[ActivityView])
def recent_views(user_id: str, service: ActivityFeedService = Depends(get_feed)):
    items = service.get_recent_profile_views(user_id)
    now = service.now()
    return [to_view(a, now) for a in items]


@app.get("/activity/{user_id}/likes", response_model=List[ActivityView])
def recent_likes(user_id: str, service: ActivityFeedService = Depends(get_feed)):
    items = service.get_recent_likes(user_id)
    now = service.now()
    return [to_view(a, now) for a in items]


@app.get("/activity/{user_id}/summary", response_model=ActivitySummary)
def activity_summary(user_id: str, service: ActivityFeedService = Depends(get_feed)):
    return service.get_activity_summary(service.get_user_activity(user_id, RECENT_QUERY_LIMIT))


# ----------------------
# Badges and stored user snapshots
# ----------------------
@app.post("/badges", response_model=List[ProfileBadge])
def badges_for_snapshot(user: UserSnapshot):
    return derive_badges(user)


@app.put("/users/{user_id}", response_model=UserSnapshot)
def upsert_user(user_id: str, user: UserSnapshot, db_file: str = Depends(get_db_file)):
    user = user.model_copy(update={"id": user_id})
    database.add_or_update_user(user, db_file)
    return user


@app.get("/users/{user_id}/badges", response_model=List[ProfileBadge])
def badges_for_user(user_id: str, db_file: str = Depends(get_db_file)):
    user = database.get_user(user_id, db_file)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return derive_badges(user)


@app.delete("/users/{user_id}")
def remove_user(user_id: str, db_file: str = Depends(get_db_file)):
    database.delete_user(user_id, db_file)
    return {"status": "deleted"}
