# mcp_server.py
import asyncio
import logging
from typing import Any, Dict, Optional

import httpx
import uvicorn
from mcp.server.fastmcp import FastMCP

from config import API_HOST, API_PORT, AUTH_TOKEN

# Import FastAPI app (main.py must be importable from the same folder)
import main as main_app_module  # noqa: E402

app = main_app_module.app
API_BASE = f"http://localhost:{API_PORT}"  # FastAPI address used by bridge

logger = logging.getLogger(__name__)

# create MCP server (bridge)
mcp = FastMCP("SparkFeed MCP Bridge")


# helper to call your HTTP endpoints
async def call_api(method: str, endpoint: str, json=None, params=None) -> Any:
    url = f"{API_BASE}{endpoint}"
    headers = {"Authorization": f"Bearer {AUTH_TOKEN}"}
    async with httpx.AsyncClient(timeout=10.0) as client:
        if method.lower() == "post":
            resp = await client.post(url, json=json, headers=headers)
        elif method.lower() == "put":
            resp = await client.put(url, json=json, headers=headers)
        elif method.lower() == "get":
            resp = await client.get(url, params=params, headers=headers)
        else:
            raise ValueError("unsupported method")
    try:
        return resp.json()
    except ValueError:
        return {"status_code": resp.status_code, "text": resp.text}


# Define MCP tools that proxy to HTTP endpoints
@mcp.tool()
async def record_activity(
    type: str,
    actor_id: str,
    actor_name: str,
    target_id: str,
    actor_photo: str = "/placeholder.svg",
    metadata: Optional[Dict[str, Any]] = None,
) -> Any:
    """Record that actor did `type` (profile_view, like, super_like, match, story_view, story_reaction) to target."""
    payload = {
        "type": type,
        "actor_id": actor_id,
        "actor_name": actor_name,
        "actor_photo": actor_photo,
        "target_id": target_id,
        "metadata": metadata,
    }
    return await call_api("post", "/activity", json=payload)


@mcp.tool()
async def get_activity(user_id: str, limit: int = 50, filter: str = "all") -> Any:
    """Most recent activity aimed at a user; filter is all, views, likes or stories."""
    return await call_api("get", f"/activity/{user_id}", params={"limit": limit, "filter": filter})


@mcp.tool()
async def recent_profile_views(user_id: str) -> Any:
    return await call_api("get", f"/activity/{user_id}/views")


@mcp.tool()
async def recent_likes(user_id: str) -> Any:
    return await call_api("get", f"/activity/{user_id}/likes")


@mcp.tool()
async def activity_summary(user_id: str) -> Any:
    return await call_api("get", f"/activity/{user_id}/summary")


@mcp.tool()
async def save_user_profile(
    user_id: str,
    is_verified: bool = False,
    is_premium: bool = False,
    created_at: Optional[str] = None,
    last_active: Optional[str] = None,
) -> Any:
    """Store the profile facts badges are derived from. Dates are ISO 8601."""
    payload = {
        "is_verified": is_verified,
        "is_premium": is_premium,
        "created_at": created_at,
        "last_active": last_active,
    }
    return await call_api("put", f"/users/{user_id}", json=payload)


@mcp.tool()
async def profile_badges(user_id: str) -> Any:
    return await call_api("get", f"/users/{user_id}/badges")


# Run uvicorn programmatically + MCP server (stdio)
async def run_uvicorn():
    """Run FastAPI app (main.app) via uvicorn programmatically so both run in same process."""
    config = uvicorn.Config(app, host=API_HOST, port=API_PORT, log_level="info")
    server = uvicorn.Server(config)
    await server.serve()  # returns when server stops


async def main():
    logging.basicConfig(level=logging.INFO)
    # start uvicorn in a background task
    uvicorn_task = asyncio.create_task(run_uvicorn())
    # give uvicorn a moment to start before MCP begins handling calls
    await asyncio.sleep(0.5)

    logger.info("MCP bridge proxying to %s", API_BASE)
    # blocks until the stdio client disconnects
    await mcp.run_stdio_async()

    # If MCP stops, shut down uvicorn
    uvicorn_task.cancel()
    try:
        await uvicorn_task
    except asyncio.CancelledError:
        pass


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Shutting down.")
