"""Redis connection for the rate limiter.

The client lives on ``app.state.redis``; None means rate limiting is off.
"""

import redis.asyncio as aioredis
from fastapi import FastAPI


def connect_redis(app: FastAPI, url: str) -> aioredis.Redis | None:
    """Attach a pooled client for ``url`` to the app, or None when ``url`` is empty."""
    app.state.redis = None
    if url:
        app.state.redis = aioredis.from_url(  # type: ignore[no-untyped-call]
            url,
            encoding="utf-8",
            decode_responses=True,
            max_connections=50,
        )
    return app.state.redis


async def disconnect_redis(app: FastAPI) -> None:
    client: aioredis.Redis | None = getattr(app.state, "redis", None)
    if client is not None:
        await client.aclose()
    app.state.redis = None
