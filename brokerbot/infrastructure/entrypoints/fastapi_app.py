"""
FastAPI app for the hosting platform's health checks and the status page.

    GET /                  → 200 "OK"
    GET /statusz, /status  → uptime, counters, build info, cached price feed

Served by uvicorn in a background thread of the bot process; see bot_main.py.
"""

from datetime import timedelta

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from brokerbot.application.services.price_feed_cache import PriceFeedCache
from brokerbot.application.services.status_tracker import StatusTracker


def render_status(status: StatusTracker, price_feeds: PriceFeedCache) -> str:
    snap = status.snapshot()
    updated = price_feeds.last_updated
    lines = [
        f"uptime: {timedelta(seconds=int(snap.uptime_seconds))}",
        f"version: {snap.build_version}",
        f"build time: {snap.build_time}",
        f"requests: {snap.requests}",
        f"successes: {snap.successes}",
        f"errors: {snap.errors}",
        f"price feed updated: {updated.isoformat() if updated else 'never'}",
    ]
    for pair, entry in sorted(price_feeds.snapshot().items()):
        lines.append(f"{pair}: {entry.price} ({entry.change_percent})")
    return "\n".join(lines) + "\n"


def create_app(status: StatusTracker, price_feeds: PriceFeedCache) -> FastAPI:
    app = FastAPI(title="BrokerBot")

    @app.get("/", response_class=PlainTextResponse)
    async def health():
        return "OK"

    # Some hosting front-ends reserve /statusz.
    @app.get("/statusz", response_class=PlainTextResponse)
    @app.get("/status", response_class=PlainTextResponse)
    async def statusz():
        return render_status(status, price_feeds)

    return app
