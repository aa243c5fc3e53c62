from contextlib import asynccontextmanager

from pbwatch.config import settings
from pbwatch.dependencies.fetcher import get_fetcher
from pbwatch.dependencies.pipeline import get_announcer
from pbwatch.dependencies.scheduler import start_scheduler, stop_scheduler
from pbwatch.dependencies.store import get_store
from pbwatch.helpers import bg_tasks, utcnow
from pbwatch.log import system_logger
from pbwatch.tasks import register_poll_job

from fastapi import FastAPI, Response
import sentry_sdk


@asynccontextmanager
async def lifespan(app: FastAPI):
    # === on startup ===
    register_poll_job()
    start_scheduler()

    yield

    # === on shutdown ===
    stop_scheduler()
    # let in-flight announcements finish before closing clients
    await bg_tasks.join(timeout=30)

    await get_fetcher().close()
    await get_announcer().close()
    await get_store().close()


desc = """osu-pb-watcher polls a user's recent osu! plays, detects new top-N personal bests
and announces each one to a Discord webhook.

The service exposes no API of its own. Every path except `/health` answers 404.
"""

if settings.sentry_dsn is not None:
    sentry_sdk.init(
        dsn=str(settings.sentry_dsn),
        send_default_pii=False,
        environment="production" if not settings.debug else "development",
    )

app = FastAPI(
    title="osu-pb-watcher",
    version="0.1.0",
    lifespan=lifespan,
    description=desc,
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)


@app.get("/health", include_in_schema=False)
async def health_check():
    return {"status": "ok", "timestamp": utcnow().isoformat()}


@app.api_route(
    "/{path:path}",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"],
    include_in_schema=False,
)
async def not_found(path: str):  # noqa: ARG001
    return Response(status_code=404)


if not settings.osu_client_id or not settings.osu_client_secret:
    system_logger("Config").opt(colors=True).warning(
        "<y>osu_client_id</y> or <y>osu_client_secret</y> is unset. Token requests will fail."
    )
if not settings.discord_webhook_url:
    system_logger("Config").opt(colors=True).warning(
        "<y>discord_webhook_url</y> is unset. Announcements will not be delivered."
    )

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_config=None,
        access_log=True,
    )
