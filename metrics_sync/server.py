"""Web app: the cron trigger endpoint and the public metrics page."""

import html
import secrets
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse

from shared.logger import get_logger

from .config import Settings
from .fetcher import GitHubClient
from .job import SyncJob
from .store import MetricsRecord, MetricsStore
from .throttle import FixedDelayThrottle

logger = get_logger(__name__)

SYNC_PATH = "/api/github-metrics-sync"

JobFactory = Callable[[], SyncJob]


def is_authorized(authorization: Optional[str], secret: Optional[str]) -> bool:
    """Check an Authorization header against ``Bearer <secret>``."""
    if not secret or not authorization:
        return False
    return secrets.compare_digest(authorization.encode(), f"Bearer {secret}".encode())


def build_job(settings: Settings, store: MetricsStore) -> SyncJob:
    """Build a job with a fresh API client for one invocation."""
    client = GitHubClient(token=settings.require_github_token(), base_url=settings.api_url)
    return SyncJob(
        client=client,
        store=store,
        throttle=FixedDelayThrottle(settings.request_delay),
        page_size=settings.page_size,
    )


def render_metrics_page(record: Optional[MetricsRecord]) -> str:
    """Render the public page for a record (or the empty state)."""
    if record is None:
        body = "<p>No GitHub metrics available.</p>"
    else:
        body = (
            "<ul>"
            f"<li><strong>{html.escape(str(record.commits or 0))}</strong> total commits!</li>"
            f"<li><strong>{html.escape(str(record.repos or 0))}</strong> total repos!</li>"
            "</ul>"
        )

    return (
        "<!DOCTYPE html>"
        "<html><head><meta charset=\"utf-8\"><title>GitHub Metrics</title></head>"
        f"<body><main class=\"metrics\">{body}</main></body></html>"
    )


def create_app(
    settings: Settings,
    store: Optional[MetricsStore] = None,
    job_factory: Optional[JobFactory] = None,
) -> FastAPI:
    """
    Create the FastAPI app.

    Args:
        settings: Runtime settings
        store: Metrics store (built from settings.database_url when omitted)
        job_factory: Builds a SyncJob per trigger (tests inject fakes)

    Returns:
        Configured FastAPI app
    """
    store = store or MetricsStore(settings.database_url)
    job_factory = job_factory or (lambda: build_job(settings, store))

    app = FastAPI(
        title="GitHub Metrics Sync",
        description="Caches commit and repository counts for a single GitHub account",
        version="0.1.0",
    )

    # Sync route so the blocking job runs in the threadpool
    @app.get(SYNC_PATH)
    def trigger_sync(request: Request):
        """Run the sync job. Requires ``Authorization: Bearer <CRON_SECRET>``."""
        if not is_authorized(request.headers.get("authorization"), settings.cron_secret):
            logger.warning("Rejected unauthorized sync trigger")
            return JSONResponse(content={"error": "Unauthorized"}, status_code=401)

        job = None
        try:
            job = job_factory()
            result = job.run()
        except Exception:
            logger.exception("GitHub Metrics Cron Job failed")
            return JSONResponse(
                content={"error": "GitHub Metrics Cron Job Failed"}, status_code=500
            )
        finally:
            if job is not None:
                job.client.close()

        return JSONResponse(content=result.to_payload(), status_code=200)

    @app.get("/", response_class=HTMLResponse)
    def metrics_page():
        """Public page showing the stored counts."""
        return HTMLResponse(content=render_metrics_page(store.read_metrics()))

    @app.get("/api/github-metrics")
    def metrics_json():
        """Stored counts as JSON."""
        record = store.read_metrics()
        if record is None:
            return JSONResponse(content={"error": "No GitHub metrics available"}, status_code=404)
        return JSONResponse(content={"commits": record.commits, "repos": record.repos})

    return app
