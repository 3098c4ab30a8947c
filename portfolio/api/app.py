# This file builds the FastAPI application and registers all API routers.
# It exists so startup behavior, middleware, and error handling are configured in one place.
# The app adds request IDs, timing headers, and Prometheus request metrics for operations visibility.
# Collection tables are created at startup when the database is reachable.

from __future__ import annotations

import logging
import time
import uuid

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.base import RequestResponseEndpoint

from portfolio.api.api_config import get_api_config
from portfolio.api.dependencies import get_document_store
from portfolio.api.error_handlers import register_error_handlers
from portfolio.api.rate_limits import setup_rate_limiting
from portfolio.api.routers.ai import router as ai_router
from portfolio.api.routers.auth import router as auth_router
from portfolio.api.routers.blog import router as blog_router
from portfolio.api.routers.clients import router as clients_router
from portfolio.api.routers.contact import router as contact_router
from portfolio.api.routers.health import router as health_router
from portfolio.api.routers.projects import router as projects_router
from portfolio.api.routers.search import router as search_router
from portfolio.api.routers.services import router as services_router
from portfolio.api.routers.team_members import router as team_members_router
from portfolio.api.routers.teams import router as teams_router
from portfolio.api.routers.testimonials import router as testimonials_router
from portfolio.api.routers.upload import router as upload_router
from portfolio.common.logging import configure_logging

logger = logging.getLogger(__name__)

API_HTTP_REQUESTS_TOTAL = Counter(
    "api_http_requests_total",
    "Total number of HTTP requests processed by the API.",
    ["method", "path", "status_code"],
)
API_HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "api_http_request_duration_seconds",
    "API request duration in seconds.",
    ["method", "path"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10),
)
API_HTTP_INFLIGHT_REQUESTS = Gauge(
    "api_http_inflight_requests",
    "Number of API requests currently being processed.",
    ["method", "path"],
)

RESOURCE_ROUTERS = (
    ("auth", auth_router),
    ("services", services_router),
    ("team-members", team_members_router),
    ("teams", teams_router),
    ("projects", projects_router),
    ("clients", clients_router),
    ("blog", blog_router),
    ("testimonials", testimonials_router),
    ("contact", contact_router),
    ("ai", ai_router),
    ("search", search_router),
    ("upload", upload_router),
)


def _route_label(request: Request) -> str:
    # templated path keeps metric label cardinality bounded
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


def create_app() -> FastAPI:
    """Create configured FastAPI application instance."""

    configure_logging()
    config = get_api_config()

    app = FastAPI(
        title=config.api_name,
        description=(
            "Versioned API for a company portfolio: services, projects, clients, team, blog, "
            "testimonials, contact inquiries, cross-entity search, and an AI assistant."
        ),
        version=config.app_version,
        openapi_tags=[
            {"name": "health", "description": "Service liveness, readiness, and version metadata."},
            {"name": "auth", "description": "Registration, login, and token refresh."},
            {"name": "services", "description": "Service catalog and usage rankings."},
            {"name": "projects", "description": "Project case studies, timeline, and analytics."},
            {"name": "clients", "description": "Client records, satisfaction, and retention."},
            {"name": "team-members", "description": "Team member profiles and skills."},
            {"name": "teams", "description": "Teams, performance, and workload."},
            {"name": "blog", "description": "Blog posts, engagement, and analytics."},
            {"name": "testimonials", "description": "Client testimonials and moderation."},
            {"name": "contact", "description": "Contact inquiries and follow-up workflow."},
            {"name": "search", "description": "Cross-entity search and autocomplete."},
            {"name": "ai", "description": "AI chatbot and recommendation assistant."},
            {"name": "upload", "description": "Media uploads and entity association."},
        ],
    )

    if config.allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.allowed_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.middleware("http")
    async def request_context_middleware(
        request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id

        method_label = request.method
        inflight_label = request.url.path
        started = time.perf_counter()
        status_code = 500
        API_HTTP_INFLIGHT_REQUESTS.labels(method=method_label, path=inflight_label).inc()
        try:
            response: Response = await call_next(request)
            status_code = response.status_code
            duration_ms = (time.perf_counter() - started) * 1000.0

            response.headers["x-request-id"] = request_id
            response.headers["x-response-time-ms"] = f"{duration_ms:.2f}"
            return response
        finally:
            duration_s = time.perf_counter() - started
            path_label = _route_label(request)
            API_HTTP_REQUESTS_TOTAL.labels(
                method=method_label,
                path=path_label,
                status_code=str(status_code),
            ).inc()
            API_HTTP_REQUEST_DURATION_SECONDS.labels(
                method=method_label,
                path=path_label,
            ).observe(duration_s)
            API_HTTP_INFLIGHT_REQUESTS.labels(method=method_label, path=inflight_label).dec()

    @app.get("/metrics", include_in_schema=False)
    def metrics() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.get(config.api_version_path, tags=["health"])
    def api_index() -> dict[str, object]:
        return {
            "message": f"{config.api_name} {config.api_version_path.rsplit('/', 1)[-1]}",
            "version": config.app_version,
            "endpoints": {name: f"{config.api_version_path}/{name}" for name, _ in RESOURCE_ROUTERS},
            "documentation": "/docs",
            "support": config.contact_email,
        }

    @app.on_event("startup")
    def startup_checks() -> None:
        store = get_document_store()
        try:
            store.create_all()
            app.state.db_connected_at_startup = store.can_connect()
        except SQLAlchemyError:
            logger.exception("Database unavailable at startup")
            app.state.db_connected_at_startup = False

    setup_rate_limiting(app, config)
    register_error_handlers(app)

    app.include_router(health_router)
    for _, router in RESOURCE_ROUTERS:
        app.include_router(router, prefix=config.api_version_path)

    if config.upload_base_url.startswith("/"):
        app.mount(
            config.upload_base_url,
            StaticFiles(directory=config.upload_path, check_dir=False),
            name="uploads",
        )

    return app


app = create_app()
