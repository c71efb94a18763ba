from typing import List, Optional

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from feedrank.cache import MemoryResultCache
from feedrank.config import FeedSettings, load_settings
from feedrank.errors import ClientInputError, FeedQueryError
from feedrank.feed import FeedService
from feedrank.logging_config import configure_logging, get_logger
from feedrank.store import create_store

logger = get_logger(__name__)


def build_service(settings: Optional[FeedSettings] = None) -> FeedService:
    settings = settings or load_settings()
    return FeedService(create_store(settings.database_url), MemoryResultCache(), settings)


def create_app(service: Optional[FeedService] = None) -> FastAPI:
    """App factory; without `service` it builds one from settings and sets up logging."""
    if service is None:
        settings = load_settings()
        configure_logging(settings.log_level, settings.log_format)
        service = build_service(settings)

    app = FastAPI(title="feedrank API")
    app.state.feed = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=service.settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ClientInputError)
    async def client_input_error(request: Request, exc: ClientInputError):
        logger.info("client_input_rejected", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(FeedQueryError)
    async def feed_query_error(request: Request, exc: FeedQueryError):
        logger.error("request_failed", path=request.url.path, shape=exc.shape, error=str(exc))
        return JSONResponse(status_code=500, content={"error": str(exc)})

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/posts/tags")
    async def tags_route(
        request: Request,
        tag: Optional[List[str]] = Query(None),
        offset: int = Query(0, ge=0),
        limit: Optional[int] = Query(None, ge=0),
    ):
        return await request.app.state.feed.tags(tag, offset=offset, limit=limit)

    @app.get("/posts/trending")
    async def trending_route(request: Request):
        return await request.app.state.feed.trending()

    @app.get("/posts/top")
    async def top_route(request: Request, age: Optional[int] = Query(None, ge=0)):
        return await request.app.state.feed.top(age)

    @app.get("/posts/announcements")
    async def announcements_route(request: Request, age: Optional[int] = Query(None, ge=0)):
        return await request.app.state.feed.announcements(age)

    @app.get("/cache")
    def cache_snapshot(request: Request):
        return request.app.state.feed.cache.snapshot()

    @app.delete("/cache")
    def cache_clear(request: Request, prefix: Optional[str] = None):
        removed = request.app.state.feed.cache.clear(prefix)
        logger.info("cache_cleared", prefix=prefix, removed=removed)
        return {"removed": removed}

    return app
