# app/api/server.py
from contextlib import asynccontextmanager
from typing import List, Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware

from app.api.schemas import ErrorDTO, HealthDTO
from app.core.builder import build_aggregator
from app.core.cache import ResultCache
from app.core.config import Settings, get_settings
from app.core.errors import InvalidQueryError
from app.core.logger import get_logger
from app.core.models.domain import Activity
from app.services.aggregator import ActivityAggregator
from app.services.query import build_query

load_dotenv()
logger = get_logger(__name__)


# --- Lifespan ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    logger.info(f"🏁 System Startup: cache TTL {settings.cache_ttl_seconds:g}s, upstream timeout {settings.upstream_timeout_seconds:g}s")
    cache = ResultCache(ttl_seconds=settings.cache_ttl_seconds)
    app.state.cache = cache
    app.state.aggregator = build_aggregator(settings, cache)
    yield
    cache.clear()
    logger.info("🛑 System Shutdown")


def get_aggregator(request: Request) -> ActivityAggregator:
    return request.app.state.aggregator


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="Developer Activity API", lifespan=lifespan)
    app.state.settings = settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.get(
        "/activities",
        response_model=List[Activity],
        response_model_exclude_none=True,
        responses={400: {"model": ErrorDTO}, 500: {"model": ErrorDTO}},
    )
    async def list_activities(
        source: Optional[str] = Query(default=None),
        limit: Optional[int] = Query(default=None),
        offset: Optional[int] = Query(default=None),
        from_date: Optional[str] = Query(default=None, alias="fromDate"),
        to_date: Optional[str] = Query(default=None, alias="toDate"),
        aggregator: ActivityAggregator = Depends(get_aggregator),
    ):
        """
        Merged GitHub + StackOverflow timeline, newest first.
        A failing upstream only removes its own activities from the answer.
        """
        try:
            query = build_query(source=source, limit=limit, offset=offset, from_date=from_date, to_date=to_date)
        except InvalidQueryError as ve:
            raise HTTPException(status_code=400, detail=str(ve))

        try:
            return await aggregator.activities(query)
        except Exception as e:
            logger.exception(f"Error in activities endpoint: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch activities")

    @app.get("/health", response_model=HealthDTO)
    def health(request: Request):
        aggregator: Optional[ActivityAggregator] = getattr(request.app.state, "aggregator", None)
        cache: Optional[ResultCache] = getattr(request.app.state, "cache", None)
        return HealthDTO(
            sources=[a.source for a in aggregator.adapters] if aggregator else [],
            cache_ttl_seconds=cache.ttl_seconds if cache else settings.cache_ttl_seconds,
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.api.server:app", host="0.0.0.0", port=get_settings().port)
