"""HTTP API for web app integration.

Exposes the same analysis, history, and comparison flows as the MCP server.
Run: vibes-radar-http
"""

import json
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from . import SERVICE_NAME, __version__
from .config import Settings, configure_logging
from .core.models import AnalysisRequest, Depth
from .db import close_db, create_engine, create_session_factory, init_db
from .service import DEFAULT_REPORT_LIMIT, BrandRadarService, build_service

logger = logging.getLogger(__name__)


class AnalyzeBody(BaseModel):
    brand_name: Optional[str] = None
    competitors: Optional[list[str]] = None
    depth: Depth = Depth.STANDARD


class CompareBody(BaseModel):
    brand1: Optional[str] = None
    brand2: Optional[str] = None


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def _bad_request(message: str) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": message})


async def _read_body(request: Request, model: type[BaseModel]) -> BaseModel:
    """Validate an optional JSON body. An empty body is treated as {}."""
    raw = await request.body()
    data = json.loads(raw) if raw.strip() else {}
    return model.model_validate(data)


def _parse_limit(raw: Optional[str]) -> int:
    """Lenient limit parsing: anything that is not a positive integer means the default."""
    try:
        limit = int(raw) if raw is not None else DEFAULT_REPORT_LIMIT
    except ValueError:
        return DEFAULT_REPORT_LIMIT
    return limit if limit >= 1 else DEFAULT_REPORT_LIMIT


def get_service(request: Request) -> BrandRadarService:
    return request.app.state.service


def create_app(service: Optional[BrandRadarService] = None) -> FastAPI:
    """Build the HTTP app. Without a service, one is wired from the environment at startup."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if service is not None:
            yield
            return

        settings = Settings.from_env()
        configure_logging(settings.log_level)
        engine = create_engine(settings.database_url)
        await init_db(engine)
        app.state.service = build_service(settings, create_session_factory(engine))
        logger.info("AI Vibes Radar HTTP server ready")
        try:
            yield
        finally:
            logger.info("Shutting down, closing database")
            await close_db(engine)

    app = FastAPI(title="AI Vibes Radar", version=__version__, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    if service is not None:
        app.state.service = service

    # ─── Health ──────────────────────────────────────────────────────────────

    @app.get("/health", tags=["System"])
    async def health():
        return {
            "status": "ok",
            "service": SERVICE_NAME,
            "version": __version__,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    # ─── Analyze ─────────────────────────────────────────────────────────────

    @app.post("/analyze", tags=["Analysis"])
    async def analyze(request: Request, service: BrandRadarService = Depends(get_service)):
        try:
            body = await _read_body(request, AnalyzeBody)
        except ValueError as exc:
            return _bad_request(f"Invalid request body: {exc}")
        if not body.brand_name or not body.brand_name.strip():
            return _bad_request("brand_name is required")
        try:
            analysis = AnalysisRequest(
                brand_name=body.brand_name,
                competitors=body.competitors or [],
                depth=body.depth,
            )
        except ValidationError as exc:
            return _bad_request(str(exc))

        try:
            result = await service.analyze(analysis)
        except Exception as exc:
            logger.error("Analyze error: %s", exc)
            return _error(500, str(exc))
        return {"success": True, "data": result.model_dump(mode="json", exclude_none=True)}

    # ─── Reports ─────────────────────────────────────────────────────────────

    @app.get("/reports/{brand_name}", tags=["History"])
    async def reports(
        brand_name: str,
        limit: Optional[str] = None,
        service: BrandRadarService = Depends(get_service),
    ):
        try:
            data = await service.get_reports(brand_name, _parse_limit(limit))
        except Exception as exc:
            logger.error("Reports error: %s", exc)
            return _error(500, str(exc))
        return {"success": True, "data": data.model_dump(mode="json", exclude_none=True)}

    # ─── Compare ─────────────────────────────────────────────────────────────

    @app.post("/compare", tags=["History"])
    async def compare(request: Request, service: BrandRadarService = Depends(get_service)):
        try:
            body = await _read_body(request, CompareBody)
        except ValueError as exc:
            return _bad_request(f"Invalid request body: {exc}")
        if not body.brand1 or not body.brand2:
            return _bad_request("brand1 and brand2 are required")
        try:
            comparison = await service.compare(body.brand1, body.brand2)
        except Exception as exc:
            logger.error("Compare error: %s", exc)
            return _error(500, str(exc))
        return {"success": True, "data": comparison.model_dump(mode="json", exclude_none=True)}

    return app


def main():
    """Entry point for the CLI command."""
    import uvicorn

    settings = Settings.from_env()
    configure_logging(settings.log_level)
    logger.info("Starting AI Vibes Radar HTTP server on %s:%d", settings.host, settings.port)
    uvicorn.run(create_app(), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
