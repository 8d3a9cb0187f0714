#!/usr/bin/env python3
"""
TalentScout API - FastAPI Application

Discovery jobs, ad-hoc candidate analysis and pipeline stats.

Usage:
    python main.py serve

Then open:
    - http://localhost:8080/docs - API Documentation (Swagger UI)
    - http://localhost:8080/redoc - Alternative API Documentation
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from core.app_context import AppContext
from database import database
from core.config_loader import AppConfig
from .config import get_config, set_config
from .exceptions import (
    ServiceException,
    service_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    general_exception_handler
)
from .routers import (
    discovery_router,
    analyze_router,
    stats_router,
)
from .routers.discovery import add_rate_limit_handlers

logger = logging.getLogger(__name__)


def create_app(ctx: Optional[AppContext] = None, config: Optional[AppConfig] = None) -> FastAPI:
    """
    Build the FastAPI app.

    Args:
        ctx: Pre-built context (tests). When None, one is built at startup
            and closed at shutdown.
        config: Configuration for the context built at startup; defaults
            to the registered configuration (config.yaml unless set).
    """
    if ctx is not None:
        config = ctx.config
    elif config is None:
        config = get_config()
    set_config(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_ctx = getattr(app.state, 'ctx', None) is None
        if owns_ctx:
            app.state.ctx = AppContext.build(config)
            await database.init_db()
        try:
            yield
        finally:
            if owns_ctx:
                await app.state.ctx.close()

    app = FastAPI(
        title="TalentScout API",
        description="Discover, score and track new model talent",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.ctx = ctx

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.web.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Configure rate limiting
    add_rate_limit_handlers(app)

    # Register exception handlers
    app.add_exception_handler(ServiceException, service_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    # Include routers
    app.include_router(discovery_router)
    app.include_router(analyze_router)
    app.include_router(stats_router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": "talentscout-api"}

    return app


def main(config: Optional[AppConfig] = None):
    """Run the web server with ``config`` (default: config.yaml)."""
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    if config is not None:
        set_config(config)
    config = get_config()

    logger.info(f"Starting TalentScout API on {config.web.host}:{config.web.port}")
    logger.info(f"API Docs: http://{config.web.host}:{config.web.port}/docs")

    uvicorn.run(
        create_app(config=config),
        host=config.web.host,
        port=config.web.port,
        reload=False,
        log_level="info"
    )


if __name__ == "__main__":
    main()
