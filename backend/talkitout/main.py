# talkitout/main.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from slowapi.middleware import SlowAPIMiddleware

from .config import Settings
from .db import Base, make_engine, make_sessionmaker
from .errors import register_error_handlers
from .limiter import limiter
from .logging_config import configure_logging
from .routers import admin, chat, checkins, metrics, pomodoro, privacy, risk, tasks, users

logger = logging.getLogger("talkitout")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    app = FastAPI(title="TalkItOut")
    app.state.settings = settings

    # -------------------------------------------------------------------------
    # Database
    # -------------------------------------------------------------------------
    engine = make_engine(settings.database_url)
    Base.metadata.create_all(bind=engine)
    app.state.engine = engine
    app.state.session_factory = make_sessionmaker(engine)

    # -------------------------------------------------------------------------
    # Rate limiting, CORS, headers
    # -------------------------------------------------------------------------
    limiter.enabled = settings.rate_limit_enabled
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response

    register_error_handlers(app)

    for module in (chat, risk, checkins, tasks, pomodoro, users, metrics, privacy, admin):
        app.include_router(module.router)

    if not settings.llm_enabled:
        logger.warning("OPENAI_API_KEY not set; chat replies will use the offline fallback")
    logger.info("TalkItOut API ready (env=%s)", settings.environment)
    return app

