"""
FastAPI application for the playground.
"""
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI

from playground.api.conversations import router as conversations_router
from playground.api.human_input import router as human_input_router
from playground.api.profiles import router as profiles_router
from playground.api.providers import router as providers_router
from playground.api.turns import router as turns_router
from playground.context import PlaygroundContext
from playground.streaming.transport import HttpxChatTransport
from playground.utils.logging_utils import logger


def create_app(home: Optional[Path] = None, transport: Optional[HttpxChatTransport] = None) -> FastAPI:
    context = PlaygroundContext(home=home, transport=transport)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan context manager for startup and shutdown events."""
        logger.info(f"Playground API starting, data in {context.home}")
        yield
        await context.aclose()
        logger.info("Playground API shut down")

    app = FastAPI(
        title="AI Playground API",
        description="Multi-provider chat orchestration with tools and human-in-the-loop pauses",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.context = context

    app.include_router(providers_router)
    app.include_router(profiles_router)
    app.include_router(conversations_router)
    app.include_router(turns_router)
    app.include_router(human_input_router)

    @app.get("/api/health")
    async def health():
        return {"status": "ok"}

    return app
