from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from src.ragq.api.dependencies import Services, build_services
from src.ragq.api.routers import documents, prompt, root
from src.ragq.utils.exceptions import QdrantConnectionError
from src.ragq.utils.logging_config import setup_logging
from src.ragq.utils.settings import settings

setup_logging(level=settings.app.log_level)
logger = logging.getLogger(__name__)


def create_app(services: Optional[Services] = None) -> FastAPI:
    """Build the API.

    With ``services`` given the app uses them as-is and leaves their
    lifecycle to the caller; otherwise they are built and closed by the
    lifespan.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("🚀 Starting ragq API server...")
        owned = services is None
        active = services or build_services(settings)

        try:
            await active.vector_store.ensure_collection()
        except QdrantConnectionError as e:
            logger.error("=" * 80)
            logger.error("❌ STARTUP FAILED: Cannot connect to Qdrant")
            logger.error("=" * 80)
            logger.error(str(e))
            logger.error("💡 Check QDRANT_URL in .env: QDRANT_URL=%s", settings.qdrant.url)
            logger.error("=" * 80)
            if owned:
                await active.aclose()
            raise

        app.state.services = active
        logger.info(f"✓ Collection: {active.vector_store.collection_name}")
        logger.info(f"✓ Ollama: {active.llm.host}")
        logger.info(f"✓ LLM: {active.llm.model_name}")
        logger.info(f"✓ Embeddings: {active.llm.embedding_model}")
        logger.info("✓ ragq API server is ready to accept requests!")

        yield

        logger.info("Shutting down ragq API server...")
        if owned:
            await active.aclose()

    app = FastAPI(
        title="ragq API",
        description="Retrieval-augmented prompting over Qdrant and Ollama",
        version="0.1.0",
        lifespan=lifespan,
    )
    if services is not None:
        app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()

        logger.info(f"📨 Incoming: {request.method} {request.url.path}")

        response = await call_next(request)

        process_time = (time.time() - start_time) * 1000
        logger.info(
            f"📤 Response: {request.method} {request.url.path} "
            f"Status={response.status_code} Time={process_time:.2f}ms"
        )

        return response

    app.include_router(root.router, prefix="/api")
    app.include_router(prompt.router, prefix="/api")
    app.include_router(documents.router, prefix="/api")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.ragq.api.main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.api.reload,
        log_level=settings.app.log_level.lower(),
        access_log=True
    )
