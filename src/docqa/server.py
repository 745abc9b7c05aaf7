"""
HTTP query endpoint.

Routes:
- POST /query - answer a question with citations
- GET /health - liveness check
"""

import argparse
import logging
from contextlib import asynccontextmanager
from typing import Awaitable, Callable, Sequence

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from docqa.app import Application
from docqa.errors import DocQAError
from docqa.utils.config import Settings, load_config
from docqa.utils.logging import configure_logging

logger = logging.getLogger(__name__)

ApplicationFactory = Callable[[], Awaitable[Application]]

GENERIC_ERROR = "Failed to answer the query"


class QueryRequest(BaseModel):
    query: str = Field(min_length=1)


class QueryResponse(BaseModel):
    answer: str


def create_app(
    settings: Settings | None = None,
    application_factory: ApplicationFactory | None = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        settings: Settings used to build the Application
        application_factory: Coroutine factory overriding Application.create

    Returns:
        FastAPI: Configured application instance
    """
    async def default_factory() -> Application:
        return await Application.create(settings)

    factory = application_factory or default_factory

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.application = await factory()
        logger.info("Query server started")
        yield
        logger.info("Query server stopped")

    app = FastAPI(
        title="docqa",
        description="Cited question answering over ingested PDF documents",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error on {request.url.path}")
        return JSONResponse(status_code=500, content={"error": "Something went wrong!"})

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/query", response_model=QueryResponse)
    async def query(body: QueryRequest, request: Request):
        application: Application = request.app.state.application
        try:
            result = await application.answer(body.query)
        except DocQAError:
            logger.exception("Query failed")
            return JSONResponse(status_code=500, content={"error": GENERIC_ERROR})

        return QueryResponse(answer=result.text)

    return app


def main(argv: Sequence[str] | None = None) -> None:
    """Console entry point for the query server."""
    parser = argparse.ArgumentParser(prog="docqa-serve", description="Run the docqa query server.")
    parser.add_argument("--config", default="docqa.yaml", help="Settings file (YAML or JSON)")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=3000)
    args = parser.parse_args(argv)

    settings = load_config(args.config)
    configure_logging(settings.log_level)

    uvicorn.run(create_app(settings), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
