import logging
import os
import sys
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings
from .defaults import ROUTE_POLICIES
from .errors import InputValidationError
from .explorer import HiroExplorerClient
from .gateway import ChatCompletionClient
from .routes import router


logger = logging.getLogger(__name__)

MAX_LOG_LINE = 80


def configure_logging(level: str) -> None:
    # stdout so process managers capture it
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def _route_name(path: str) -> str:
    prefix = router.prefix + "/"
    return path[len(prefix):].strip("/") if path.startswith(prefix) else ""


def create_app(
    settings: Optional[Settings] = None,
    completion_client: Optional[ChatCompletionClient] = None,
    explorer: Optional[HiroExplorerClient] = None,
) -> FastAPI:
    """Build the API with explicitly constructed clients.

    Tests pass fakes for ``completion_client`` and ``explorer``; otherwise
    both are created from ``settings`` (or the environment).
    """
    settings = settings or Settings.from_env()
    completion_client = completion_client or ChatCompletionClient(settings)
    explorer = explorer or HiroExplorerClient(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if not settings.has_credentials:
            logger.error("DEEPSEEK_API_KEY or DEEPSEEK_API_URL is not set in environment variables.")
        yield
        await completion_client.close()
        await explorer.close()

    app = FastAPI(
        title="ClarityAI Analysis API",
        description="Analyze Clarity smart contracts and Stacks transactions with a hosted LLM.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.completion_client = completion_client
    app.state.explorer = explorer

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_api_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        if request.url.path.startswith("/api"):
            duration_ms = int((time.perf_counter() - start) * 1000)
            line = f"{request.method} {request.url.path} {response.status_code} in {duration_ms}ms"
            if len(line) > MAX_LOG_LINE:
                line = line[: MAX_LOG_LINE - 1] + "…"
            logger.info(line)
        return response

    @app.exception_handler(InputValidationError)
    async def handle_input_error(request: Request, exc: InputValidationError) -> JSONResponse:
        policy = ROUTE_POLICIES.get(exc.route) if exc.route else None
        body = policy.error_body(str(exc)) if policy else {"error": str(exc)}
        return JSONResponse(body, status_code=400)

    @app.exception_handler(RequestValidationError)
    async def handle_malformed_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.warning(f"Rejected request body for {request.url.path}: {exc.errors()}")
        policy = ROUTE_POLICIES.get(_route_name(request.url.path))
        body = policy.error_body("Invalid request body") if policy else {"error": "Invalid request body"}
        return JSONResponse(body, status_code=400)

    app.include_router(router)

    @app.get("/health")
    async def health() -> dict:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app


_settings = Settings.from_env()
configure_logging(_settings.log_level)
app = create_app(_settings)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("clarityai.main:app", host="0.0.0.0", port=int(os.getenv("PORT", 8000)), reload=False)
