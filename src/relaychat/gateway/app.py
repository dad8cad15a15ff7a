"""FastAPI application relaying streamed completions to HTTP clients."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException

from ..errors import MissingInput, ProviderFailure
from ..llm import ChatMessage, LLMProvider, create_llm_provider
from ..llm import StreamingResponse as LLMStreamingResponse
from ..logging_config import get_logger
from .config import GatewaySettings, get_settings

logger = get_logger(__name__)

MISSING_QUESTION_ERROR = "No question provided"
GENERATION_ERROR = "Error generating response"

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}

router = APIRouter()


class AskRequest(BaseModel):
    """Body of ``POST /ask``."""

    question: str | None = None


def error_response(message: str, status_code: int = status.HTTP_400_BAD_REQUEST) -> JSONResponse:
    return JSONResponse(content={"error": message}, status_code=status_code)


async def _relay(first: str | None, stream: LLMStreamingResponse, question: str) -> AsyncIterator[str]:
    """Yield provider fragments verbatim, ending the body early on failure.

    Once bytes have been sent the status can no longer change, so a provider
    error only shortens the response.
    """
    sent = 0
    try:
        if first is not None:
            sent += 1
            yield first
        async for fragment in stream:
            sent += 1
            yield fragment
    except Exception:
        logger.exception("Provider failed after %d fragment(s); closing stream early", sent)
        return
    finally:
        await stream.aclose()
    logger.info(
        "Streamed %d fragment(s) for question of %d chars (usage: %s)", sent, len(question), stream.usage
    )


@router.post("/ask")
async def ask(payload: AskRequest, request: Request):
    """Stream the provider's answer to a question as chunked plain text."""
    question = payload.question
    if not question or not question.strip():
        raise MissingInput(MISSING_QUESTION_ERROR)

    provider: LLMProvider | None = request.app.state.provider
    if provider is None:
        raise ProviderFailure("No completion provider configured; set the provider API key")

    logger.info("Question received (%d chars), relaying to %s", len(question), provider.model)

    # Pull the first fragment before committing to a 200 so early provider
    # failures can still be reported as a 500.
    try:
        stream = await provider.chat_completion_stream([ChatMessage(role="user", content=question)])
        try:
            first: str | None = await anext(stream)
        except StopAsyncIteration:
            first = None
    except Exception as e:
        raise ProviderFailure(f"Provider failed before streaming began: {e}") from e

    return StreamingResponse(
        _relay(first, stream, question),
        media_type="text/plain; charset=utf-8",
        headers=STREAM_HEADERS,
    )


@router.get("/health")
async def health(request: Request) -> dict[str, str | None]:
    """Liveness probe used by clients to detect connectivity."""
    provider: LLMProvider | None = request.app.state.provider
    settings: GatewaySettings = request.app.state.settings
    return {
        "status": "ok",
        "provider": settings.llm_provider,
        "model": provider.model if provider is not None else None,
    }


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(MissingInput)
    async def _missing_input_handler(request: Request, exc: MissingInput):
        return error_response(MISSING_QUESTION_ERROR)

    @app.exception_handler(ProviderFailure)
    async def _provider_failure_handler(request: Request, exc: ProviderFailure):
        logger.error("%s", exc, exc_info=exc.__cause__)
        return error_response(GENERATION_ERROR, status.HTTP_500_INTERNAL_SERVER_ERROR)

    @app.exception_handler(RequestValidationError)
    async def _validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.debug("validation error on %s: %s", request.url.path, exc.errors())
        return error_response(MISSING_QUESTION_ERROR)

    @app.exception_handler(HTTPException)
    async def _http_exception_handler(request: Request, exc: HTTPException):
        logger.debug("http error %s on %s: %s", exc.status_code, request.url.path, exc.detail)
        detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        return error_response(detail, exc.status_code)

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s", request.url.path)
        return error_response("Internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR)


def create_app(
    provider: LLMProvider | None = None,
    settings: GatewaySettings | None = None,
) -> FastAPI:
    """Build the gateway application.

    Args:
        provider: Completion provider to relay from. When omitted, one is
            created from ``settings`` at startup and closed at shutdown.
        settings: Gateway settings (defaults to the environment)
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = None
        if app.state.provider is None:
            config = settings.provider_config()
            if config is None:
                logger.warning("API key for provider '%s' is not set", settings.llm_provider)
            else:
                owned = create_llm_provider(settings.llm_provider, **config)
                app.state.provider = owned
                logger.info("Relaying completions from %s (%s)", settings.llm_provider, owned.model)
        try:
            yield
        finally:
            if owned is not None:
                await owned.close()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.provider = provider
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(router)
    return app


__all__ = ["AskRequest", "create_app", "router"]
