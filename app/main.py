import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.deps import shutdown_clients
from app.api.routes import analysis, followup, health, transcription
from app.core.config import settings, is_configured_key
from app.core.logging_config import setup_logging

setup_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Interview Helper started on port {settings.port}")
    logger.info(f"OpenRouter configured: {is_configured_key(settings.openrouter_api_key)}")
    logger.info(f"OpenAI configured: {is_configured_key(settings.openai_api_key)}")
    yield
    await shutdown_clients()


app = FastAPI(
    title="Interview Helper",
    description="Транскрибация и анализ интервью через Whisper и DeepSeek",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"success": False, "detail": f"Internal server error: {exc}"},
    )


app.include_router(transcription.router)
app.include_router(analysis.router)
app.include_router(followup.router)
app.include_router(health.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host=settings.host, port=settings.port)
