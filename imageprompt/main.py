"""FastAPI entry point exposing the image relay REST API."""

from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from .config import Settings, get_settings
from .schemas import ErrorResponse, HealthResponse, ImageRequest, ImageResponse
from .service import ImageGenerationError, ImageRelayService, get_relay_service

logger = logging.getLogger(__name__)


app = FastAPI(title="Image Prompt Relay", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ImageGenerationError)
async def image_generation_error_handler(request: Request, exc: ImageGenerationError):
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(error=exc.message).model_dump(),
    )


@app.get("/health", response_model=HealthResponse, summary="Health Check Endpoint")
async def healthcheck(settings: Settings = Depends(get_settings)):
    return HealthResponse(
        status="ok",
        engine=settings.stability_engine_id,
        configured=bool(settings.stability_api_key.get_secret_value()),
    )


@app.post(
    "/generate-image",
    response_model=ImageResponse,
    responses={500: {"model": ErrorResponse}},
    summary="Generate images from a text prompt",
)
async def generate_image(
    payload: ImageRequest,
    service: ImageRelayService = Depends(get_relay_service),
):
    images = await run_in_threadpool(service.generate_images, payload.prompt)
    return ImageResponse(images=images)


def serve() -> None:  # pragma: no cover - convenience entry point
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    settings = get_settings()
    logger.info("Relay listening on port %s", settings.port)
    uvicorn.run("imageprompt.main:app", host=settings.host, port=settings.port)


__all__ = ["app", "serve"]


if __name__ == "__main__":  # pragma: no cover - convenience entry point
    serve()
