"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from nutrilite.api.models import ChatRequest, UsdaSearchRequest
from nutrilite.api.tracker import router as tracker_router
from nutrilite.app_logging import configure_logging
from nutrilite.config import parse_allowed_origins
from nutrilite.containers import AppContainer
from nutrilite.services.usda_gateway import GatewayResult

CHAT_PATH = "/api/chat"


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        try:
            await app.state.container.close_resources()
        except Exception:
            logger.exception("Failed to close upstream clients")

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=parse_allowed_origins(container.settings.allowed_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    app.include_router(tracker_router)

    @app.exception_handler(RequestValidationError)
    async def validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Report malformed bodies as 400 with a JSON envelope."""
        body: dict[str, object] = {
            "error": "Invalid request",
            "details": jsonable_encoder(exc.errors()),
        }
        if request.url.path == CHAT_PATH:
            body["text"] = ""
        return JSONResponse(status_code=400, content=body)

    @app.get("/health")
    async def health() -> dict[str, object]:
        """Simple health check endpoint."""
        return {"ok": True, "time": datetime.now(tz=UTC).isoformat()}

    @app.post("/api/usda/search")
    async def usda_search(
        request: Request, payload: UsdaSearchRequest | None = None
    ) -> JSONResponse:
        """Relay a food search to USDA FDC."""
        state_container: AppContainer = request.app.state.container
        body = payload or UsdaSearchRequest()
        result = await state_container.usda_gateway.search(
            body.query,
            page_size=body.pageSize,
            data_type=body.dataType,
        )
        return _gateway_response(result)

    @app.get("/api/usda/food/")
    async def usda_food_missing_id() -> JSONResponse:
        """Reject detail lookups without an id."""
        return JSONResponse(status_code=400, content={"error": "Missing fdcId"})

    @app.get("/api/usda/food/{fdc_id}")
    async def usda_food(fdc_id: str, request: Request) -> JSONResponse:
        """Relay a food detail lookup to USDA FDC."""
        state_container: AppContainer = request.app.state.container
        result = await state_container.usda_gateway.get_food(fdc_id)
        return _gateway_response(result)

    @app.post(CHAT_PATH)
    async def chat(
        request: Request, payload: ChatRequest | None = None
    ) -> JSONResponse:
        """Answer a diet question through the AI backend."""
        state_container: AppContainer = request.app.state.container
        reply = await state_container.chat_service.reply(
            payload.message if payload else None
        )
        return JSONResponse(status_code=reply.status_code, content=reply.body)

    return app


def _gateway_response(result: GatewayResult) -> JSONResponse:
    return JSONResponse(status_code=result.status_code, content=result.body)
