"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import UUID

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from food_logger.api.foods import router as foods_router
from food_logger.api.models import LogFoodRequest
from food_logger.app_logging import configure_logging
from food_logger.containers import AppContainer
from food_logger.domain.logs import FoodLog
from food_logger.domain.parsing import ParsedFood


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await app.state.container.executor.start()
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(foods_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/api/log", response_model=None)
    async def log_food(
        body: LogFoodRequest, request: Request
    ) -> dict[str, object] | JSONResponse:
        """Log a food; ready on a cache hit, pending while estimating."""
        state_container: AppContainer = request.app.state.container
        if not body.text.strip():
            return JSONResponse({"error": "Missing text"}, status_code=400)
        try:
            logged = await state_container.food_log_service.log_food(
                body.text, amount=body.amount, timezone=body.tz
            )
        except ValueError as exc:
            return JSONResponse({"error": str(exc)}, status_code=400)
        return {
            "status": logged.log.status.value,
            "log": _log_payload(logged.log),
            "matched_by": logged.match.method.value,
            "similarity": logged.match.score,
            "parsed": _parsed_payload(logged.parsed),
            "serving_used": logged.log.serving_unit,
        }

    @app.get("/api/log/{log_id}", response_model=None)
    async def get_log(log_id: UUID, request: Request) -> dict[str, object] | JSONResponse:
        """Return a single food log."""
        state_container: AppContainer = request.app.state.container
        log = state_container.food_log_service.get_log(log_id)
        if log is None:
            return JSONResponse({"error": "Log not found"}, status_code=404)
        return {"log": _log_payload(log)}

    @app.post("/api/log/{log_id}/estimate", response_model=None)
    async def estimate_log(
        log_id: UUID, request: Request
    ) -> dict[str, object] | JSONResponse:
        """Run estimation for a log in this request."""
        state_container: AppContainer = request.app.state.container
        try:
            log = await state_container.estimation_service.process(log_id)
        except Exception as exc:
            logger.exception("Estimation request failed for log %s", log_id)
            return JSONResponse(
                {"error": str(exc) or "Estimation failed"}, status_code=500
            )
        if log is None:
            return JSONResponse({"error": "Log not found"}, status_code=404)
        return {"ok": True, "log": _log_payload(log)}

    @app.get("/api/logs/today", response_model=None)
    async def logs_today(
        request: Request, tz: str | None = None
    ) -> dict[str, object] | JSONResponse:
        """Return today's resolved logs with their totals."""
        state_container: AppContainer = request.app.state.container
        try:
            logs = state_container.food_log_service.list_today(tz)
        except ValueError as exc:
            return JSONResponse({"error": str(exc)}, status_code=400)
        return {
            "logs": [_log_payload(log) for log in logs],
            "totals": _totals_payload(logs),
        }

    return app


def _log_payload(log: FoodLog) -> dict[str, object]:
    return {
        "id": str(log.id),
        "raw_text": log.raw_text,
        "amount": log.amount,
        "meal": log.meal.value,
        "status": log.status.value,
        "logged_at": log.logged_at.isoformat(),
        "serving_unit": log.serving_unit,
        "serving_grams": log.serving_grams,
        "kcal": log.kcal,
        "protein_g": log.protein_g,
        "carbs_g": log.carbs_g,
        "fat_g": log.fat_g,
        "fiber_g": log.fiber_g,
        "error_msg": log.error_msg,
        "food_item_id": str(log.food_item_id) if log.food_item_id else None,
    }


def _parsed_payload(parsed: ParsedFood) -> dict[str, object]:
    return {
        "cleaned_text": parsed.cleaned_text,
        "normalized": parsed.normalized,
        "amount": parsed.amount,
        "unit": parsed.unit.value,
        "grams": parsed.grams,
        "serving_text": parsed.serving_text,
    }


def _totals_payload(logs: list[FoodLog]) -> dict[str, float]:
    return {
        "kcal": sum(log.kcal or 0.0 for log in logs),
        "protein_g": sum(log.protein_g or 0.0 for log in logs),
        "carbs_g": sum(log.carbs_g or 0.0 for log in logs),
        "fat_g": sum(log.fat_g or 0.0 for log in logs),
        "fiber_g": sum(log.fiber_g or 0.0 for log in logs),
    }
