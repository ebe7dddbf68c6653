"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from food_logger.adapters.ollama_estimator import OllamaEstimator
from food_logger.adapters.openai_estimator import OpenAIEstimator
from food_logger.adapters.openrouter_estimator import OpenRouterEstimator
from food_logger.adapters.supabase_food_item_repository import (
    SupabaseFoodItemRepository,
)
from food_logger.adapters.supabase_food_log_repository import (
    SupabaseFoodLogRepository,
)
from food_logger.config import Settings
from food_logger.services.estimation import EstimationService
from food_logger.services.estimators import ConfigurationError, Estimator
from food_logger.services.executors import (
    EstimationExecutor,
    FifoExecutor,
    InlineExecutor,
)
from food_logger.services.foods import FoodCatalogService, FoodItemRepository
from food_logger.services.logs import FoodLogRepository, FoodLogService
from food_logger.services.matching import FoodMatcher

ProviderEstimator = OllamaEstimator | OpenAIEstimator | OpenRouterEstimator


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    food_repository: FoodItemRepository
    log_repository: FoodLogRepository
    estimator: Estimator
    matcher: FoodMatcher
    estimation_service: EstimationService
    executor: EstimationExecutor
    food_log_service: FoodLogService
    catalog_service: FoodCatalogService
    close_resources: Callable[[], Awaitable[None]]


def build_estimator(settings: Settings) -> ProviderEstimator:
    """Create the estimator selected by configuration."""
    if settings.estimator_provider == "openai":
        if not settings.openai_api_key:
            raise ConfigurationError("OPENAI_API_KEY not configured")
        return OpenAIEstimator.create(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            reasoning_effort=settings.openai_reasoning_effort,
            store=settings.openai_store,
        )
    if settings.estimator_provider == "openrouter":
        if not settings.openrouter_api_key:
            raise ConfigurationError("OPENROUTER_API_KEY not configured")
        return OpenRouterEstimator.create(
            api_key=settings.openrouter_api_key,
            model=settings.openrouter_model,
            base_url=settings.openrouter_base_url,
        )
    return OllamaEstimator.create(url=settings.ollama_url, model=settings.ollama_model)


def build_executor(
    settings: Settings,
    estimation_service: EstimationService,
    log_repository: FoodLogRepository,
) -> EstimationExecutor:
    """Create the background executor selected by configuration."""
    if settings.estimation_executor == "inline":
        return InlineExecutor(estimation_service)
    return FifoExecutor(
        estimation_service=estimation_service,
        log_repository=log_repository,
        recovery_interval_seconds=settings.recovery_interval_seconds,
        recovery_age_seconds=settings.recovery_age_seconds,
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    food_repository = SupabaseFoodItemRepository(supabase_client)
    log_repository = SupabaseFoodLogRepository(supabase_client)
    estimator = build_estimator(resolved_settings)
    matcher = FoodMatcher(
        repository=food_repository,
        similarity_threshold=resolved_settings.similarity_threshold,
    )
    estimation_service = EstimationService(
        log_repository=log_repository,
        food_repository=food_repository,
        matcher=matcher,
        estimator=estimator,
    )
    executor = build_executor(resolved_settings, estimation_service, log_repository)
    food_log_service = FoodLogService(
        repository=log_repository,
        matcher=matcher,
        executor=executor,
        default_timezone=resolved_settings.default_timezone,
    )
    catalog_service = FoodCatalogService(food_repository)

    async def close_resources() -> None:
        await executor.stop()
        await estimator.close()

    return AppContainer(
        settings=resolved_settings,
        food_repository=food_repository,
        log_repository=log_repository,
        estimator=estimator,
        matcher=matcher,
        estimation_service=estimation_service,
        executor=executor,
        food_log_service=food_log_service,
        catalog_service=catalog_service,
        close_resources=close_resources,
    )
