"""Tests for the HTTP API."""

from uuid import uuid4

from fastapi.testclient import TestClient

from food_logger.api.app import create_app
from food_logger.containers import AppContainer
from food_logger.services.estimators import EstimationFailed
from tests.conftest import (
    FakeEstimator,
    InMemoryFoodItemRepository,
    InMemoryFoodLogRepository,
)


def test_health(container: AppContainer) -> None:
    with TestClient(create_app(container)) as client:
        response = client.get("/health")

    assert response.json() == {"status": "ok"}


def test_log_food_miss_is_estimated(container: AppContainer) -> None:
    with TestClient(create_app(container)) as client:
        response = client.post("/api/log", json={"text": "200g chicken breast"})

    body = response.json()
    assert response.status_code == 200
    assert body["status"] == "ready"
    assert body["matched_by"] == "none"
    assert body["parsed"]["grams"] == 200
    assert body["parsed"]["normalized"] == "chicken breast"
    assert body["serving_used"] == "200g"
    assert round(body["log"]["kcal"]) == 330


def test_log_food_cache_hit(
    container: AppContainer,
    food_repository: InMemoryFoodItemRepository,
    estimator: FakeEstimator,
) -> None:
    food_repository.seed("chicken breast", 165, 31, 0, 3.6)

    with TestClient(create_app(container)) as client:
        response = client.post(
            "/api/log", json={"text": "chiken breast", "amount": 2, "tz": "UTC"}
        )

    body = response.json()
    assert body["status"] == "ready"
    assert body["matched_by"] == "fuzzy"
    assert body["similarity"] > 0.62
    assert round(body["log"]["kcal"]) == 330
    assert estimator.calls == []


def test_log_food_rejects_blank_text(container: AppContainer) -> None:
    with TestClient(create_app(container)) as client:
        response = client.post("/api/log", json={"text": "  "})

    assert response.status_code == 400
    assert response.json() == {"error": "Missing text"}


def test_log_food_rejects_quantity_without_name(container: AppContainer) -> None:
    with TestClient(create_app(container)) as client:
        response = client.post("/api/log", json={"text": "200g"})

    assert response.status_code == 400
    assert response.json() == {"error": "Missing food name"}


def test_log_food_rejects_unknown_timezone(container: AppContainer) -> None:
    with TestClient(create_app(container)) as client:
        response = client.post("/api/log", json={"text": "banana", "tz": "Nope/Nowhere"})

    assert response.status_code == 400
    assert "Unknown timezone" in response.json()["error"]


def test_failed_estimation_is_reported_on_log(
    container: AppContainer, estimator: FakeEstimator
) -> None:
    estimator.error = EstimationFailed("Ollama error 500: boom")

    with TestClient(create_app(container)) as client:
        logged = client.post("/api/log", json={"text": "mystery stew"}).json()
        fetched = client.get(f"/api/log/{logged['log']['id']}")

    assert logged["status"] == "error"
    assert fetched.json()["log"]["error_msg"] == "Ollama error 500: boom"


def test_get_unknown_log(container: AppContainer) -> None:
    with TestClient(create_app(container)) as client:
        response = client.get(f"/api/log/{uuid4()}")

    assert response.status_code == 404
    assert response.json() == {"error": "Log not found"}


def test_estimate_endpoint(
    container: AppContainer, log_repository: InMemoryFoodLogRepository
) -> None:
    pending = log_repository.add_pending("200g chicken breast", amount=200)

    with TestClient(create_app(container)) as client:
        response = client.post(f"/api/log/{pending.id}/estimate")
        missing = client.post(f"/api/log/{uuid4()}/estimate")

    assert response.status_code == 200
    assert response.json()["ok"] is True
    assert response.json()["log"]["status"] == "ready"
    assert missing.status_code == 404


def test_estimate_endpoint_reports_failure(
    container: AppContainer,
    log_repository: InMemoryFoodLogRepository,
    estimator: FakeEstimator,
) -> None:
    estimator.error = EstimationFailed("OpenAI error: rate limited")
    pending = log_repository.add_pending("mystery stew")

    with TestClient(create_app(container)) as client:
        response = client.post(f"/api/log/{pending.id}/estimate")

    assert response.status_code == 500
    assert response.json() == {"error": "OpenAI error: rate limited"}


def test_logs_today_returns_totals(
    container: AppContainer, food_repository: InMemoryFoodItemRepository
) -> None:
    food_repository.seed("banana", 89, 1.1, 23, 0.3, 2.6)

    with TestClient(create_app(container)) as client:
        client.post("/api/log", json={"text": "banana"})
        client.post("/api/log", json={"text": "200g banana"})
        response = client.get("/api/logs/today", params={"tz": "UTC"})

    body = response.json()
    assert len(body["logs"]) == 2
    assert round(body["totals"]["kcal"], 1) == 267.0
    assert round(body["totals"]["fiber_g"], 1) == 7.8


def test_suggest_and_serving_sizes(
    container: AppContainer, food_repository: InMemoryFoodItemRepository
) -> None:
    item = food_repository.seed("greek yogurt", 59, 10, 3.6, 0.4)

    with TestClient(create_app(container)) as client:
        suggestions = client.get("/api/suggest", params={"q": "Greek"}).json()
        empty = client.get("/api/suggest", params={"q": " "}).json()
        created = client.post(
            "/api/serving-sizes",
            json={"food_item_id": str(item.id), "name": "1 cup", "grams": 245},
        )
        invalid = client.post(
            "/api/serving-sizes",
            json={"food_item_id": str(item.id), "name": "1 cup", "grams": 0},
        )
        listed = client.get(
            "/api/serving-sizes", params={"food_item_id": str(item.id)}
        ).json()
        common = client.get("/api/serving-sizes/common").json()

    assert [food["normalized"] for food in suggestions["items"]] == ["greek yogurt"]
    assert empty == {"items": []}
    assert created.json()["serving_size"]["grams"] == 245
    assert invalid.status_code == 422
    assert [serving["name"] for serving in listed["serving_sizes"]] == ["1 cup"]
    assert "dairy" in common["categories"]
