"""Tests for the HTTP API."""

from fastapi.testclient import TestClient

from nutrilite.adapters.usda_client import UpstreamResponse
from nutrilite.api.app import create_app
from nutrilite.containers import AppContainer
from nutrilite.services.chat import ChatService
from nutrilite.services.usda_gateway import UsdaGateway
from tests.conftest import FakeChatClient, FakeUsdaClient

DAY = "2024-01-01"


def _client(container: AppContainer) -> TestClient:
    return TestClient(create_app(container))


def _add(client: TestClient, meal: str, description: str, kcal: float) -> dict:
    response = client.post(
        f"/api/today/items?date={DAY}",
        json={
            "meal": meal,
            "food": {"description": description, "grams": 100, "kcal": kcal},
        },
    )
    assert response.status_code == 200
    return response.json()


def test_health(container: AppContainer) -> None:
    response = _client(container).get("/health")

    assert response.status_code == 200
    assert response.json()["ok"] is True
    assert "time" in response.json()


def test_usda_search_relays_results(
    container: AppContainer, usda_client: FakeUsdaClient
) -> None:
    response = _client(container).post(
        "/api/usda/search", json={"query": "chicken", "pageSize": 5}
    )

    assert response.status_code == 200
    assert response.json()["foods"][0]["fdcId"] == 171077
    assert usda_client.search_calls == [("chicken", 5, None)]


def test_usda_search_validation(
    container: AppContainer, usda_client: FakeUsdaClient
) -> None:
    client = _client(container)

    missing = client.post("/api/usda/search", json={})
    short = client.post("/api/usda/search", json={"query": "a"})

    assert missing.status_code == 400
    assert missing.json() == {"error": "Missing query"}
    assert short.status_code == 200
    assert short.json() == {"foods": []}
    assert usda_client.search_calls == []


def test_usda_search_without_key(container: AppContainer) -> None:
    container.usda_gateway = UsdaGateway(client=None)

    response = _client(container).post("/api/usda/search", json={"query": "apple"})

    assert response.status_code == 500
    assert response.json() == {"error": "USDA_API_KEY is not set on the server."}


def test_usda_food_lookup(container: AppContainer, usda_client: FakeUsdaClient) -> None:
    client = _client(container)

    found = client.get("/api/usda/food/171077")
    missing = client.get("/api/usda/food/")

    assert found.status_code == 200
    assert found.json()["fdcId"] == 171077
    assert usda_client.food_calls == ["171077"]
    assert missing.status_code == 400
    assert missing.json() == {"error": "Missing fdcId"}


def test_usda_upstream_error_passthrough(container: AppContainer) -> None:
    container.usda_gateway = UsdaGateway(
        client=FakeUsdaClient(food_response=UpstreamResponse(404, "Not Found"))
    )

    response = _client(container).get("/api/usda/food/999")

    assert response.status_code == 404
    assert response.json() == {
        "error": "USDA API returned error",
        "status": 404,
        "details": "Not Found",
    }


def test_usda_timeout(container: AppContainer) -> None:
    container.usda_gateway = UsdaGateway(
        client=FakeUsdaClient(delay_seconds=1.0), timeout_seconds=0.01
    )

    response = _client(container).post("/api/usda/search", json={"query": "rice"})

    assert response.status_code == 504
    assert response.json()["error"] == "USDA search timed out."


def test_chat_statuses(container: AppContainer, chat_client: FakeChatClient) -> None:
    client = _client(container)

    ok = client.post("/api/chat", json={"message": "snack?"})
    blank = client.post("/api/chat", json={"message": "  "})
    invalid = client.post("/api/chat", json={"message": ["not", "text"]})

    assert ok.status_code == 200
    assert ok.json() == {"text": "Try Greek yogurt with berries."}
    assert blank.status_code == 400
    assert blank.json() == {"error": "Missing message", "text": ""}
    assert invalid.status_code == 400
    assert invalid.json()["text"] == ""
    assert chat_client.messages == ["snack?"]


def test_chat_without_key(container: AppContainer) -> None:
    container.chat_service = ChatService(client=None)

    response = _client(container).post("/api/chat", json={"message": "hi"})

    assert response.status_code == 501
    assert response.json() == {"text": ""}


def test_today_add_save_and_history(container: AppContainer) -> None:
    client = _client(container)

    _add(client, "Breakfast", "Eggs", 300)
    today = client.get(f"/api/today?date={DAY}").json()

    assert today["totals"]["calories"] == 300
    assert today["remaining"] == 1700
    assert today["percent"] == 15
    assert today["lastSavedAt"] is None

    saved = client.post(f"/api/today/save?date={DAY}")
    assert saved.status_code == 200
    body = saved.json()
    assert body["day"]["totals"]["calories"] == 300
    assert body["day"]["remaining"] == 1700
    assert body["today"]["lastSavedAt"] == body["day"]["savedAt"]

    days = client.get("/api/days").json()["days"]
    assert [day["dateKey"] for day in days] == [DAY]
    detail = client.get(f"/api/days/{DAY}").json()
    assert len(detail["weekBars"]) == 7
    assert detail["weekBars"][-1]["calories"] == 300
    exported = client.get("/api/days/export").json()
    assert set(exported[DAY]) >= {"dateKey", "mealLog", "totals", "savedAt"}

    history = client.get(
        "/api/history", params={"lastDays": 0, "q": "egg", "meal": "all"}
    ).json()
    assert history["keys"] == [DAY]


def test_today_add_by_fdc_id(container: AppContainer) -> None:
    client = _client(container)

    response = client.post(
        f"/api/today/items?date={DAY}",
        json={"meal": "lunch", "fdcId": 171077, "grams": 200},
    )

    assert response.status_code == 200
    lunch = response.json()["mealLog"]["Lunch"]
    assert lunch[0]["kcal"] == 330
    assert lunch[0]["protein"] == 62.0
    assert lunch[0]["fdcId"] == 171077


def test_today_add_by_fdc_id_relays_gateway_error(container: AppContainer) -> None:
    container.usda_gateway = UsdaGateway(client=None)

    response = _client(container).post(
        f"/api/today/items?date={DAY}",
        json={"meal": "Lunch", "fdcId": 171077, "grams": 200},
    )

    assert response.status_code == 500


def test_today_edits(container: AppContainer) -> None:
    client = _client(container)
    _add(client, "Snack", "Apple", 52)
    _add(client, "Snack", "Nuts", 180)

    removed = client.delete(f"/api/today/items/Snack/0?date={DAY}").json()
    assert [item["description"] for item in removed["mealLog"]["Snack"]] == ["Apple"]

    patched = client.patch(
        f"/api/today?date={DAY}",
        json={"waterCups": 4, "steps": 10000, "mode": "Bulk", "goal": 2600},
    ).json()
    assert patched["waterCups"] == 4
    assert patched["burned"] == 400
    assert patched["mode"] == "Bulk"
    assert patched["macroTargets"]["carbs"] == 280

    cleared = client.post(f"/api/today/clear?date={DAY}").json()
    assert cleared["mealLog"]["Snack"] == []
    assert cleared["goal"] == 2000


def test_today_rejects_bad_input(container: AppContainer) -> None:
    client = _client(container)

    bad_date = client.get("/api/today?date=2024-13-40")
    bad_meal = client.post(
        f"/api/today/items?date={DAY}",
        json={"meal": "Brunch", "food": {"description": "Toast", "grams": 50}},
    )
    no_food = client.post(f"/api/today/items?date={DAY}", json={"meal": "Lunch"})
    bad_patch = client.patch(f"/api/today?date={DAY}", json={"steps": -5})

    assert bad_date.status_code == 400
    assert bad_meal.status_code == 400
    assert no_food.status_code == 400
    assert bad_patch.status_code == 400


def test_delete_day_moves_selection(container: AppContainer) -> None:
    client = _client(container)
    for key in ("2024-01-01", "2024-01-03"):
        client.post(f"/api/today/save?date={key}")

    response = client.delete("/api/days/2024-01-03", params={"selected": "2024-01-03"})
    missing = client.delete("/api/days/2024-01-03")

    assert response.status_code == 200
    assert response.json() == {"deleted": "2024-01-03", "selected": "2024-01-01"}
    assert missing.status_code == 404
    assert client.get("/api/days/2024-01-03").status_code == 404


def test_analytics_and_body_metrics(container: AppContainer) -> None:
    client = _client(container)

    analytics = client.get("/api/analytics").json()
    assert len(analytics["last7"]) == 7
    assert analytics["hasToday"] is False

    metrics = client.post(
        "/api/body-metrics",
        json={"units": "Metric", "heightCm": 180, "weightKg": 80, "mode": "Maintain"},
    ).json()
    assert metrics["bmi"] == 24.7
    assert metrics["category"] == "Normal"
    assert metrics["suggestedCalories"] == 2200
    assert metrics["macroTargets"]["protein"] == 150


def test_offline_assistant(container: AppContainer) -> None:
    client = _client(container)
    _add(client, "Dinner", "Pasta", 600)

    response = client.post(
        "/api/assistant", json={"message": "calories left?", "date": DAY}
    ).json()

    assert "Remaining: 1400 kcal." in response["text"]
    assert len(response["questions"]) == 7


def test_cors_allows_configured_origin(container: AppContainer) -> None:
    response = _client(container).options(
        "/api/chat",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "POST",
        },
    )

    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"


def test_food_search_summaries(
    container: AppContainer, usda_client: FakeUsdaClient
) -> None:
    client = _client(container)

    response = client.get("/api/foods", params={"q": "chicken", "type": "SR Legacy"})
    short = client.get("/api/foods", params={"q": "c"})

    assert response.status_code == 200
    assert response.json() == {
        "foods": [
            {
                "fdcId": 171077,
                "description": "Chicken breast, cooked",
                "brandName": "",
                "dataType": "SR Legacy",
            }
        ]
    }
    assert usda_client.search_calls == [("chicken", 12, ["SR Legacy"])]
    assert short.json() == {"foods": []}


def test_food_search_relays_gateway_errors(container: AppContainer) -> None:
    container.usda_gateway = UsdaGateway(client=None)

    response = _client(container).get("/api/foods", params={"q": "apple"})

    assert response.status_code == 500


def test_viewing_past_day_keeps_unsaved_today_items(container: AppContainer) -> None:
    client = _client(container)
    _add(client, "Lunch", "Rice", 260)
    client.post(f"/api/today/save?date={DAY}")
    added = client.post(
        "/api/today/items",
        json={"meal": "Dinner", "food": {"description": "Curry", "grams": 300}},
    )
    assert added.status_code == 200

    past = client.get(f"/api/today?date={DAY}")
    client.post("/api/assistant", json={"message": "calories left?", "date": DAY})
    client.post(f"/api/today/clear?date={DAY}")
    today = client.get("/api/today").json()

    assert [item["description"] for item in past.json()["mealLog"]["Lunch"]] == [
        "Rice"
    ]
    assert [item["description"] for item in today["mealLog"]["Dinner"]] == ["Curry"]


def test_editing_past_day_is_rejected_while_today_has_a_draft(
    container: AppContainer,
) -> None:
    client = _client(container)
    client.patch("/api/today", json={"waterCups": 2})

    added = client.post(
        f"/api/today/items?date={DAY}",
        json={"meal": "Lunch", "food": {"description": "Soup", "grams": 250}},
    )
    removed = client.delete(f"/api/today/items/Lunch/0?date={DAY}")
    patched = client.patch(f"/api/today?date={DAY}", json={"steps": 100})

    assert added.status_code == 409
    assert removed.status_code == 409
    assert patched.status_code == 409
    assert client.get("/api/today").json()["waterCups"] == 2


def test_food_search_with_session_uses_scheduler(
    container: AppContainer, usda_client: FakeUsdaClient
) -> None:
    response = _client(container).get(
        "/api/foods", params={"q": "chicken", "session": "tab-1"}
    )

    assert response.status_code == 200
    assert response.json()["foods"][0]["fdcId"] == 171077
    assert len(container.food_searches) == 1
    assert usda_client.search_calls[0][0] == "chicken"
