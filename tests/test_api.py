async def test_health_returns_service_and_version(api_client) -> None:
    resp = await api_client.get("/health")
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["status"] == "healthy"
    assert payload["service"] == "test-service"
    assert payload["version"] == "9.9.9"
    assert payload["timestamp"]


async def test_ready_without_dependencies_reports_ready(api_client) -> None:
    resp = await api_client.get("/ready")
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["status"] == "ready"
    assert payload["service"] == "test-service"
    assert payload["checks"] == {}


async def test_status_reports_runtime_info_and_request_id(api_client) -> None:
    resp = await api_client.get("/api/v1/status")
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["service"] == "test-service"
    assert payload["version"] == "9.9.9"
    assert payload["environment"] == "test"
    assert payload["uptime"] == 42.5
    assert payload["memory"] == {"rss": 1024, "vms": 2048}
    assert payload["pid"] == 4242
    assert payload["requestId"] == resp.headers["x-request-id"]


async def test_list_items_returns_seeded_sample(api_client) -> None:
    resp = await api_client.get("/api/v1/items")
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["success"] is True
    assert isinstance(payload["data"], list)
    assert payload["count"] == len(payload["data"]) == 3
    assert [item["name"] for item in payload["data"]] == ["Carbon Footprint", "Energy Usage", "Water Consumption"]
    assert payload["requestId"] == resp.headers["x-request-id"]


async def test_create_item_echoes_fields(api_client) -> None:
    resp = await api_client.post("/api/v1/items", json={"name": "Test Item", "value": 100.5, "unit": "kg"})
    assert resp.status_code == 201
    payload = resp.json()
    assert payload["success"] is True
    assert payload["data"]["name"] == "Test Item"
    assert payload["data"]["value"] == 100.5
    assert payload["data"]["unit"] == "kg"
    assert isinstance(payload["data"]["id"], int)
    assert payload["data"]["created"]
    assert payload["requestId"]


async def test_created_item_shows_up_in_list(api_client) -> None:
    created = await api_client.post("/api/v1/items", json={"name": "Solar Output", "value": 12, "unit": "kWh"})
    assert created.status_code == 201
    item_id = created.json()["data"]["id"]

    listed = (await api_client.get("/api/v1/items")).json()
    assert listed["count"] == 4
    assert listed["data"][-1]["id"] == item_id
    assert listed["data"][-1]["name"] == "Solar Output"


async def test_create_item_accepts_urlencoded_form(api_client) -> None:
    resp = await api_client.post("/api/v1/items", data={"name": "Waste", "value": "3.25", "unit": "kg"})
    assert resp.status_code == 201
    assert resp.json()["data"]["value"] == 3.25


async def test_create_item_accepts_zero_value(api_client) -> None:
    resp = await api_client.post("/api/v1/items", json={"name": "Offset", "value": 0, "unit": "kg CO2"})
    assert resp.status_code == 201
    assert resp.json()["data"]["value"] == 0


async def test_create_item_missing_fields_is_rejected(api_client) -> None:
    resp = await api_client.post("/api/v1/items", json={"name": "Test Item"})
    assert resp.status_code == 400
    payload = resp.json()
    assert payload["success"] is False
    assert payload["error"] == "Missing required fields: name, value, unit"
    assert payload["requestId"] == resp.headers["x-request-id"]


async def test_create_item_rejects_null_and_blank_fields(api_client) -> None:
    for body in (
        {"name": "", "value": 1, "unit": "kg"},
        {"name": "A", "value": None, "unit": "kg"},
        {"name": "A", "value": 1, "unit": "   "},
        {},
    ):
        resp = await api_client.post("/api/v1/items", json=body)
        assert resp.status_code == 400, body
        assert resp.json()["success"] is False


async def test_create_item_rejects_non_numeric_value(api_client) -> None:
    resp = await api_client.post("/api/v1/items", json={"name": "A", "value": "lots", "unit": "kg"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid fields: value"


async def test_create_item_rejects_malformed_json(api_client) -> None:
    resp = await api_client.post(
        "/api/v1/items", content=b"{not json", headers={"Content-Type": "application/json"}
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "Malformed JSON body"


async def test_create_item_rejects_json_array(api_client) -> None:
    resp = await api_client.post("/api/v1/items", json=[{"name": "A", "value": 1, "unit": "kg"}])
    assert resp.status_code == 400
    assert resp.json()["success"] is False


async def test_failed_create_does_not_store_anything(api_client) -> None:
    await api_client.post("/api/v1/items", json={"name": "Half"})
    listed = (await api_client.get("/api/v1/items")).json()
    assert listed["count"] == 3


async def test_unknown_route_returns_not_found_envelope(api_client) -> None:
    resp = await api_client.get("/non-existent-route")
    assert resp.status_code == 404
    payload = resp.json()
    assert payload["success"] is False
    assert payload["error"] == "Route not found"
    assert payload["requestId"] == resp.headers["x-request-id"]


async def test_unsupported_method_is_reported_as_route_not_found(api_client) -> None:
    resp = await api_client.delete("/api/v1/items")
    assert resp.status_code == 404
    assert resp.json()["error"] == "Route not found"


async def test_health_endpoints_answer_head_requests(api_client) -> None:
    for path in ("/health", "/ready"):
        resp = await api_client.head(path)
        assert resp.status_code == 200, path
        assert resp.headers.get("x-request-id")


async def test_openapi_reports_configured_version(api_client) -> None:
    resp = await api_client.get("/openapi.json")
    assert resp.status_code == 200
    assert resp.json()["info"]["version"] == "9.9.9"
