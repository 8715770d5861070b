"""Testes da API de barras: criação, leitura, status, remoção e erros padronizados."""

import pytest
from httpx import AsyncClient


def _count_down(**overrides) -> dict:
    payload = {
        "title": "Viagem",
        "time_based_type": "count-down",
        "target_date": "2024-06-25T12:00:00Z",
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
async def test_create_bar(client: AsyncClient):
    resp = await client.post("/api/v1/bars/", json=_count_down())
    assert resp.status_code == 201
    data = resp.json()
    assert data["title"] == "Viagem"
    assert data["bar_type"] == "time-based"
    assert data["time_based_type"] == "count-down"
    assert data["current_value"] == 10
    assert data["progress"]["percentage"] == 0
    assert data["progress"]["remaining_text"] == "10 days"
    assert data["progress"]["elapsed_text"] == "0 minutes"


@pytest.mark.asyncio
async def test_create_bar_validation_errors(client: AsyncClient):
    resp = await client.post("/api/v1/bars/", json={
        "title": "Ao contrário",
        "time_based_type": "count-up",
        "start_date": "2024-06-01T00:00:00Z",
        "target_date": "2024-05-01T00:00:00Z",
    })
    assert resp.status_code == 422
    data = resp.json()
    assert data["error"] == "validation_error"
    assert data["detail"].startswith("Validation failed: ")
    codes = {e["code"] for e in data["errors"]}
    assert codes == {"INVALID_DATE_RANGE", "FUTURE_START_DATE"}

    listing = await client.get("/api/v1/bars/")
    assert listing.json() == []


@pytest.mark.asyncio
async def test_create_bar_bad_date_format(client: AsyncClient):
    resp = await client.post("/api/v1/bars/", json=_count_down(target_date="amanhã"))
    assert resp.status_code == 422
    [error] = resp.json()["errors"]
    assert error == {
        "field": "target_date",
        "message": "Target date is not a valid date",
        "code": "INVALID_DATE_FORMAT",
    }


@pytest.mark.asyncio
async def test_create_bar_unknown_type(client: AsyncClient):
    resp = await client.post("/api/v1/bars/", json=_count_down(time_based_type="sideways"))
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_get_and_list_bars(client: AsyncClient):
    created = await client.post("/api/v1/bars/", json={
        "title": "Chegada",
        "time_based_type": "arrival-date",
        "start_date": "2024-06-05T12:00:00Z",
        "target_date": "2024-06-25T12:00:00Z",
    })
    bar_id = created.json()["id"]

    resp = await client.get(f"/api/v1/bars/{bar_id}")
    assert resp.status_code == 200
    progress = resp.json()["progress"]
    assert progress["percentage"] == 50
    assert progress["elapsed_time"]["total_days"] == 10
    assert progress["is_overdue"] is False

    listing = await client.get("/api/v1/bars/")
    assert [b["id"] for b in listing.json()] == [bar_id]


@pytest.mark.asyncio
async def test_get_bar_not_found(client: AsyncClient):
    resp = await client.get("/api/v1/bars/nao-existe")
    assert resp.status_code == 404
    data = resp.json()
    assert data["error"] == "not_found"
    assert "request_id" in data


@pytest.mark.asyncio
async def test_update_status(client: AsyncClient):
    created = await client.post("/api/v1/bars/", json=_count_down())
    bar_id = created.json()["id"]

    resp = await client.post(f"/api/v1/bars/{bar_id}/status")
    assert resp.status_code == 200
    assert resp.json()["is_completed"] is False


@pytest.mark.asyncio
async def test_delete_bar(client: AsyncClient):
    created = await client.post("/api/v1/bars/", json=_count_down())
    bar_id = created.json()["id"]

    resp = await client.delete(f"/api/v1/bars/{bar_id}")
    assert resp.status_code == 204
    assert (await client.get(f"/api/v1/bars/{bar_id}")).status_code == 404
    assert (await client.delete(f"/api/v1/bars/{bar_id}")).status_code == 404


@pytest.mark.asyncio
async def test_request_id_is_echoed(client: AsyncClient):
    resp = await client.get("/api/v1/bars/", headers={"X-Request-ID": "abc12345"})
    assert resp.headers["X-Request-ID"] == "abc12345"
