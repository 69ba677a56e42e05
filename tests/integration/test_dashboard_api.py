"""Integration tests: dashboard, outstanding and finance endpoints."""

from decimal import Decimal

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_dashboard_summary(async_client: AsyncClient, api_base: str):
    resp = await async_client.get(f"{api_base}/dashboard")
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["success"] is True

    data = body["data"]
    assert data["total_students"] == 4
    assert Decimal(data["total_expenses"]) == Decimal("300")
    assert Decimal(data["total_extra_billing"]) == Decimal("40")
    assert Decimal(data["total_outstanding"]) == Decimal("345")
    assert Decimal(data["recomputed_outstanding"]) == Decimal("345")
    assert data["billing_cycle"] == "MONTHLY"
    assert data["unresolved_class_groups"] == ["s3"]
    assert Decimal(data["fee_collections"]["tuition_collected"]) == Decimal("130")
    assert Decimal(data["fee_collections"]["transport_collected"]) == Decimal("20")


@pytest.mark.asyncio
async def test_dashboard_follows_snapshot_changes(async_client: AsyncClient, api_base: str, store):
    first = (await async_client.get(f"{api_base}/dashboard")).json()["data"]

    store.replace("expenses", [{"id": "e9", "amount": 10}])
    second = (await async_client.get(f"{api_base}/dashboard")).json()["data"]

    assert Decimal(first["total_expenses"]) == Decimal("300")
    assert Decimal(second["total_expenses"]) == Decimal("10")
    assert second["snapshot_version"] == first["snapshot_version"] + 1


@pytest.mark.asyncio
async def test_fee_collections_for_another_month(async_client: AsyncClient, api_base: str):
    resp = await async_client.get(f"{api_base}/dashboard/fee-collections", params={"as_of": "2025-03-20"})
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["month_name"] == "March"
    # s1 period 3, s2 period 3 less the transport fee; s2 transport for March
    assert Decimal(data["tuition_collected"]) == Decimal("230")
    assert Decimal(data["transport_collected"]) == Decimal("20")


@pytest.mark.asyncio
async def test_fee_collections_rejects_bad_date(async_client: AsyncClient, api_base: str):
    resp = await async_client.get(f"{api_base}/dashboard/fee-collections", params={"as_of": "soon"})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_outstanding_report(async_client: AsyncClient, api_base: str):
    resp = await async_client.get(f"{api_base}/outstanding")
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["student_count"] == 2
    assert [s["student_id"] for s in data["students"]] == ["s2", "s4"]
    assert data["students"][0]["status"]["status"] == "Partial Payment"
    assert data["students"][1]["status"]["status"] == "Outstanding"


@pytest.mark.asyncio
async def test_precalculated_outstanding(async_client: AsyncClient, api_base: str):
    resp = await async_client.get(f"{api_base}/outstanding/precalculated")
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert Decimal(data["total_outstanding"]) == Decimal("345")
    assert data["students"][0]["student"]["fullName"] == "Kofi Boateng"
    assert data["students"][0]["class_group_name"] == "Senior"


@pytest.mark.asyncio
async def test_expenses_and_extra_billing(async_client: AsyncClient, api_base: str):
    expenses = (await async_client.get(f"{api_base}/expenses")).json()["data"]
    assert Decimal(expenses["total"]) == Decimal("300")
    assert expenses["reversed_count"] == 1
    assert expenses["expenses"][1]["isReversed"] is True

    extra = (await async_client.get(f"{api_base}/extra-billing")).json()["data"]
    assert Decimal(extra["total"]) == Decimal("40")
    assert extra["records"][0]["description"] == "Excursion"
