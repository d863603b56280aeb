"""Slaughter tracking tests — frozen shrinkage estimates and receipt variance."""

from datetime import date

import pytest
from httpx import AsyncClient

from flockpak.middleware.exceptions import BusinessLogicError, ResourceNotFoundError
from flockpak.services.slaughter import (
    add_catch_record,
    add_slaughterhouse_record,
    create_slaughter_batch,
)


@pytest.mark.integration
@pytest.mark.asyncio
class TestCatchRecords:

    async def test_transport_time_defaults_to_settings(self, db_session):
        batch = await create_slaughter_batch(db_session, "flock-001", "SB-001")

        record = await add_catch_record(
            db_session, batch.id, date(2026, 1, 15), day_number=1,
            birds_caught=3000, average_weight_at_farm=1.850, feed_removal_hours=6,
        )

        assert record.transport_time_hours == 2.0
        assert record.gut_evacuation_percent == pytest.approx(2.25)
        assert record.total_shrinkage_percent == pytest.approx(5.65)
        assert record.estimated_weight_at_slaughterhouse == pytest.approx(1.745)

    async def test_transport_time_from_batch(self, db_session):
        batch = await create_slaughter_batch(
            db_session, "flock-001", "SB-002", transport_time_hours=1.0
        )

        record = await add_catch_record(
            db_session, batch.id, date(2026, 1, 15), day_number=1,
            birds_caught=3000, average_weight_at_farm=1.850, feed_removal_hours=6,
        )

        assert record.transport_time_hours == 1.0
        assert record.transport_percent == pytest.approx(0.85)

    async def test_request_transport_time_wins(self, db_session):
        batch = await create_slaughter_batch(
            db_session, "flock-001", "SB-003", transport_time_hours=1.0
        )

        record = await add_catch_record(
            db_session, batch.id, date(2026, 1, 15), day_number=1,
            birds_caught=3000, average_weight_at_farm=1.850, feed_removal_hours=6,
            transport_time_hours=0,
        )

        assert record.transport_percent == pytest.approx(0.7)

    async def test_unknown_batch(self, db_session):
        with pytest.raises(ResourceNotFoundError):
            await add_catch_record(
                db_session, "missing", date(2026, 1, 15), day_number=1,
                birds_caught=3000, average_weight_at_farm=1.850, feed_removal_hours=6,
            )


@pytest.mark.integration
@pytest.mark.asyncio
class TestSlaughterhouseRecords:

    async def test_variance_against_stored_estimate(self, db_session):
        batch = await create_slaughter_batch(db_session, "flock-001", "SB-010")
        record = await add_catch_record(
            db_session, batch.id, date(2026, 1, 15), day_number=1,
            birds_caught=3000, average_weight_at_farm=1.850, feed_removal_hours=6,
        )

        receipt = await add_slaughterhouse_record(db_session, record.id, 1.700, "RCV-1")

        assert receipt.variance == pytest.approx(0.045)
        assert receipt.variance_percent == pytest.approx(2.58)
        assert receipt.slaughterhouse_reference == "RCV-1"

    async def test_second_receipt_rejected(self, db_session):
        batch = await create_slaughter_batch(db_session, "flock-001", "SB-011")
        record = await add_catch_record(
            db_session, batch.id, date(2026, 1, 15), day_number=1,
            birds_caught=3000, average_weight_at_farm=1.850, feed_removal_hours=6,
        )
        await add_slaughterhouse_record(db_session, record.id, 1.700)

        with pytest.raises(BusinessLogicError) as exc_info:
            await add_slaughterhouse_record(db_session, record.id, 1.710)
        assert exc_info.value.status_code == 409

    async def test_unknown_catch_record(self, db_session):
        with pytest.raises(ResourceNotFoundError):
            await add_slaughterhouse_record(db_session, "missing", 1.7)


@pytest.mark.api
@pytest.mark.asyncio
class TestSlaughterEndpoints:

    async def _create_batch(self, client: AsyncClient, **overrides) -> dict:
        payload = {"flock_id": "flock-001", "batch_number": "SB-100"}
        payload.update(overrides)
        resp = await client.post("/api/slaughter/batches", json=payload)
        assert resp.status_code == 201
        return resp.json()

    async def _add_record(self, client: AsyncClient, batch_id: str, **overrides) -> dict:
        payload = {
            "catch_date": "2026-01-15",
            "day_number": 1,
            "birds_caught": 3000,
            "average_weight_at_farm": 1.850,
            "feed_removal_hours": 6,
        }
        payload.update(overrides)
        resp = await client.post(
            f"/api/slaughter/batches/{batch_id}/catch-records", json=payload
        )
        assert resp.status_code == 201
        return resp.json()

    async def test_full_reconciliation_flow(self, client: AsyncClient):
        batch = await self._create_batch(client)
        first = await self._add_record(client, batch["id"])
        await self._add_record(
            client, batch["id"], catch_date="2026-01-16", day_number=2,
            birds_caught=2000, average_weight_at_farm=1.950,
        )

        resp = await client.post(
            f"/api/slaughter/catch-records/{first['id']}/slaughterhouse",
            json={"actual_weight_at_slaughterhouse": 1.700},
        )
        assert resp.status_code == 201
        assert resp.json()["variance_percent"] == pytest.approx(2.58)

        resp = await client.get(f"/api/slaughter/batches/{batch['id']}")
        assert resp.status_code == 200
        summary = resp.json()
        assert summary["total_birds_caught"] == 5000
        assert summary["avg_farm_weight"] == pytest.approx(1.9)
        # Newest catch date first
        records = summary["catch_records"]
        assert [r["day_number"] for r in records] == [2, 1]
        assert records[0]["slaughterhouse_record"] is None
        assert records[1]["slaughterhouse_record"]["variance"] == pytest.approx(0.045)

    async def test_duplicate_receipt_conflict(self, client: AsyncClient):
        batch = await self._create_batch(client)
        record = await self._add_record(client, batch["id"])
        url = f"/api/slaughter/catch-records/{record['id']}/slaughterhouse"

        await client.post(url, json={"actual_weight_at_slaughterhouse": 1.700})
        resp = await client.post(url, json={"actual_weight_at_slaughterhouse": 1.700})

        assert resp.status_code == 409
        assert resp.json()["error"]["code"] == "DUPLICATE_RECEIPT"

    async def test_delete_catch_record_removes_receipt(self, client: AsyncClient):
        batch = await self._create_batch(client)
        record = await self._add_record(client, batch["id"])
        await client.post(
            f"/api/slaughter/catch-records/{record['id']}/slaughterhouse",
            json={"actual_weight_at_slaughterhouse": 1.700},
        )

        resp = await client.delete(f"/api/slaughter/catch-records/{record['id']}")
        assert resp.status_code == 204

        summary = (await client.get(f"/api/slaughter/batches/{batch['id']}")).json()
        assert summary["catch_records"] == []
        assert summary["avg_farm_weight"] == 0

    async def test_list_by_flock(self, client: AsyncClient):
        await self._create_batch(client, batch_number="SB-1")
        await self._create_batch(client, flock_id="flock-other", batch_number="SB-2")

        resp = await client.get("/api/slaughter/batches", params={"flock_id": "flock-001"})

        assert resp.status_code == 200
        assert [b["batch_number"] for b in resp.json()] == ["SB-1"]

    async def test_unknown_batch_summary(self, client: AsyncClient):
        resp = await client.get("/api/slaughter/batches/missing")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "RESOURCE_NOT_FOUND"
