"""HTTP endpoint tests — routing, request validation and error envelopes."""

import pytest
from httpx import AsyncClient


def _crate_payload(**overrides) -> dict:
    payload = {
        "name": "Standard broiler crate",
        "length_cm": 96.0,
        "width_cm": 57.0,
        "height_cm": 27.0,
        "tare_weight_kg": 3.2,
    }
    payload.update(overrides)
    return payload


def _batch_payload(crate_type_id: str, **overrides) -> dict:
    payload = {
        "crate_type_id": crate_type_id,
        "number_of_crates": 10,
        "birds_per_crate": 11,
        "total_gross_weight": 250.0,
        "crate_weight": 3.2,
    }
    payload.update(overrides)
    return payload


@pytest.mark.api
@pytest.mark.asyncio
class TestHealth:

    async def test_health(self, client: AsyncClient):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["service"] == "FlockPAK"
        assert resp.headers["X-Content-Type-Options"] == "nosniff"


@pytest.mark.api
@pytest.mark.asyncio
class TestCrateTypes:

    async def test_crud(self, client: AsyncClient):
        resp = await client.post("/api/crate-types/", json=_crate_payload())
        assert resp.status_code == 201
        crate = resp.json()
        assert crate["floor_area_m2"] == pytest.approx(0.5472)

        resp = await client.patch(
            f"/api/crate-types/{crate['id']}", json={"tare_weight_kg": 3.4}
        )
        assert resp.status_code == 200
        assert resp.json()["tare_weight_kg"] == 3.4
        assert resp.json()["length_cm"] == 96.0

        resp = await client.get("/api/crate-types/")
        assert resp.json()["total"] == 1

        resp = await client.delete(f"/api/crate-types/{crate['id']}")
        assert resp.status_code == 204

        resp = await client.get("/api/crate-types/")
        assert resp.json()["items"] == []
        resp = await client.get("/api/crate-types/", params={"include_inactive": True})
        assert resp.json()["items"][0]["is_active"] is False

    async def test_invalid_dimensions(self, client: AsyncClient):
        resp = await client.post("/api/crate-types/", json=_crate_payload(width_cm=0))
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_unknown_crate_type(self, client: AsyncClient):
        resp = await client.get("/api/crate-types/missing")
        assert resp.status_code == 404
        assert resp.json()["error"]["details"] == {"resource": "Crate type", "id": "missing"}


@pytest.mark.api
@pytest.mark.asyncio
class TestDensityEndpoints:

    async def test_recommend_from_dimensions(self, client: AsyncClient):
        resp = await client.post("/api/density/recommend", json={
            "length_cm": 96.0,
            "width_cm": 57.0,
            "catch_date": "2026-01-15",
        })

        assert resp.status_code == 200
        body = resp.json()
        assert body["season"] == "summer"
        assert body["min_birds_per_crate"] == 10
        assert body["max_birds_per_crate"] == 12
        assert body["recommended_birds_per_crate"] == 11
        assert body["legal_max_birds_per_crate"] == 15

    async def test_recommend_from_crate_type(self, client: AsyncClient, crate_type):
        resp = await client.post("/api/density/recommend", json={
            "crate_type_id": crate_type.id,
            "catch_date": "2026-07-01",
            "transport_duration_hours": 4,
        })

        assert resp.status_code == 200
        assert resp.json()["season"] == "winter"
        # 23-26 birds/m²
        assert resp.json()["min_birds_per_crate"] == 12

    async def test_recommend_needs_crate(self, client: AsyncClient):
        resp = await client.post("/api/density/recommend", json={"catch_date": "2026-01-15"})
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_plan_from_recommendation(self, client: AsyncClient):
        resp = await client.post("/api/density/plan", json={
            "target_birds": 3000,
            "available_crates": 276,
            "recommendation": {
                "season": "summer",
                "min_birds_per_crate": 10,
                "max_birds_per_crate": 12,
                "recommended_birds_per_crate": 11,
                "legal_max_birds_per_crate": 15,
                "floor_area_m2": 0.5472,
            },
        })

        assert resp.status_code == 200
        plan = resp.json()["distribution"]
        assert plan["standard_crates"] == 273
        assert plan["total_birds"] == 3003
        assert plan["shortage"] == 3

    async def test_plan_from_crate_type(self, client: AsyncClient, crate_type):
        resp = await client.post("/api/density/plan", json={
            "target_birds": 3000,
            "available_crates": 220,
            "crate_type_id": crate_type.id,
            "catch_date": "2026-01-15",
        })

        assert resp.status_code == 200
        plan = resp.json()["distribution"]
        assert plan["standard_density"] == 13
        assert plan["odd_crates"] == 70
        assert plan["exceeds_recommendation"] is True

    async def test_plan_unknown_crate_type(self, client: AsyncClient):
        resp = await client.post("/api/density/plan", json={
            "target_birds": 3000,
            "available_crates": 220,
            "crate_type_id": "missing",
            "catch_date": "2026-01-15",
        })
        assert resp.status_code == 404


@pytest.mark.api
@pytest.mark.asyncio
class TestShrinkageEndpoints:

    async def test_estimate_with_farm_weight(self, client: AsyncClient):
        resp = await client.post("/api/shrinkage/estimate", json={
            "feed_removal_hours": 6,
            "transport_time_hours": 2,
            "farm_weight": 1.850,
        })

        assert resp.status_code == 200
        body = resp.json()
        assert body["total_shrinkage_percent"] == pytest.approx(5.65)
        assert body["estimated_slaughterhouse_weight"] == pytest.approx(1.745)

    async def test_estimate_without_farm_weight(self, client: AsyncClient):
        resp = await client.post("/api/shrinkage/estimate", json={"feed_removal_hours": 6})
        assert resp.json()["estimated_slaughterhouse_weight"] is None

    async def test_variance(self, client: AsyncClient):
        resp = await client.post("/api/shrinkage/variance", json={
            "estimated_weight": 1.745,
            "actual_weight": 1.745,
        })
        assert resp.json() == {"variance": 0.0, "variance_percent": 0.0}

    async def test_variance_zero_estimate(self, client: AsyncClient):
        resp = await client.post("/api/shrinkage/variance", json={
            "estimated_weight": 0,
            "actual_weight": 1.7,
        })
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "ARITHMETIC_GUARD"


@pytest.mark.api
@pytest.mark.asyncio
class TestCatchSessionEndpoints:

    async def _start(self, client: AsyncClient, crate_type_id: str, **overrides) -> dict:
        payload = {
            "flock_id": "flock-001",
            "catch_date": "2026-01-15",
            "target_birds": 3000,
            "crate_type_id": crate_type_id,
            "available_crates": 276,
        }
        payload.update(overrides)
        resp = await client.post("/api/catch-sessions/", json=payload)
        assert resp.status_code == 201
        return resp.json()

    async def test_start_planned_session(self, client: AsyncClient, crate_type):
        body = await self._start(client, crate_type.id)

        assert body["session"]["status"] == "active"
        assert body["session"]["planned_standard_crates"] == 273
        assert body["recommendation"]["recommended_birds_per_crate"] == 11
        assert body["distribution"]["shortage"] == 3

    async def test_start_unplanned_session(self, client: AsyncClient):
        resp = await client.post("/api/catch-sessions/", json={
            "flock_id": "flock-001",
            "catch_date": "2026-01-15",
        })
        assert resp.status_code == 201
        assert resp.json()["distribution"] is None

    async def test_batch_lifecycle(self, client: AsyncClient, crate_type):
        session_id = (await self._start(client, crate_type.id))["session"]["id"]

        resp = await client.post(
            f"/api/catch-sessions/{session_id}/batches", json=_batch_payload(crate_type.id)
        )
        assert resp.status_code == 201
        added = resp.json()
        assert added["batch_number"] == 1
        assert added["total_birds"] == 110
        assert added["total_net_weight"] == pytest.approx(218.0)
        assert round(added["average_bird_weight"], 3) == 1.982

        resp = await client.patch(
            f"/api/catch-batches/{added['batch_id']}", json={"total_gross_weight": 260.0}
        )
        assert resp.status_code == 200
        assert resp.json()["total_net_weight"] == pytest.approx(228.0)

        resp = await client.get(f"/api/catch-sessions/{session_id}")
        detail = resp.json()
        assert detail["session"]["total_net_weight"] == pytest.approx(228.0)
        assert [b["batch_number"] for b in detail["batches"]] == [1]

        resp = await client.get(f"/api/catch-sessions/{session_id}/progress")
        progress = resp.json()
        assert progress["has_planned_distribution"] is True
        assert progress["actual"]["standard_crates"] == 10
        assert progress["off_plan_details"] is None

        resp = await client.delete(f"/api/catch-batches/{added['batch_id']}")
        assert resp.status_code == 204

        resp = await client.get(f"/api/catch-sessions/{session_id}/batches")
        assert resp.json() == []
        resp = await client.get(f"/api/catch-sessions/{session_id}")
        assert resp.json()["session"]["total_birds_caught"] == 0

    async def test_zero_net_weight_rejected(self, client: AsyncClient, crate_type):
        session_id = (await self._start(client, crate_type.id))["session"]["id"]

        resp = await client.post(
            f"/api/catch-sessions/{session_id}/batches",
            json=_batch_payload(crate_type.id, total_gross_weight=32.0),
        )

        assert resp.status_code == 422
        error = resp.json()["error"]
        assert error["code"] == "VALIDATION_FAILED"
        assert error["details"] == {"field": "total_gross_weight"}

    async def test_too_many_crates_rejected(self, client: AsyncClient, crate_type):
        session_id = (await self._start(client, crate_type.id))["session"]["id"]

        resp = await client.post(
            f"/api/catch-sessions/{session_id}/batches",
            json=_batch_payload(crate_type.id, number_of_crates=51),
        )
        assert resp.status_code == 422

    async def test_completed_session_is_locked(self, client: AsyncClient, crate_type):
        session_id = (await self._start(client, crate_type.id))["session"]["id"]

        resp = await client.post(f"/api/catch-sessions/{session_id}/complete")
        assert resp.status_code == 200
        assert resp.json()["status"] == "completed"

        resp = await client.post(
            f"/api/catch-sessions/{session_id}/batches", json=_batch_payload(crate_type.id)
        )
        assert resp.status_code == 409
        assert resp.json()["error"]["code"] == "SESSION_LOCKED"

    async def test_replan_session(self, client: AsyncClient, crate_type):
        session_id = (await self._start(client, crate_type.id))["session"]["id"]

        resp = await client.post(f"/api/catch-sessions/{session_id}/plan", json={
            "crate_type_id": crate_type.id,
            "target_birds": 3000,
            "available_crates": 220,
        })

        assert resp.status_code == 200
        assert resp.json()["session"]["planned_odd_crates"] == 70

    async def test_list_by_status(self, client: AsyncClient, crate_type):
        first = (await self._start(client, crate_type.id))["session"]["id"]
        await self._start(client, crate_type.id, flock_id="flock-002")
        await client.post(f"/api/catch-sessions/{first}/cancel")

        resp = await client.get("/api/catch-sessions/", params={"status": "active"})

        assert [s["flock_id"] for s in resp.json()] == ["flock-002"]

    async def test_unknown_session(self, client: AsyncClient, crate_type):
        resp = await client.post(
            "/api/catch-sessions/missing/batches", json=_batch_payload(crate_type.id)
        )
        assert resp.status_code == 404

        resp = await client.get("/api/catch-sessions/missing/progress")
        assert resp.status_code == 404

    async def test_unknown_batch(self, client: AsyncClient):
        resp = await client.patch("/api/catch-batches/missing", json={"birds_per_crate": 12})
        assert resp.status_code == 404
