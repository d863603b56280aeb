"""Distribution progress tests — planned vs actual crate densities."""

import pytest

from flockpak.config import ProgressSettings
from flockpak.middleware.exceptions import ResourceNotFoundError
from flockpak.models import CatchBatch
from flockpak.services.catch_ledger import add_batch
from flockpak.services.progress import (
    PlannedTiers,
    get_distribution_progress,
    reconcile_progress,
    round_half_up,
)


def _batch(crates: int, birds: int) -> CatchBatch:
    return CatchBatch(number_of_crates=crates, total_birds=birds)


@pytest.mark.unit
class TestRoundHalfUp:

    @pytest.mark.parametrize("value,expected", [(10.5, 11), (11.5, 12), (11.49, 11), (0.0, 0)])
    def test_halves_round_up(self, value, expected):
        assert round_half_up(value) == expected


@pytest.mark.unit
class TestReconcileProgress:

    def test_unplanned_session_reports_totals(self):
        report = reconcile_progress(None, [_batch(10, 110), _batch(5, 60)])

        assert report == {
            "has_planned_distribution": False,
            "total_crates": 15,
            "total_birds": 170,
            "average_density": 11,
        }

    def test_unplanned_session_without_batches(self):
        report = reconcile_progress(None, [])
        assert report["average_density"] == 0
        assert report["total_crates"] == 0

    def test_single_tier_plan_with_off_plan_crates(self):
        plan = PlannedTiers(standard_density=11, standard_crates=273, odd_density=0, odd_crates=0)

        report = reconcile_progress(plan, [_batch(10, 110), _batch(5, 60)])

        assert report["actual"] == {
            "standard_crates": 10,
            "odd_crates": 0,
            "off_plan_crates": 5,
            "total_crates": 15,
            "total_birds": 170,
        }
        assert report["progress"]["standard_progress"] == 4
        assert report["progress"]["odd_progress"] == 0
        assert report["progress"]["is_on_track"] is False
        assert report["progress"]["is_complete"] is False
        assert report["off_plan_details"] == {"count": 5, "densities": [12]}
        assert report["planned"]["total_crates"] == 273

    def test_two_tier_plan_completed(self):
        plan = PlannedTiers(standard_density=13, standard_crates=150, odd_density=15, odd_crates=70)
        batches = [_batch(50, 650)] * 3 + [_batch(35, 525)] * 2

        report = reconcile_progress(plan, batches)

        assert report["actual"]["standard_crates"] == 150
        assert report["actual"]["odd_crates"] == 70
        assert report["progress"] == {
            "standard_progress": 100,
            "odd_progress": 100,
            "is_on_track": True,
            "is_complete": True,
        }
        assert report["off_plan_details"] is None

    def test_on_track_within_five_percent(self):
        plan = PlannedTiers(standard_density=11, standard_crates=200, odd_density=0, odd_crates=0)

        report = reconcile_progress(plan, [_batch(50, 550)] * 2 + [_batch(5, 60)])
        # 5 of 105 crates off-plan
        assert report["progress"]["is_on_track"] is True

        report = reconcile_progress(plan, [_batch(50, 550)] * 2 + [_batch(6, 72)])
        # 6 of 106 crates off-plan
        assert report["progress"]["is_on_track"] is False

    def test_batch_density_rounds_half_up(self):
        plan = PlannedTiers(standard_density=11, standard_crates=10, odd_density=0, odd_crates=0)

        # 21 birds over 2 crates is 10.5 → 11
        report = reconcile_progress(plan, [_batch(2, 21)])
        assert report["actual"]["standard_crates"] == 2

    def test_density_match_tolerance_from_settings(self):
        plan = PlannedTiers(standard_density=11, standard_crates=10, odd_density=0, odd_crates=0)

        exact = reconcile_progress(plan, [_batch(5, 60)])
        tolerant = reconcile_progress(
            plan, [_batch(5, 60)], ProgressSettings(density_match_tolerance=1)
        )

        assert exact["actual"]["off_plan_crates"] == 5
        assert tolerant["actual"]["standard_crates"] == 5

    def test_odd_tier_not_matched_when_unplanned(self):
        plan = PlannedTiers(standard_density=11, standard_crates=10, odd_density=0, odd_crates=0)
        # A batch at density 0 is impossible, but must never match an absent odd tier
        report = reconcile_progress(plan, [_batch(1, 0)])
        assert report["actual"]["off_plan_crates"] == 1


@pytest.mark.integration
@pytest.mark.asyncio
class TestDistributionProgress:

    async def test_planned_session(self, db_session, planned_session, crate_type):
        await add_batch(db_session, planned_session.id, crate_type.id, 10, 11, 250.0, 3.2)

        report = await get_distribution_progress(db_session, planned_session.id)

        assert report["has_planned_distribution"] is True
        assert report["planned"]["standard_density"] == 11
        assert report["planned"]["standard_crates"] == 273
        assert report["actual"]["standard_crates"] == 10
        assert report["progress"]["is_on_track"] is True

    async def test_unplanned_session(self, db_session, catch_session, crate_type):
        await add_batch(db_session, catch_session.id, crate_type.id, 10, 11, 250.0, 3.2)

        report = await get_distribution_progress(db_session, catch_session.id)

        assert report["has_planned_distribution"] is False
        assert report["total_crates"] == 10
        assert report["average_density"] == 11

    async def test_unknown_session(self, db_session):
        with pytest.raises(ResourceNotFoundError):
            await get_distribution_progress(db_session, "missing")
