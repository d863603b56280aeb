"""Shrinkage estimation and slaughterhouse weight variance.

Live birds lose weight between farm weighing and slaughterhouse receipt:

    gut evacuation     2.0-3.0 %   scales with feed withdrawal (0 → 24 h)
    catching/handling  1.75 %      fixed midpoint of 1.5-2.0
    loading/holding    0.65 %      fixed midpoint of 0.5-0.8
    transport          0.7-1.0 %   scales with transport time (0 → 2 h)

Each component is rounded to 2 dp before summing, so the total can differ
from the unrounded sum by a few hundredths.  That is the accepted policy.
"""

from dataclasses import asdict, dataclass

from flockpak.config import ShrinkageSettings, settings
from flockpak.middleware.exceptions import ArithmeticGuardError, ValidationFailedError


@dataclass(frozen=True)
class ShrinkageComponents:
    gut_evacuation_percent: float
    catching_handling_percent: float
    loading_holding_percent: float
    transport_percent: float
    total_shrinkage_percent: float

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class WeightVariance:
    variance: float
    variance_percent: float


def estimate_shrinkage(
    feed_removal_hours: float,
    transport_time_hours: float | None = None,
    cfg: ShrinkageSettings | None = None,
) -> ShrinkageComponents:
    cfg = cfg or settings.shrinkage
    if transport_time_hours is None:
        transport_time_hours = cfg.default_transport_hours
    if feed_removal_hours < 0:
        raise ValidationFailedError(
            "feed_removal_hours cannot be negative", field="feed_removal_hours"
        )
    if transport_time_hours < 0:
        raise ValidationFailedError(
            "transport_time_hours cannot be negative", field="transport_time_hours"
        )

    gut = cfg.gut_evacuation_base_pct + min(
        feed_removal_hours / cfg.gut_evacuation_full_hours, 1
    ) * cfg.gut_evacuation_max_extra_pct
    transport = cfg.transport_base_pct + min(
        (transport_time_hours / cfg.transport_full_hours) * cfg.transport_max_extra_pct,
        cfg.transport_max_extra_pct,
    )

    gut = round(gut, 2)
    catching = round(cfg.catching_handling_pct, 2)
    loading = round(cfg.loading_holding_pct, 2)
    transport = round(transport, 2)

    return ShrinkageComponents(
        gut_evacuation_percent=gut,
        catching_handling_percent=catching,
        loading_holding_percent=loading,
        transport_percent=transport,
        total_shrinkage_percent=round(gut + catching + loading + transport, 2),
    )


def estimated_slaughterhouse_weight(farm_weight: float, shrinkage_percent: float) -> float:
    """Expected weight on arrival, to 3 dp."""
    return round(farm_weight * (1 - shrinkage_percent / 100), 3)


def compute_variance(estimated_weight: float, actual_weight: float) -> WeightVariance:
    """Estimated minus actual; positive means birds arrived lighter than expected."""
    if estimated_weight == 0:
        raise ArithmeticGuardError(
            "Estimated weight is zero; variance percentage is undefined",
            field="estimated_weight",
        )
    variance = round(estimated_weight - actual_weight, 3)
    return WeightVariance(
        variance=variance,
        variance_percent=round(variance / estimated_weight * 100, 2),
    )
