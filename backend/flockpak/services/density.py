"""Seasonal crate density recommendation and shortage-aware distribution.

Both functions are pure: crate geometry, season and transport duration
go in, birds-per-crate figures come out.  Stocking bands are read from
``settings.density`` so they can be tuned without touching this module.

Recommendation:
    floor area (m²) = length × width / 10 000
    birds/crate     = floor(area × birds/m²)   for the min, max and midpoint bands
    legal max       = floor(area × legal ceiling), independent of season

Distribution (when crates are short):
    pack most crates at a "standard" density and a minority at a higher
    "odd" density, instead of overloading every crate uniformly.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from datetime import date

from flockpak.config import DensitySettings, settings
from flockpak.middleware.exceptions import ValidationFailedError


class Season(str, enum.Enum):
    SUMMER = "summer"
    WINTER = "winter"
    # Never produced by detect_season(); only via an explicit override
    MODERATE = "moderate"


SUMMER_MONTHS = {10, 11, 12, 1, 2, 3}


@dataclass(frozen=True)
class CrateGeometry:
    """The slice of a catalog crate type the recommender needs."""
    length_cm: float
    width_cm: float
    height_cm: float = 0.0
    tare_weight_kg: float = 0.0

    @property
    def floor_area_m2(self) -> float:
        return (self.length_cm * self.width_cm) / 10000

    @classmethod
    def from_crate_type(cls, crate_type) -> CrateGeometry:
        return cls(
            length_cm=crate_type.length_cm,
            width_cm=crate_type.width_cm,
            height_cm=crate_type.height_cm,
            tare_weight_kg=crate_type.tare_weight_kg,
        )


@dataclass(frozen=True)
class DensityRecommendation:
    season: Season
    min_birds_per_crate: int
    max_birds_per_crate: int
    recommended_birds_per_crate: int
    legal_max_birds_per_crate: int
    floor_area_m2: float


@dataclass(frozen=True)
class DistributionPlan:
    standard_density: int
    standard_crates: int
    odd_density: int
    odd_crates: int
    total_birds: int
    total_crates: int
    # Single-tier plans report surplus (total - target); shortage plans
    # report target - total.  See DESIGN.md.
    shortage: int
    exceeds_recommendation: bool
    within_legal_limit: bool

    @property
    def is_two_tier(self) -> bool:
        return self.odd_crates > 0


def detect_season(catch_date: date) -> Season:
    """Southern-hemisphere seasons: October-March is summer."""
    if catch_date.month in SUMMER_MONTHS:
        return Season.SUMMER
    return Season.WINTER


def _band(season: Season, cfg: DensitySettings) -> tuple[int, int]:
    if season == Season.SUMMER:
        return cfg.summer_min_per_m2, cfg.summer_max_per_m2
    if season == Season.WINTER:
        return cfg.winter_min_per_m2, cfg.winter_max_per_m2
    return cfg.moderate_min_per_m2, cfg.moderate_max_per_m2


def _duration_adjustment(hours: float | None, cfg: DensitySettings) -> int:
    # A missing or zero duration leaves the band untouched
    if not hours:
        return 0
    if hours > cfg.long_haul_hours:
        return cfg.long_haul_adjustment
    if hours < cfg.short_haul_hours:
        return cfg.short_haul_adjustment
    return 0


def recommend_density(
    crate: CrateGeometry,
    season: Season,
    transport_duration_hours: float | None = None,
    cfg: DensitySettings | None = None,
) -> DensityRecommendation:
    """Recommend birds per crate for a crate, season and transport duration."""
    cfg = cfg or settings.density

    if crate.length_cm <= 0:
        raise ValidationFailedError("Crate length must be positive", field="length_cm")
    if crate.width_cm <= 0:
        raise ValidationFailedError("Crate width must be positive", field="width_cm")

    area = crate.floor_area_m2
    min_per_m2, max_per_m2 = _band(Season(season), cfg)
    adjustment = _duration_adjustment(transport_duration_hours, cfg)
    min_per_m2 += adjustment
    max_per_m2 += adjustment
    legal_max = math.floor(area * cfg.legal_max_birds_per_m2)

    # Only the reported maximum is held to the legal ceiling
    return DensityRecommendation(
        season=Season(season),
        min_birds_per_crate=math.floor(area * min_per_m2),
        max_birds_per_crate=min(math.floor(area * max_per_m2), legal_max),
        recommended_birds_per_crate=math.floor(area * ((min_per_m2 + max_per_m2) / 2)),
        legal_max_birds_per_crate=legal_max,
        floor_area_m2=area,
    )


def recommend_density_for_date(
    crate: CrateGeometry,
    catch_date: date,
    transport_duration_hours: float | None = None,
    season_override: Season | None = None,
    cfg: DensitySettings | None = None,
) -> DensityRecommendation:
    season = season_override or detect_season(catch_date)
    return recommend_density(crate, season, transport_duration_hours, cfg)


def plan_distribution(
    target_birds: int,
    available_crates: int,
    recommendation: DensityRecommendation,
    cfg: DensitySettings | None = None,
) -> DistributionPlan:
    """Split ``target_birds`` over ``available_crates`` in at most two density tiers."""
    cfg = cfg or settings.density

    if target_birds <= 0:
        raise ValidationFailedError("target_birds must be positive", field="target_birds")
    if available_crates <= 0:
        raise ValidationFailedError(
            "available_crates must be positive", field="available_crates"
        )

    recommended = recommendation.recommended_birds_per_crate
    legal_max = recommendation.legal_max_birds_per_crate
    if recommended <= 0:
        raise ValidationFailedError(
            "Crate floor area too small for any birds at the recommended density",
            field="recommended_birds_per_crate",
        )

    # ── Enough crates at the recommended density ─────────────
    crates_needed = math.ceil(target_birds / recommended)
    if crates_needed <= available_crates:
        total = crates_needed * recommended
        return DistributionPlan(
            standard_density=recommended,
            standard_crates=crates_needed,
            odd_density=0,
            odd_crates=0,
            total_birds=total,
            total_crates=crates_needed,
            shortage=total - target_birds,
            exceeds_recommendation=False,
            within_legal_limit=True,
        )

    # ── Shortage: choose the tier densities by season ────────
    if recommendation.season == Season.SUMMER:
        standard_density = min(recommended + cfg.summer_standard_uplift, legal_max)
    else:
        standard_density = recommended
    odd_density = min(standard_density + cfg.odd_density_step, legal_max)
    exceeds = standard_density > recommendation.max_birds_per_crate

    if available_crates * standard_density >= target_birds:
        standard_crates = min(math.ceil(target_birds / standard_density), available_crates)
        total = standard_crates * standard_density
        return DistributionPlan(
            standard_density=standard_density,
            standard_crates=standard_crates,
            odd_density=0,
            odd_crates=0,
            total_birds=total,
            total_crates=standard_crates,
            shortage=max(0, target_birds - total),
            exceeds_recommendation=exceeds,
            within_legal_limit=standard_density <= legal_max,
        )

    # ── Two tiers: fewest odd crates that close the gap ──────
    remaining = target_birds - available_crates * standard_density
    density_gap = odd_density - standard_density
    if density_gap > 0:
        odd_crates = math.ceil(remaining / density_gap)
    else:
        # Both tiers pinned at the legal ceiling
        odd_crates = available_crates
    if odd_crates > available_crates:
        odd_crates = available_crates
    standard_crates = available_crates - odd_crates

    total = standard_crates * standard_density + odd_crates * odd_density
    return DistributionPlan(
        standard_density=standard_density,
        standard_crates=standard_crates,
        odd_density=odd_density,
        odd_crates=odd_crates,
        total_birds=total,
        total_crates=standard_crates + odd_crates,
        shortage=target_birds - total,
        exceeds_recommendation=exceeds,
        within_legal_limit=odd_density <= legal_max,
    )
