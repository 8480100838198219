"""Dynamic target engine: BMR, TDEE and the daily macro split."""

import math

from jefit.domain.models import DailyTarget, UserProfile
from jefit.domain.reference import ACTIVITY_LEVELS, GOALS

WORKOUT_CREDIT = 0.5
FAT_PER_KG = 1.0
KCAL_PER_G_PROTEIN = 4
KCAL_PER_G_CARBS = 4
KCAL_PER_G_FAT = 9


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with halves going towards +infinity."""
    return math.floor(value + 0.5)


def compute_bmr(profile: UserProfile) -> int:
    """Return the Mifflin-St Jeor basal metabolic rate in kcal/day."""
    base = 10 * profile.weight + 6.25 * profile.height - 5 * profile.age
    if profile.gender == "male":
        return round_half_up(base + 5)
    return round_half_up(base - 161)


def compute_base_tdee(profile: UserProfile) -> int:
    """Return BMR scaled by the profile's activity multiplier."""
    multiplier = ACTIVITY_LEVELS[profile.activity_level].multiplier
    return round_half_up(compute_bmr(profile) * multiplier)


def compute_daily_target(
    profile: UserProfile, today_workout_kcal: float
) -> DailyTarget:
    """Compute today's target, crediting back half of the exercise energy.

    Carbs fill whatever energy remains after protein and fat and are allowed
    to go negative for very low targets.
    """
    goal = GOALS[profile.goal]
    bmr = compute_bmr(profile)
    base_tdee = compute_base_tdee(profile)
    bonus = today_workout_kcal * WORKOUT_CREDIT
    dynamic_tdee = round_half_up(base_tdee + bonus)
    target_kcal = round_half_up(dynamic_tdee + goal.deficit)
    protein = round_half_up(profile.weight * goal.protein_multiplier)
    fat = round_half_up(profile.weight * FAT_PER_KG)
    carbs = round_half_up(
        (target_kcal - protein * KCAL_PER_G_PROTEIN - fat * KCAL_PER_G_FAT)
        / KCAL_PER_G_CARBS
    )
    return DailyTarget(
        bmr=bmr,
        base_tdee=base_tdee,
        extra_workout_bonus=round_half_up(bonus),
        dynamic_tdee=dynamic_tdee,
        target_kcal=target_kcal,
        protein=protein,
        fat=fat,
        carbs=carbs,
    )
