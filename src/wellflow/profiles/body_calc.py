"""Daily energy budget from the user profile.

Uses the Mifflin-St Jeor equation for BMR, which is widely validated for
estimating resting metabolic rate. Unlike target calculators with safety
floors, the raw equation is returned as-is: extreme inputs can produce a
non-positive BMR, and callers decide how to treat it.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from wellflow.tracking.models import Gender, UserProfile
from wellflow.tracking.timeutils import age


def calculate_bmr(profile: UserProfile, as_of: Optional[date] = None) -> float:
    """Calculate Basal Metabolic Rate using the Mifflin-St Jeor equation.

    Args:
        profile: User profile (metric height and weight)
        as_of: Date used for the age term (default: today)

    Returns:
        BMR in calories per day
    """
    years = age(profile.date_of_birth, as_of)
    base = (10 * profile.weight_kg) + (6.25 * profile.height_cm) - (5 * years)

    if profile.gender == Gender.MALE:
        return base + 5
    return base - 161


def effective_daily_limit(profile: UserProfile, as_of: Optional[date] = None) -> float:
    """Return the manual daily limit if one is set, otherwise the BMR."""
    if profile.manual_daily_limit is not None:
        return profile.manual_daily_limit
    return calculate_bmr(profile, as_of)
