"""Intermittent-fasting state machine and stage classification."""

from __future__ import annotations

from wellflow.fasting.session import (
    FASTING_GOAL_HOURS,
    FastingAlreadyActiveError,
    FastingProgress,
    FastingState,
)
from wellflow.fasting.stages import FastingStage, StageInfo, classify_stage

__all__ = [
    "FASTING_GOAL_HOURS",
    "FastingAlreadyActiveError",
    "FastingProgress",
    "FastingStage",
    "FastingState",
    "StageInfo",
    "classify_stage",
]
