"""Metabolic stage classification for an ongoing fast."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FastingStage(Enum):
    """Named physiological phases keyed to hours without food."""
    BLOOD_SUGAR_DROPPING = "Blood-sugar dropping"
    BLOOD_SUGAR_NORMALIZING = "Blood-sugar normalizing"
    FAT_BURNING = "Fat-burning"
    KETOSIS = "Ketosis"
    AUTOPHAGY = "Autophagy"
    DEEP_AUTOPHAGY = "Deep autophagy"


@dataclass(frozen=True)
class StageInfo:
    """A stage together with its user-facing description."""

    stage: FastingStage
    description: str

    @property
    def name(self) -> str:
        return self.stage.value


# (upper bound in hours, exclusive) -> stage, in ascending order
STAGE_THRESHOLDS = (
    (4.0, StageInfo(FastingStage.BLOOD_SUGAR_DROPPING, "Insulin levels start to drop.")),
    (12.0, StageInfo(FastingStage.BLOOD_SUGAR_NORMALIZING, "Blood sugar levels are stabilizing.")),
    (18.0, StageInfo(FastingStage.FAT_BURNING, "Body starts switching to fat as fuel.")),
    (24.0, StageInfo(FastingStage.KETOSIS, "The liver produces ketones for energy.")),
    (48.0, StageInfo(FastingStage.AUTOPHAGY, "Cells begin recycling old parts.")),
)

FINAL_STAGE = StageInfo(
    FastingStage.DEEP_AUTOPHAGY, "Maximum cell regeneration and healing."
)


def classify_stage(elapsed_hours: float) -> StageInfo:
    """Map elapsed fasting hours to a stage.

    Ranges are half-open with the upper bound exclusive, so a boundary value
    such as exactly 4.0 hours belongs to the next stage. Negative values
    (clock skew, future start times) land in the first stage.

    Args:
        elapsed_hours: Hours since the fast started

    Returns:
        StageInfo for the matching stage
    """
    for upper_bound, info in STAGE_THRESHOLDS:
        if elapsed_hours < upper_bound:
            return info
    return FINAL_STAGE
