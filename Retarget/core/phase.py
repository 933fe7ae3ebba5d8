# Retarget/core/phase.py
from __future__ import annotations

from enum import Enum


class Phase(str, Enum):
    """Which half of the pipeline a stage call belongs to."""
    TRAIN = "train"
    PREDICT = "predict"
