# Retarget/trafos/scalerange.py
from __future__ import annotations

from typing import Any, Dict, Mapping

import numpy as np

from ..core.errors import ConfigurationError, TransformComputationError
from ..core.phase import Phase
from ..core.prediction import Prediction
from ..core.task import Task
from .base import TransformStage


class ScaleRangeStage(TransformStage):
    """
    Linearly maps the training target range [min, max] onto [lower, upper].

    State: {"offset", "scale"} with y' = offset + scale * y.
    The map is linear, so standard errors invert exactly (se / scale).
    """

    invertible_columns = ("se",)

    def __init__(self, stage_id: str = "targettrafoscalerange", **params: Any) -> None:
        super().__init__(stage_id, params)

    def default_params(self) -> Dict[str, Any]:
        return {**super().default_params(), "lower": 0.0, "upper": 1.0}

    def check_params(self) -> None:
        super().check_params()
        lower, upper = self.params["lower"], self.params["upper"]
        if not (np.isfinite(lower) and np.isfinite(upper) and lower < upper):
            raise ConfigurationError(
                f"Stage '{self.id}': need finite lower < upper, got lower={lower}, upper={upper}."
            )

    def compute_state(self, task: Task) -> Mapping[str, Any]:
        y = task.truth_column().to_numpy(dtype=float)
        y = y[np.isfinite(y)]
        if y.size == 0:
            raise TransformComputationError(f"Stage '{self.id}': target has no finite values.")
        lo, hi = float(y.min()), float(y.max())
        if hi == lo:
            raise TransformComputationError(
                f"Stage '{self.id}': target is constant ({lo}); range cannot be rescaled."
            )
        scale = (float(self.params["upper"]) - float(self.params["lower"])) / (hi - lo)
        return {"offset": float(self.params["lower"]) - lo * scale, "scale": scale}

    def transform(self, task: Task, phase: Phase) -> Task:
        y = task.truth_column().to_numpy(dtype=float)
        return self.replace_target(task, self.state["offset"] + self.state["scale"] * y)

    def train_invert(self, task: Task) -> Dict[str, Any]:
        return {**super().train_invert(task), "offset": self.state["offset"], "scale": self.state["scale"]}

    def invert(self, prediction: Prediction, predict_phase_state: Any) -> Prediction:
        offset, scale = predict_phase_state["offset"], predict_phase_state["scale"]

        def _inverse(values: np.ndarray) -> np.ndarray:
            return (values - offset) / scale

        return Prediction(
            row_ids=prediction.row_ids,
            response=_inverse(prediction.response),
            truth=self.restore_truth(prediction, _inverse),
            se=None if prediction.se is None else prediction.se / abs(scale),
        )
