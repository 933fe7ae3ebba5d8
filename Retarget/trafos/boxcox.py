# Retarget/trafos/boxcox.py
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

import numpy as np
from scipy import special, stats

from ..core.errors import InversionError, TransformComputationError
from ..core.phase import Phase
from ..core.prediction import Prediction
from ..core.task import Task
from .base import TransformStage


class BoxCoxStage(TransformStage):
    """
    Box-Cox transform of a strictly positive target.

    lmbda=None estimates lambda by maximum likelihood on the training target
    (scipy.stats.boxcox); a number fixes it. State: {"lambda"}.
    """

    def __init__(self, stage_id: str = "targettrafoboxcox", lmbda: Optional[float] = None, **params: Any) -> None:
        super().__init__(stage_id, {"lmbda": lmbda, **params})

    def default_params(self) -> Dict[str, Any]:
        return {**super().default_params(), "lmbda": None}

    def _positive_target(self, task: Task) -> np.ndarray:
        y = task.truth_column().to_numpy(dtype=float)
        finite = y[np.isfinite(y)]
        if np.any(finite <= 0):
            raise TransformComputationError(
                f"Stage '{self.id}': Box-Cox requires a strictly positive target. "
                f"Found min={float(finite.min())}."
            )
        return y

    def compute_state(self, task: Task) -> Mapping[str, Any]:
        lmbda = self.params["lmbda"]
        if lmbda is not None:
            return {"lambda": float(lmbda)}

        y = self._positive_target(task)
        y = y[np.isfinite(y)]
        if y.size < 2 or np.all(y == y[0]):
            raise TransformComputationError(
                f"Stage '{self.id}': lambda needs at least two distinct target values; set lmbda explicitly."
            )
        _, lam = stats.boxcox(y)
        return {"lambda": float(lam)}

    def transform(self, task: Task, phase: Phase) -> Task:
        y = self._positive_target(task)
        return self.replace_target(task, special.boxcox(y, self.state["lambda"]))

    def train_invert(self, task: Task) -> Dict[str, Any]:
        return {**super().train_invert(task), "lambda": self.state["lambda"]}

    def invert(self, prediction: Prediction, predict_phase_state: Any) -> Prediction:
        lam = predict_phase_state["lambda"]

        def _inverse(values: np.ndarray) -> np.ndarray:
            out = special.inv_boxcox(values, lam)
            bad = np.isfinite(values) & ~np.isfinite(out)
            if bool(bad.any()):
                raise InversionError(
                    f"Stage '{self.id}': {int(bad.sum())} value(s) lie outside the Box-Cox range "
                    f"for lambda={lam:.6g}."
                )
            return out

        return Prediction(
            row_ids=prediction.row_ids,
            response=_inverse(prediction.response),
            truth=self.restore_truth(prediction, _inverse),
        )
