# Retarget/learners/featureless.py
from __future__ import annotations

from typing import Any, Dict

import numpy as np

from ..core.prediction import Prediction
from ..core.task import Task
from .base import Regressor


class MeanRegressor(Regressor):
    """Ignores the features and predicts the training mean (se: training std)."""

    def __init__(self, learner_id: str = "regr_featureless", predict_type: str = "response") -> None:
        super().__init__(learner_id, predict_type)

    def _fit(self, task: Task) -> Dict[str, Any]:
        y = task.truth_column().to_numpy(dtype=float)
        y = y[np.isfinite(y)]
        if y.size == 0:
            raise ValueError(f"Learner '{self.id}': target has no finite values.")
        return {"mean": float(np.mean(y)), "sd": float(np.std(y, ddof=1)) if y.size > 1 else 0.0}

    def _predict(self, task: Task) -> Prediction:
        n = task.nrow
        return Prediction(
            row_ids=task.row_ids,
            response=np.full(n, self.model_["mean"]),
            truth=task.truth_column().to_numpy(dtype=float),
            se=np.full(n, self.model_["sd"]) if self.predict_type == "se" else None,
        )
