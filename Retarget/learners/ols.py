# Retarget/learners/ols.py
from __future__ import annotations

from typing import Any, Dict

import numpy as np
import pandas as pd
import statsmodels.api as sm

from ..core.errors import ConfigurationError
from ..core.prediction import Prediction
from ..core.task import Task
from .base import Regressor


class OLSRegressor(Regressor):
    """
    Ordinary least squares on all task features (statsmodels OLS).

    Parameters:
      - fit_intercept: add a constant column (default True)

    predict_type="se" reports the standard error of the fitted mean.
    """

    def __init__(self, learner_id: str = "regr_ols", predict_type: str = "response", **params: Any) -> None:
        super().__init__(learner_id, predict_type, **params)
        self.feature_names_: list = []

    def default_params(self) -> Dict[str, Any]:
        return {"fit_intercept": True}

    def _design(self, task: Task) -> np.ndarray:
        X = task.features()
        non_numeric = [c for c in X.columns if not pd.api.types.is_numeric_dtype(X[c])]
        if non_numeric:
            raise ConfigurationError(
                f"Learner '{self.id}' needs numeric features; got non-numeric {non_numeric}."
            )
        X = X.to_numpy(dtype=float)
        if self.params["fit_intercept"]:
            X = np.column_stack([np.ones(len(X)), X])
        if X.shape[1] == 0:
            raise ConfigurationError(f"Learner '{self.id}' has no features and no intercept.")
        return X

    def _fit(self, task: Task) -> Any:
        y = task.truth_column().to_numpy(dtype=float)
        self.feature_names_ = task.feature_names
        return sm.OLS(y, self._design(task), missing="drop").fit()

    def _predict(self, task: Task) -> Prediction:
        if task.feature_names != self.feature_names_:
            raise ConfigurationError(
                f"Learner '{self.id}' was fitted on features {self.feature_names_}, "
                f"got {task.feature_names}."
            )
        X = self._design(task)
        se = None
        if self.predict_type == "se":
            pred = self.model_.get_prediction(X)
            response, se = pred.predicted_mean, pred.se_mean
        else:
            response = self.model_.predict(X)
        return Prediction(
            row_ids=task.row_ids,
            response=response,
            truth=task.truth_column().to_numpy(dtype=float),
            se=se,
        )
