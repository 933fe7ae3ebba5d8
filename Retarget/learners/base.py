# Retarget/learners/base.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Protocol, runtime_checkable

from ..core.errors import ConfigurationError, PhaseSequenceError
from ..core.prediction import Prediction
from ..core.task import Task

PREDICT_TYPES = ("response", "se")


@runtime_checkable
class Predictor(Protocol):
    """Anything that can be trained on a Task and then predict on one."""

    def fit(self, task: Task) -> Any: ...
    def predict(self, task: Task) -> Prediction: ...


class Regressor(ABC):
    """
    Base for the bundled regressors.

    Subclasses set self.model_ in _fit and read it in _predict.
    """

    def __init__(self, learner_id: str, predict_type: str = "response", **params: Any) -> None:
        if predict_type not in PREDICT_TYPES:
            raise ConfigurationError(
                f"predict_type must be one of {PREDICT_TYPES}, got {predict_type!r}."
            )
        self.id = learner_id
        self.predict_type = predict_type
        self.params: Dict[str, Any] = {**self.default_params(), **params}
        self.model_: Optional[Any] = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r}, predict_type={self.predict_type!r})"

    def default_params(self) -> Dict[str, Any]:
        return {}

    def get_params(self) -> Dict[str, Any]:
        return dict(self.params)

    def set_params(self, **values: Any) -> "Regressor":
        unknown = [k for k in values if k not in self.params]
        if unknown:
            raise ConfigurationError(f"Learner '{self.id}' has no parameter(s) {unknown}.")
        self.params.update(values)
        return self

    def fit(self, task: Task) -> Any:
        self.model_ = self._fit(task)
        return self.model_

    def predict(self, task: Task) -> Prediction:
        if self.model_ is None:
            raise PhaseSequenceError(f"Learner '{self.id}' has not been fitted. Call fit(task) first.")
        return self._predict(task)

    @abstractmethod
    def _fit(self, task: Task) -> Any:
        ...

    @abstractmethod
    def _predict(self, task: Task) -> Prediction:
        ...
