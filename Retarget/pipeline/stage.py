# Retarget/pipeline/stage.py
from __future__ import annotations

from typing import Any, Dict, Optional

from ..core.errors import ConfigurationError
from ..core.stage import Channel, Stage
from ..learners.base import Predictor


class LearnerStage(Stage):
    """
    Wraps any Predictor (fit(task) / predict(task) -> Prediction), including a
    nested GraphPredictor. Emits None during TRAIN and a Prediction during PREDICT.

    Parameters are the predictor's own: get_params/set_params if it has them,
    otherwise get_config/set_config (nested graphs).
    """

    input_channels = (Channel("input", "Task"),)
    output_channels = (Channel("output", "Prediction"),)

    def __init__(self, predictor: Any, stage_id: Optional[str] = None) -> None:
        if not isinstance(predictor, Predictor):
            raise ConfigurationError(
                f"{type(predictor).__name__} does not expose fit(task) and predict(task)."
            )
        self.predictor = predictor
        self.fit_state: Any = None
        super().__init__(stage_id or getattr(predictor, "id", None) or "learner")

    def default_params(self) -> Dict[str, Any]:
        return self._predictor_params()

    def _predictor_params(self) -> Dict[str, Any]:
        if hasattr(self.predictor, "get_params"):
            return dict(self.predictor.get_params())
        if hasattr(self.predictor, "get_config"):
            return dict(self.predictor.get_config())
        return {}

    def get_params(self) -> Dict[str, Any]:
        return self._predictor_params()

    def set_params(self, **values: Any) -> "LearnerStage":
        if not values:
            return self
        if hasattr(self.predictor, "set_params"):
            self.predictor.set_params(**values)
        elif hasattr(self.predictor, "set_config"):
            self.predictor.set_config(values)
        else:
            raise ConfigurationError(f"Predictor of stage '{self.id}' has no parameters.")
        self.params = self._predictor_params()
        return self

    @property
    def predict_type(self) -> str:
        return getattr(self.predictor, "predict_type", "response")

    def _train(self, inputs: Dict[str, Any]) -> Dict[str, Any]:
        self.fit_state = self.predictor.fit(inputs["input"])
        return {"output": None}

    def _predict(self, inputs: Dict[str, Any]) -> Dict[str, Any]:
        return {"output": self.predictor.predict(inputs["input"])}
