# Retarget/trafos/invert.py
from __future__ import annotations

from typing import Any, Dict

from ..core.stage import Channel, Stage


class InvertStage(Stage):
    """
    Terminal stage: applies the InverseFunction on `fun` to the Prediction on
    `prediction`. Both inputs are None during TRAIN and nothing is done.
    """

    input_channels = (Channel("fun", "InverseFunction"), Channel("prediction", "Prediction"))
    output_channels = (Channel("output", "Prediction"),)

    def __init__(self, stage_id: str = "targetinvert") -> None:
        super().__init__(stage_id)

    def _train(self, inputs: Dict[str, Any]) -> Dict[str, Any]:
        return {"output": None}

    def _predict(self, inputs: Dict[str, Any]) -> Dict[str, Any]:
        return {"output": inputs["fun"](inputs["prediction"])}
