# Retarget/trafos/mutate.py
from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional

import numpy as np
import pandas as pd

from ..core.errors import ConfigurationError, InversionError, TransformComputationError
from ..core.phase import Phase
from ..core.prediction import Prediction
from ..core.task import Task
from .base import TransformStage


def _identity(x):
    return x


def _response_inverter(prediction: Prediction) -> Dict[str, Any]:
    return {"response": prediction.response}


class MutateStage(TransformStage):
    """
    Stateless target transformation from a user-declared function pair.

    Parameters:
      - trafo:    value -> value, applied elementwise to the target column
      - inverter: Prediction -> {"response": values}, undoes trafo on predictions
      - new_target_name: name of the transformed target (default "<target>_trafo")
      - unsupported_columns: "drop" | "error" for output columns such as se,
        which a generic function pair cannot invert correctly

    Nothing is fitted. The state only holds the trafo captured at TRAIN, so a
    later set_params(trafo=...) does not reach the trained stage until it is
    retrained.
    """

    def __init__(
        self,
        stage_id: str = "targetmutate",
        trafo: Optional[Callable[[Any], Any]] = _identity,
        inverter: Optional[Callable[[Prediction], Mapping[str, Any]]] = _response_inverter,
        params: Optional[Mapping[str, Any]] = None,
    ) -> None:
        merged = {"trafo": trafo, "inverter": inverter}
        merged.update(params or {})
        super().__init__(stage_id, merged)

    def default_params(self) -> Dict[str, Any]:
        return {
            **super().default_params(),
            "trafo": _identity,
            "inverter": _response_inverter,
        }

    def check_params(self) -> None:
        super().check_params()
        for name in ("trafo", "inverter"):
            fn = self.params.get(name)
            if fn is None:
                raise ConfigurationError(f"Stage '{self.id}': parameter '{name}' is not set.")
            if not callable(fn):
                raise ConfigurationError(
                    f"Stage '{self.id}': parameter '{name}' must be callable, got {type(fn).__name__}."
                )

    def compute_state(self, task: Task) -> Mapping[str, Any]:
        return {"trafo": self.params["trafo"]}

    def transform(self, task: Task, phase: Phase) -> Task:
        target = task.truth_column()
        trafo = self.state["trafo"] if self.state else self.params["trafo"]
        try:
            values = target.map(trafo)
        except Exception as e:
            raise TransformComputationError(
                f"Stage '{self.id}': trafo failed on target '{target.name}' ({phase.value}): "
                f"{type(e).__name__}: {e}"
            ) from e

        values = pd.to_numeric(values, errors="coerce")
        bad = np.isfinite(target.to_numpy(dtype=float)) & ~np.isfinite(values.to_numpy(dtype=float))
        if bool(bad.any()):
            raise TransformComputationError(
                f"Stage '{self.id}': trafo produced non-finite values for "
                f"{int(bad.sum())} finite target value(s) of '{target.name}' "
                f"(first offending value: {target[bad].iloc[0]!r})."
            )
        return self.replace_target(task, values)

    def train_invert(self, task: Task) -> Dict[str, Any]:
        # The inverter is snapshotted so later set_params calls cannot reach a built inverse.
        return {**super().train_invert(task), "inverter": self.params["inverter"]}

    def invert(self, prediction: Prediction, predict_phase_state: Any) -> Prediction:
        inverter = predict_phase_state["inverter"]

        def _inverse(values: np.ndarray) -> np.ndarray:
            probe = Prediction(row_ids=prediction.row_ids, response=values)
            return self._response_of(inverter(probe), len(prediction))

        response = self._response_of(inverter(prediction), len(prediction))
        return Prediction(
            row_ids=prediction.row_ids,
            response=response,
            truth=self.restore_truth(prediction, _inverse),
        )

    def _response_of(self, inverted: Any, n: int) -> np.ndarray:
        if not isinstance(inverted, Mapping) or "response" not in inverted:
            raise InversionError(
                f"Stage '{self.id}': inverter must return a mapping with a 'response' entry, "
                f"got {type(inverted).__name__}."
            )
        response = np.asarray(inverted["response"], dtype=float).ravel()
        if len(response) != n:
            raise InversionError(
                f"Stage '{self.id}': inverter returned {len(response)} responses for {n} rows."
            )
        return response
