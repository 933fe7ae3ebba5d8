# Retarget/trafos/base.py
from __future__ import annotations

import logging
from abc import abstractmethod
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Dict, FrozenSet, Mapping, Optional, Tuple

import numpy as np
import pandas as pd

from ..core.errors import ConfigurationError, InversionError
from ..core.phase import Phase
from ..core.prediction import Prediction
from ..core.task import Task
from ..core.stage import Channel, Stage

LOGGER = logging.getLogger(__name__)

UNSUPPORTED_POLICIES = ("drop", "error")


@dataclass(frozen=True)
class InverseFunction:
    """
    Owned, inspectable inverse of one trained TransformStage.

    Holds the stage's invert callable together with the PredictPhaseState
    captured at training time. Calling it:
      1) removes output columns the stage cannot invert (or raises, per policy)
      2) applies invert(prediction, state)
      3) checks the result is row-aligned with the input
    """
    stage_id: str
    invert: Callable[[Prediction, Any], Prediction]
    state: Any
    invertible_columns: FrozenSet[str] = frozenset({"response"})
    unsupported_columns: str = "drop"

    def __call__(self, prediction: Prediction) -> Prediction:
        unsupported = [c for c in prediction.output_columns if c not in self.invertible_columns]
        if unsupported:
            if self.unsupported_columns == "error":
                raise InversionError(
                    f"Stage '{self.stage_id}' cannot invert prediction column(s) {unsupported}."
                )
            LOGGER.warning(
                "Stage '%s' cannot invert column(s) %s; dropping them from the prediction.",
                self.stage_id,
                unsupported,
            )
            prediction = prediction.without(unsupported)

        result = self.invert(prediction, self.state)

        if not isinstance(result, Prediction):
            raise InversionError(
                f"Stage '{self.stage_id}' invert returned {type(result).__name__}, expected Prediction."
            )
        if result.row_ids != prediction.row_ids:
            raise InversionError(
                f"Stage '{self.stage_id}' invert changed the row ids "
                f"({len(prediction)} rows in, {len(result)} rows out)."
            )
        return result


class TransformStage(Stage):
    """
    Base for reversible target transformations.

    Channels:
      input  (Task)             -> both phases
      fun    (InverseFunction)  <- None during TRAIN, the trained inverse during PREDICT
      output (Task)             <- task with the target replaced by its transform

    Hooks (override as needed):
      - compute_state(task)          TRAIN only, once; default: empty state
      - transform(task, phase)       mandatory; must not mutate self.state
      - train_invert(task)           TRAIN only, on the pre-transform task;
                                     default: {"truth": original target}
      - invert(prediction, state)    mandatory; pure in its arguments

    The stored state is read-only and is replaced wholesale by the next TRAIN call.
    """

    input_channels = (Channel("input", "Task"),)
    output_channels = (Channel("fun", "InverseFunction"), Channel("output", "Task"))

    # Output columns (besides response) that invert() handles correctly.
    invertible_columns: Tuple[str, ...] = ()

    def __init__(self, stage_id: str, params: Optional[Mapping[str, Any]] = None) -> None:
        self.state: Optional[Mapping[str, Any]] = None
        self.inverse_fn: Optional[InverseFunction] = None
        super().__init__(stage_id, params)

    def default_params(self) -> Dict[str, Any]:
        return {"unsupported_columns": "drop", "new_target_name": None}

    def check_params(self) -> None:
        policy = self.params.get("unsupported_columns")
        if policy not in UNSUPPORTED_POLICIES:
            raise ConfigurationError(
                f"Stage '{self.id}': unsupported_columns must be one of {UNSUPPORTED_POLICIES}, got {policy!r}."
            )

    # ---------------------------
    # Hooks
    # ---------------------------
    def compute_state(self, task: Task) -> Mapping[str, Any]:
        return {}

    @abstractmethod
    def transform(self, task: Task, phase: Phase) -> Task:
        ...

    def train_invert(self, task: Task) -> Any:
        """
        PredictPhaseState for invert(). The default keeps the training truth
        (copied, so later edits to the caller's frame cannot reach it) for
        subclasses that need it; the bundled stages do not read it, since
        predict-time truth is rebuilt with restore_truth().
        """
        truth = task.truth_column()
        return {"truth": pd.Series(truth.to_numpy(copy=True), index=truth.index, name=truth.name)}

    @abstractmethod
    def invert(self, prediction: Prediction, predict_phase_state: Any) -> Prediction:
        ...

    # ---------------------------
    # Phase wiring
    # ---------------------------
    def _train(self, inputs: Dict[str, Any]) -> Dict[str, Any]:
        self.check_params()
        task: Task = inputs["input"]

        # transform and train_invert read self.state, so the previous state is
        # restored if either raises; the old inverse_fn is only replaced on success
        previous = self.state
        self.state = MappingProxyType(dict(self.compute_state(task)))
        try:
            output = self.transform(task.clone(), Phase.TRAIN)
            inverse_fn = InverseFunction(
                stage_id=self.id,
                invert=self.invert,
                state=self.train_invert(task),
                invertible_columns=frozenset(("response",) + tuple(self.invertible_columns)),
                unsupported_columns=self.params["unsupported_columns"],
            )
        except Exception:
            self.state = previous
            raise

        self.inverse_fn = inverse_fn
        return {"fun": None, "output": output}

    def _predict(self, inputs: Dict[str, Any]) -> Dict[str, Any]:
        self.check_params()
        output = self.transform(inputs["input"].clone(), Phase.PREDICT)
        return {"fun": self.inverse_fn, "output": output}

    # ---------------------------
    # Helpers for subclasses
    # ---------------------------
    def replace_target(self, task: Task, values: Any) -> Task:
        """Swap the task's single target for `values` (named by new_target_name)."""
        old_name = task.truth_column().name
        new_name = self.params["new_target_name"] or f"{old_name}_trafo"
        task.append_columns({new_name: values})
        return task.redefine_target([new_name], drop_originals=True)

    @staticmethod
    def restore_truth(
        prediction: Prediction,
        inverse: Callable[[np.ndarray], np.ndarray],
    ) -> Optional[np.ndarray]:
        """Map the transformed truth carried by the prediction back to the original scale."""
        if prediction.truth is None:
            return None
        return np.asarray(inverse(prediction.truth), dtype=float)
