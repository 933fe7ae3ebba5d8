# Retarget/core/prediction.py
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from .measures import get_measure


def _as_column(values: Any) -> np.ndarray:
    if isinstance(values, pd.Series):
        values = values.to_numpy()
    return np.asarray(values, dtype=float).ravel()


@dataclass
class Prediction:
    """
    Output of a predictor, aligned to the rows of the task it predicted on.

    Output columns:
      - response: always present
      - se: optional standard error of the response
      - extra: any further named columns (probabilities, quantiles, ...)

    truth is the ground truth of the predicted rows when the task carried it.
    """
    row_ids: List[Any]
    response: np.ndarray
    truth: Optional[np.ndarray] = None
    se: Optional[np.ndarray] = None
    extra: Dict[str, np.ndarray] = field(default_factory=dict)

    def __post_init__(self):
        self.row_ids = list(self.row_ids)
        self.response = _as_column(self.response)
        if self.truth is not None:
            self.truth = _as_column(self.truth)
        if self.se is not None:
            self.se = _as_column(self.se)
        self.extra = {k: np.asarray(v) for k, v in self.extra.items()}

        n = len(self.row_ids)
        columns = {"response": self.response, "truth": self.truth, "se": self.se, **self.extra}
        for name, values in columns.items():
            if values is not None and len(values) != n:
                raise ValueError(
                    f"Prediction column '{name}' has {len(values)} values for {n} row ids."
                )

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Prediction":
        """Build from {row_ids, response, truth?, se?, <other columns>?}."""
        if "row_ids" not in payload or "response" not in payload:
            raise KeyError("Prediction.from_dict needs at least 'row_ids' and 'response'.")
        known = {"row_ids", "response", "truth", "se"}
        return cls(
            row_ids=payload["row_ids"],
            response=payload["response"],
            truth=payload.get("truth"),
            se=payload.get("se"),
            extra={k: v for k, v in payload.items() if k not in known},
        )

    def __len__(self) -> int:
        return len(self.row_ids)

    @property
    def output_columns(self) -> List[str]:
        cols = ["response"]
        if self.se is not None:
            cols.append("se")
        cols.extend(self.extra.keys())
        return cols

    def replace(self, **changes: Any) -> "Prediction":
        return replace(self, **changes)

    def without(self, columns: Iterable[str]) -> "Prediction":
        """Copy with the named non-response output columns removed."""
        drop = set(columns)
        if "response" in drop:
            raise ValueError("The response column cannot be dropped from a Prediction.")
        return replace(
            self,
            se=None if "se" in drop else self.se,
            extra={k: v for k, v in self.extra.items() if k not in drop},
        )

    def as_frame(self) -> pd.DataFrame:
        data: Dict[str, Any] = {}
        if self.truth is not None:
            data["truth"] = self.truth
        data["response"] = self.response
        if self.se is not None:
            data["se"] = self.se
        data.update(self.extra)
        return pd.DataFrame(data, index=pd.Index(self.row_ids, name="row_id"))

    def score(self, measures: Sequence[str] = ("rmse",)) -> Dict[str, float]:
        if self.truth is None:
            raise ValueError("Cannot score a Prediction without truth.")
        return {name: get_measure(name)(self.truth, self.response) for name in measures}
