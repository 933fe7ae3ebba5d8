# Retarget/core/task.py
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd


class Task:
    """
    Tabular supervised-learning dataset.

    Owns:
      - data: a private copy of the input frame (index = row identifiers)
      - target_names: the columns the predictor must learn

    Every column that is not a target is a feature. Mutating operations
    (append_columns, rename_columns, redefine_target) change the task in place
    and return it so calls can be chained. Use clone() before mutating a task
    you do not own.
    """

    def __init__(
        self,
        data: pd.DataFrame,
        target: Union[str, Sequence[str]],
        task_id: str = "task",
    ) -> None:
        if not isinstance(data, pd.DataFrame):
            raise TypeError(f"Task expects a pandas DataFrame, got {type(data)}")

        targets = [target] if isinstance(target, str) else list(target)
        if not targets:
            raise ValueError("Task needs at least one target column.")
        missing = [t for t in targets if t not in data.columns]
        if missing:
            raise KeyError(f"Target column(s) {missing} not found. Available: {list(data.columns)}")
        if not data.index.is_unique:
            raise ValueError("Task row identifiers (frame index) must be unique.")

        self.id = task_id
        self.data = data.copy()
        self._targets: List[str] = targets

    # ---------------------------
    # Column roles
    # ---------------------------
    @property
    def target_names(self) -> List[str]:
        return list(self._targets)

    @property
    def feature_names(self) -> List[str]:
        return [c for c in self.data.columns if c not in self._targets]

    @property
    def row_ids(self) -> List[Any]:
        return list(self.data.index)

    @property
    def nrow(self) -> int:
        return len(self.data)

    def __len__(self) -> int:
        return self.nrow

    def __repr__(self) -> str:
        return (
            f"Task(id={self.id!r}, nrow={self.nrow}, target={self._targets}, "
            f"features={self.feature_names})"
        )

    # ---------------------------
    # Reads
    # ---------------------------
    def get_column(self, name: str) -> pd.Series:
        if name not in self.data.columns:
            raise KeyError(f"Column '{name}' not found. Available: {list(self.data.columns)}")
        return self.data[name]

    def truth_column(self, name: Optional[str] = None) -> pd.Series:
        """Ground truth of the (single) target, or of the named target."""
        if name is None:
            if len(self._targets) != 1:
                raise ValueError(
                    f"Task has {len(self._targets)} targets {self._targets}; pass name= to pick one."
                )
            name = self._targets[0]
        if name not in self._targets:
            raise KeyError(f"'{name}' is not a target. Targets: {self._targets}")
        return self.data[name]

    def features(self) -> pd.DataFrame:
        return self.data[self.feature_names]

    # ---------------------------
    # Mutations (in place)
    # ---------------------------
    def append_columns(self, columns: Mapping[str, Any]) -> "Task":
        """
        Add new columns. Series are aligned on the row identifiers; anything
        else must be array-like with one value per row.
        """
        new: Dict[str, Any] = {}
        for name, values in columns.items():
            if name in self.data.columns:
                raise ValueError(f"Column '{name}' already exists in task '{self.id}'.")
            if isinstance(values, pd.Series):
                if not values.index.equals(self.data.index):
                    raise ValueError(f"Column '{name}' is not aligned with the task rows.")
                new[name] = values.to_numpy()
            else:
                arr = np.asarray(values)
                if arr.ndim != 1 or len(arr) != self.nrow:
                    raise ValueError(
                        f"Column '{name}' has shape {arr.shape}; expected ({self.nrow},)."
                    )
                new[name] = arr

        for name, arr in new.items():
            self.data[name] = arr
        return self

    def rename_columns(self, mapping: Mapping[str, str]) -> "Task":
        missing = [old for old in mapping if old not in self.data.columns]
        if missing:
            raise KeyError(f"Cannot rename unknown column(s) {missing}.")
        self.data = self.data.rename(columns=dict(mapping))
        self._targets = [mapping.get(t, t) for t in self._targets]
        return self

    def redefine_target(self, column_names: Iterable[str], drop_originals: bool = True) -> "Task":
        """
        Make column_names the new targets.

        drop_originals=True removes the previous target columns from the data;
        otherwise they stay behind as ordinary features.
        """
        new_targets = list(column_names)
        if not new_targets:
            raise ValueError("redefine_target needs at least one column.")
        missing = [c for c in new_targets if c not in self.data.columns]
        if missing:
            raise KeyError(f"New target column(s) {missing} not found in task '{self.id}'.")

        old_targets = [t for t in self._targets if t not in new_targets]
        if drop_originals and old_targets:
            self.data = self.data.drop(columns=old_targets)
        self._targets = new_targets
        return self

    # ---------------------------
    # Copies
    # ---------------------------
    def filter(self, row_ids: Iterable[Any]) -> "Task":
        """New task restricted to row_ids (in the given order)."""
        ids = list(row_ids)
        unknown = [r for r in ids if r not in self.data.index]
        if unknown:
            raise KeyError(f"Unknown row id(s) {unknown[:5]} for task '{self.id}'.")
        return Task(self.data.loc[ids], self._targets, task_id=self.id)

    def clone(self) -> "Task":
        return Task(self.data, self._targets, task_id=self.id)
