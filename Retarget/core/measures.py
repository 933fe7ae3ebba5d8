# Retarget/core/measures.py
from __future__ import annotations

from typing import Callable, Dict

import numpy as np


def mse(truth: np.ndarray, response: np.ndarray) -> float:
    return float(np.mean((truth - response) ** 2))


def rmse(truth: np.ndarray, response: np.ndarray) -> float:
    return float(np.sqrt(mse(truth, response)))


def mae(truth: np.ndarray, response: np.ndarray) -> float:
    return float(np.mean(np.abs(truth - response)))


def rsq(truth: np.ndarray, response: np.ndarray) -> float:
    """Coefficient of determination. NaN when truth is constant."""
    ss_tot = float(np.sum((truth - np.mean(truth)) ** 2))
    if ss_tot == 0.0:
        return float("nan")
    return 1.0 - float(np.sum((truth - response) ** 2)) / ss_tot


MEASURES: Dict[str, Callable[[np.ndarray, np.ndarray], float]] = {
    "mse": mse,
    "rmse": rmse,
    "mae": mae,
    "rsq": rsq,
}


def get_measure(name: str) -> Callable[[np.ndarray, np.ndarray], float]:
    if name not in MEASURES:
        raise KeyError(f"Measure '{name}' not found. Available: {list(MEASURES.keys())}")
    return MEASURES[name]
