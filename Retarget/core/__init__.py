# Retarget/core/__init__.py
from .errors import (
    RetargetError,
    ConfigurationError,
    PhaseSequenceError,
    TransformComputationError,
    InversionError,
)
from .measures import MEASURES, get_measure
from .phase import Phase
from .prediction import Prediction
from .stage import Channel, Stage
from .task import Task

__all__ = [
    "RetargetError",
    "ConfigurationError",
    "PhaseSequenceError",
    "TransformComputationError",
    "InversionError",
    "MEASURES",
    "get_measure",
    "Phase",
    "Prediction",
    "Channel",
    "Stage",
    "Task",
]
