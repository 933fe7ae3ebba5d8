# Retarget/trafos/__init__.py
from .base import InverseFunction, TransformStage
from .boxcox import BoxCoxStage
from .invert import InvertStage
from .mutate import MutateStage
from .scalerange import ScaleRangeStage

__all__ = [
    "InverseFunction",
    "TransformStage",
    "MutateStage",
    "InvertStage",
    "ScaleRangeStage",
    "BoxCoxStage",
]
