# Retarget/learners/__init__.py
from .base import Predictor, Regressor
from .featureless import MeanRegressor
from .ols import OLSRegressor

__all__ = [
    "Predictor",
    "Regressor",
    "MeanRegressor",
    "OLSRegressor",
]
