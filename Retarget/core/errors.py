# Retarget/core/errors.py
from __future__ import annotations


class RetargetError(Exception):
    """Base class for all errors raised by Retarget."""


class ConfigurationError(RetargetError, ValueError):
    """A stage or graph is missing a required parameter, or one has the wrong shape."""


class PhaseSequenceError(RetargetError, RuntimeError):
    """PREDICT was requested before TRAIN, or inputs do not match the current phase."""


class TransformComputationError(RetargetError, ValueError):
    """A target transform (user-supplied or fitted) failed on the given data."""


class InversionError(RetargetError, ValueError):
    """An inverse function cannot handle the Prediction it was given."""
