# Retarget/__init__.py

# -------------------------
# Core data model
# -------------------------
from .core import (
    Phase,
    Task,
    Prediction,
    RetargetError,
    ConfigurationError,
    PhaseSequenceError,
    TransformComputationError,
    InversionError,
)

# -------------------------
# Target transformation stages
# -------------------------
from .trafos import (
    TransformStage,
    InverseFunction,
    MutateStage,
    InvertStage,
    ScaleRangeStage,
    BoxCoxStage,
)

# -------------------------
# Graph composition
# -------------------------
from .pipeline import (
    Channel,
    Stage,
    LearnerStage,
    Graph,
    GraphPredictor,
    AssemblerConfig,
    GraphAssembler,
    target_trafo_graph,
)

# -------------------------
# Bundled learners
# -------------------------
from .learners import MeanRegressor, OLSRegressor, Predictor

__all__ = [
    # core
    "Phase",
    "Task",
    "Prediction",
    "RetargetError",
    "ConfigurationError",
    "PhaseSequenceError",
    "TransformComputationError",
    "InversionError",
    # trafos
    "TransformStage",
    "InverseFunction",
    "MutateStage",
    "InvertStage",
    "ScaleRangeStage",
    "BoxCoxStage",
    # pipeline
    "Channel",
    "Stage",
    "LearnerStage",
    "Graph",
    "GraphPredictor",
    "AssemblerConfig",
    "GraphAssembler",
    "target_trafo_graph",
    # learners
    "Predictor",
    "MeanRegressor",
    "OLSRegressor",
]
