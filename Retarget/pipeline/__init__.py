# Retarget/pipeline/__init__.py
from ..core.stage import Channel, Stage
from .stage import LearnerStage
from .graph import Edge, Graph, GraphPredictor
from .config import AssemblerConfig
from .assembler import GraphAssembler, target_trafo_graph

__all__ = [
    "Channel",
    "Stage",
    "LearnerStage",
    "Edge",
    "Graph",
    "GraphPredictor",
    "AssemblerConfig",
    "GraphAssembler",
    "target_trafo_graph",
]
