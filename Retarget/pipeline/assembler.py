# Retarget/pipeline/assembler.py
from __future__ import annotations

import logging
from typing import Any, Optional

from ..core.errors import ConfigurationError
from ..trafos.base import TransformStage
from ..trafos.invert import InvertStage
from ..trafos.mutate import MutateStage
from .config import AssemblerConfig
from .graph import Graph, GraphPredictor
from .stage import LearnerStage

LOGGER = logging.getLogger(__name__)


class GraphAssembler:
    """
    Builds the canonical target-transformation graph around a predictor:

        trafo.output ----------> learner.input
        learner.output --------> invert.prediction
        trafo.fun -------------> invert.fun

    The result is a GraphPredictor: fit(task) / predict(task) like the bare
    predictor, with predictions on the original target scale. Any
    TransformStage subclass can be plugged in; the wiring does not change.
    """

    def __init__(self, config: Optional[AssemblerConfig] = None):
        self.config = config or AssemblerConfig()

    def assemble(self, predictor: Any, trafo: Optional[TransformStage] = None) -> GraphPredictor:
        cfg = self.config
        trafo = trafo if trafo is not None else MutateStage()
        if not isinstance(trafo, TransformStage):
            raise ConfigurationError(
                f"trafo must be a TransformStage, got {type(trafo).__name__}."
            )
        if cfg.unsupported_columns is not None:
            trafo.set_params(unsupported_columns=cfg.unsupported_columns)
        policy = trafo.get_params()["unsupported_columns"]

        learner = LearnerStage(predictor, stage_id=cfg.learner_id)
        invert = InvertStage(cfg.invert_id)

        graph = Graph()
        graph.add_stage(trafo).add_stage(learner).add_stage(invert)
        graph.add_edge(trafo.id, learner.id, src_channel="output", dst_channel="input")
        graph.add_edge(learner.id, invert.id, src_channel="output", dst_channel="prediction")
        graph.add_edge(trafo.id, invert.id, src_channel="fun", dst_channel="fun")

        predict_type = learner.predict_type
        if predict_type == "se" and "se" not in trafo.invertible_columns:
            note = (
                f"Predictor '{learner.id}' reports standard errors, but '{trafo.id}' cannot "
                f"back-transform them; se is {'rejected' if policy == 'error' else 'dropped'} "
                f"from predictions."
            )
            graph.notes.append(note)
            if cfg.warn_on_se:
                LOGGER.warning(note)
            predict_type = "response"

        return GraphPredictor(graph, predictor_id=f"{trafo.id}_{learner.id}", predict_type=predict_type)


def target_trafo_graph(
    predictor: Any,
    trafo: Optional[TransformStage] = None,
    **config: Any,
) -> GraphPredictor:
    """Shortcut for GraphAssembler(AssemblerConfig(**config)).assemble(predictor, trafo)."""
    return GraphAssembler(AssemblerConfig(**config)).assemble(predictor, trafo)
