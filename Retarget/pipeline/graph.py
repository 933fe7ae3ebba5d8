# Retarget/pipeline/graph.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..core.errors import ConfigurationError, PhaseSequenceError
from ..core.phase import Phase
from ..core.prediction import Prediction
from ..core.task import Task
from ..core.stage import Stage

LOGGER = logging.getLogger(__name__)

Port = Tuple[str, str]  # (stage id, channel name)


@dataclass(frozen=True)
class Edge:
    src_id: str
    src_channel: str
    dst_id: str
    dst_channel: str


class Graph:
    """
    Directed acyclic graph of Stages connected through named channels.

    Wiring rules (checked by validate()):
      - no cycles
      - each input channel is fed by at most one edge
      - each output channel feeds at most one input
      - exactly one input channel is left unconnected: the graph input (a Task)
      - exactly one output channel is left unconnected: the graph output

    train()/predict() run the stages in a stable topological order with an
    explicit Phase. Values travel along edges; a stage that emits None on a
    channel during TRAIN (e.g. a learner's prediction) simply forwards None.
    """

    def __init__(self) -> None:
        self.stages: Dict[str, Stage] = {}
        self.edges: List[Edge] = []
        self.notes: List[str] = []
        self.is_trained = False

    def __repr__(self) -> str:
        return f"Graph(stages={list(self.stages)}, edges={len(self.edges)}, trained={self.is_trained})"

    # ---------------------------
    # Construction
    # ---------------------------
    def add_stage(self, stage: Stage) -> "Graph":
        if stage.id in self.stages:
            raise ConfigurationError(f"Stage id '{stage.id}' is already used in this graph.")
        if "." in stage.id:
            raise ConfigurationError(f"Stage id '{stage.id}' must not contain '.'.")
        self.stages[stage.id] = stage
        self.is_trained = False
        return self

    def add_edge(
        self,
        src_id: str,
        dst_id: str,
        src_channel: Optional[str] = None,
        dst_channel: Optional[str] = None,
    ) -> "Graph":
        src = self._stage(src_id)
        dst = self._stage(dst_id)
        out_ch = src.output_channel(src_channel)
        in_ch = dst.input_channel(dst_channel)

        if not in_ch.accepts(out_ch):
            raise ConfigurationError(
                f"Cannot connect {src_id}.{out_ch.name} ({out_ch.kind}) to "
                f"{dst_id}.{in_ch.name} ({in_ch.kind})."
            )
        for e in self.edges:
            if (e.dst_id, e.dst_channel) == (dst_id, in_ch.name):
                raise ConfigurationError(f"Input {dst_id}.{in_ch.name} is already connected.")
            if (e.src_id, e.src_channel) == (src_id, out_ch.name):
                raise ConfigurationError(f"Output {src_id}.{out_ch.name} is already connected.")

        self.edges.append(Edge(src_id, out_ch.name, dst_id, in_ch.name))
        self.is_trained = False
        return self

    def _stage(self, stage_id: str) -> Stage:
        if stage_id not in self.stages:
            raise ConfigurationError(f"Stage '{stage_id}' not found. Available: {list(self.stages)}")
        return self.stages[stage_id]

    # ---------------------------
    # Structure
    # ---------------------------
    def input_ports(self) -> List[Port]:
        connected = {(e.dst_id, e.dst_channel) for e in self.edges}
        return [
            (sid, c.name)
            for sid, s in self.stages.items()
            for c in s.input_channels
            if (sid, c.name) not in connected
        ]

    def output_ports(self) -> List[Port]:
        connected = {(e.src_id, e.src_channel) for e in self.edges}
        return [
            (sid, c.name)
            for sid, s in self.stages.items()
            for c in s.output_channels
            if (sid, c.name) not in connected
        ]

    def topological_order(self) -> List[str]:
        """Kahn's algorithm; ties broken by insertion order so runs are deterministic."""
        indegree = {sid: 0 for sid in self.stages}
        for e in self.edges:
            indegree[e.dst_id] += 1

        order: List[str] = []
        ready = [sid for sid in self.stages if indegree[sid] == 0]
        while ready:
            sid = ready.pop(0)
            order.append(sid)
            for e in self.edges:
                if e.src_id == sid:
                    indegree[e.dst_id] -= 1
                    if indegree[e.dst_id] == 0:
                        ready.append(e.dst_id)

        if len(order) != len(self.stages):
            cyclic = [sid for sid in self.stages if sid not in order]
            raise ConfigurationError(f"Graph contains a cycle through stages {cyclic}.")
        return order

    def validate(self) -> List[str]:
        if not self.stages:
            raise ConfigurationError("Graph has no stages.")
        order = self.topological_order()

        inputs = self.input_ports()
        if len(inputs) != 1:
            raise ConfigurationError(
                f"Graph must have exactly one unconnected input channel, found {inputs}."
            )
        outputs = self.output_ports()
        if len(outputs) != 1:
            raise ConfigurationError(
                f"Graph must have exactly one unconnected output channel, found {outputs}."
            )
        return order

    # ---------------------------
    # Execution
    # ---------------------------
    def run(self, task: Task, phase: Phase) -> Any:
        order = self.validate()
        if phase is Phase.PREDICT and not self.is_trained:
            raise PhaseSequenceError("Graph cannot predict before it has been trained.")
        LOGGER.debug("Graph %s order: %s", phase.value, order)

        retraining = self.is_trained
        if phase is Phase.TRAIN:
            # stages already retrained must not be mixed with stale ones if a later stage fails
            self.is_trained = False

        (in_id, in_channel), = self.input_ports()
        (out_id, out_channel), = self.output_ports()

        result: Any = None
        values: Dict[Port, Any] = {(in_id, in_channel): task}
        for sid in order:
            stage = self.stages[sid]
            inputs = {c.name: values.pop((sid, c.name)) for c in stage.input_channels}
            outputs = stage.run(inputs, phase)
            for e in self.edges:
                if e.src_id == sid:
                    values[(e.dst_id, e.dst_channel)] = outputs[e.src_channel]
            if sid == out_id:
                result = outputs[out_channel]

        if phase is Phase.TRAIN:
            LOGGER.info("Graph %s (%d stages).", "retrained" if retraining else "trained", len(order))
            self.is_trained = True
        return result

    def train(self, task: Task) -> "Graph":
        self.run(task, Phase.TRAIN)
        return self

    def predict(self, task: Task) -> Any:
        return self.run(task, Phase.PREDICT)

    # ---------------------------
    # Configuration
    # ---------------------------
    def get_config(self) -> Dict[str, Any]:
        """All stage parameters under qualified names '<stage-id>.<param>'."""
        return {
            f"{sid}.{name}": value
            for sid, stage in self.stages.items()
            for name, value in stage.get_params().items()
        }

    def set_config(self, values: Mapping[str, Any]) -> "Graph":
        grouped: Dict[str, Dict[str, Any]] = {}
        for key, value in values.items():
            sid, sep, name = key.partition(".")
            if not sep or not name:
                raise ConfigurationError(f"Config key '{key}' is not of the form '<stage-id>.<param>'.")
            self._stage(sid)
            grouped.setdefault(sid, {})[name] = value
        for sid, params in grouped.items():
            self.stages[sid].set_params(**params)
        return self


class GraphPredictor:
    """
    A Graph behind the plain Predictor contract: fit(task) / predict(task).

    Concurrency: once fit() has returned, predict() only reads trained state,
    so concurrent predict() calls may share one instance. fit() must not run
    concurrently with fit() or predict() on the same instance; serialise it
    in the caller.
    """

    def __init__(self, graph: Graph, predictor_id: str = "graph", predict_type: str = "response") -> None:
        graph.validate()
        self.graph = graph
        self.id = predictor_id
        self.predict_type = predict_type

    def __repr__(self) -> str:
        return f"GraphPredictor(id={self.id!r}, stages={list(self.graph.stages)})"

    @property
    def is_trained(self) -> bool:
        return self.graph.is_trained

    @property
    def notes(self) -> List[str]:
        return self.graph.notes

    def fit(self, task: Task) -> "GraphPredictor":
        self.graph.train(task)
        return self

    def predict(self, task: Task) -> Prediction:
        result = self.graph.predict(task)
        if not isinstance(result, Prediction):
            raise PhaseSequenceError(
                f"Graph '{self.id}' produced {type(result).__name__} at predict time, expected Prediction."
            )
        return result

    def get_config(self) -> Dict[str, Any]:
        return self.graph.get_config()

    def set_config(self, values: Mapping[str, Any]) -> "GraphPredictor":
        self.graph.set_config(values)
        return self
