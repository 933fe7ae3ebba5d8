# Retarget/core/stage.py
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from .errors import ConfigurationError, PhaseSequenceError
from .phase import Phase

LOGGER = logging.getLogger(__name__)

ANY = "*"


@dataclass(frozen=True)
class Channel:
    """A named input or output port of a Stage. kind='*' accepts anything."""
    name: str
    kind: str = ANY

    def accepts(self, other: "Channel") -> bool:
        return ANY in (self.kind, other.kind) or self.kind == other.kind


class Stage(ABC):
    """
    Unit of a pipeline graph.

    Contract:
      - input_channels / output_channels declare the named ports
      - run(inputs, phase) receives one value per input channel and returns
        one value per output channel
      - state machine: UNTRAINED -> TRAINED on a successful TRAIN call;
        a TRAIN call that raises leaves the stage UNTRAINED;
        PREDICT while UNTRAINED is a PhaseSequenceError

    Subclasses implement _train and _predict, and declare their configurable
    parameters (with defaults) in default_params().
    """

    input_channels: Tuple[Channel, ...] = ()
    output_channels: Tuple[Channel, ...] = ()

    def __init__(self, stage_id: str, params: Optional[Mapping[str, Any]] = None) -> None:
        self.id = stage_id
        self.params: Dict[str, Any] = dict(self.default_params())
        self.is_trained = False
        if params:
            self.set_params(**params)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r}, trained={self.is_trained})"

    # ---------------------------
    # Parameters
    # ---------------------------
    def default_params(self) -> Dict[str, Any]:
        return {}

    def get_params(self) -> Dict[str, Any]:
        return dict(self.params)

    def set_params(self, **values: Any) -> "Stage":
        unknown = [k for k in values if k not in self.params]
        if unknown:
            raise ConfigurationError(
                f"Stage '{self.id}' has no parameter(s) {unknown}. Known: {list(self.params)}"
            )
        self.params.update(values)
        return self

    def input_channel(self, name: Optional[str]) -> Channel:
        return self._channel(self.input_channels, name, "input")

    def output_channel(self, name: Optional[str]) -> Channel:
        return self._channel(self.output_channels, name, "output")

    def _channel(self, channels: Tuple[Channel, ...], name: Optional[str], side: str) -> Channel:
        if name is None:
            if len(channels) != 1:
                raise ConfigurationError(
                    f"Stage '{self.id}' has {len(channels)} {side} channels; name one of "
                    f"{[c.name for c in channels]}."
                )
            return channels[0]
        for c in channels:
            if c.name == name:
                return c
        raise ConfigurationError(
            f"Stage '{self.id}' has no {side} channel '{name}'. "
            f"Available: {[c.name for c in channels]}"
        )

    # ---------------------------
    # Execution
    # ---------------------------
    def run(self, inputs: Mapping[str, Any], phase: Phase) -> Dict[str, Any]:
        expected = {c.name for c in self.input_channels}
        if set(inputs) != expected:
            raise ConfigurationError(
                f"Stage '{self.id}' expects inputs {sorted(expected)}, got {sorted(inputs)}."
            )

        LOGGER.debug("Running stage '%s' (%s)", self.id, phase.value)
        if phase is Phase.TRAIN:
            # a failed (re)train leaves the stage untrained
            self.is_trained = False
            outputs = self._train(dict(inputs))
            self.is_trained = True
        elif phase is Phase.PREDICT:
            if not self.is_trained:
                raise PhaseSequenceError(
                    f"Stage '{self.id}' cannot predict before it has been trained."
                )
            outputs = self._predict(dict(inputs))
        else:
            raise ValueError(f"Unknown phase: {phase}")

        produced = {c.name for c in self.output_channels}
        if set(outputs) != produced:
            raise ConfigurationError(
                f"Stage '{self.id}' produced outputs {sorted(outputs)}, declared {sorted(produced)}."
            )
        return outputs

    @abstractmethod
    def _train(self, inputs: Dict[str, Any]) -> Dict[str, Any]:
        ...

    @abstractmethod
    def _predict(self, inputs: Dict[str, Any]) -> Dict[str, Any]:
        ...
