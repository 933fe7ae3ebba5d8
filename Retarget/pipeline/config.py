# Retarget/pipeline/config.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional


@dataclass(frozen=True)
class AssemblerConfig:
    """
    Options for GraphAssembler.

    - learner_id: stage id of the wrapped predictor (default: its `id`, else "learner")
    - invert_id: stage id of the terminal InvertStage
    - unsupported_columns: how the transform stage treats prediction columns it
      cannot invert ("drop" with a warning, or "error"); None keeps the
      stage's own setting
    - warn_on_se: log and note a diagnostic when an se-producing predictor is
      wrapped by a transform that cannot invert se
    """
    learner_id: Optional[str] = None
    invert_id: str = "targetinvert"
    unsupported_columns: Optional[Literal["drop", "error"]] = None
    warn_on_se: bool = True
