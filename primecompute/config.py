"""
Engine configuration.

The worker count is queried from the machine here, at the edge, and
handed to the partitioner and executor as a plain number.
"""

from dataclasses import dataclass, field, fields, replace
from multiprocessing import cpu_count
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from .errors import InvalidInput
from .executor import BACKENDS
from .partition import COST_MODELS


def default_worker_count() -> int:
    """Number of processing cores available to this process."""
    return cpu_count()


def _is_count(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


@dataclass(frozen=True)
class EngineConfig:
    workers: int = field(default_factory=default_worker_count)
    backend: str = 'process'
    oversubscription: int = 4
    cost_model: str = 'linear'
    verbose: bool = False

    def validate(self) -> 'EngineConfig':
        """Raise InvalidInput on any out-of-domain value, else return self."""
        if not _is_count(self.workers):
            raise InvalidInput(f"workers must be a positive integer, got {self.workers!r}")
        if not _is_count(self.oversubscription):
            raise InvalidInput(
                f"oversubscription must be a positive integer, got {self.oversubscription!r}"
            )
        if self.backend not in BACKENDS:
            raise InvalidInput(f"unknown backend {self.backend!r}, expected one of {BACKENDS}")
        if self.cost_model not in COST_MODELS:
            raise InvalidInput(
                f"unknown cost model {self.cost_model!r}, expected one of {COST_MODELS}"
            )
        return self

    def override(self, **values: Any) -> 'EngineConfig':
        """Copy with every non-None value replaced."""
        return replace(self, **{k: v for k, v in values.items() if v is not None})


ENGINE_KEYS = tuple(f.name for f in fields(EngineConfig))


def engine_config_from_dict(values: Dict[str, Any]) -> EngineConfig:
    """Build a validated EngineConfig from a mapping of engine keys."""
    unknown = set(values) - set(ENGINE_KEYS)
    if unknown:
        raise InvalidInput(f"unknown engine settings: {sorted(unknown)}")
    return EngineConfig().override(**values).validate()


def load_config(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a YAML run configuration.

    The file holds harness keys (max, iterations) at the top level and
    engine keys under `engine`. Returns a dict with 'max', 'iterations'
    and 'engine' (an EngineConfig).
    """
    with open(path) as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise InvalidInput(f"{path}: expected a mapping at the top level")

    unknown = set(raw) - {'max', 'iterations', 'engine'}
    if unknown:
        raise InvalidInput(f"{path}: unknown settings {sorted(unknown)}")

    return {
        'max': int(raw.get('max', 10_000_000)),
        'iterations': int(raw.get('iterations', 10)),
        'engine': engine_config_from_dict(raw.get('engine') or {}),
    }
