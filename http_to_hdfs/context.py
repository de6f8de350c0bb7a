"""
Host-side objects handed to the action: the run context for one pipeline
execution and the configurer used when the pipeline is deployed.
"""
import json
from typing import Any, Dict, Iterator, Mapping, MutableMapping

from .validation import FailureCollector


class Arguments(MutableMapping):
    """String-keyed values shared between the steps of one run."""

    def __init__(self, initial: Mapping[str, Any] = None):
        self._values: Dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    def set(self, key: str, value: Any):
        self._values[key] = value if isinstance(value, str) else str(value)

    def get_json(self, key: str) -> Any:
        return json.loads(self._values[key])

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __setitem__(self, key: str, value: Any):
        self.set(key, value)

    def __delitem__(self, key: str):
        del self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Arguments({self._values!r})"


class RunContext:
    def __init__(self, arguments: Mapping[str, Any] = None, stage: str = "HTTPToHDFS"):
        self.arguments = Arguments(arguments)
        self.failure_collector = FailureCollector(stage)


class PipelineConfigurer:
    def __init__(self, stage: str = "HTTPToHDFS"):
        self.failure_collector = FailureCollector(stage)
