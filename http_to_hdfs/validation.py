"""
Accumulating validation: every rule runs and each violation is recorded
against the property it concerns.
"""
from dataclasses import dataclass
from typing import Iterable, List, Optional

from .errors import ConfigurationError


@dataclass(frozen=True)
class ValidationFailure:
    field: str
    message: str
    corrective_action: Optional[str] = None

    def __str__(self) -> str:
        if self.corrective_action:
            return f"[{self.field}] {self.message} {self.corrective_action}"
        return f"[{self.field}] {self.message}"


class FailureCollector:
    """Collects validation failures for one stage."""

    def __init__(self, stage: str = "HTTPToHDFS"):
        self.stage = stage
        self._failures: List[ValidationFailure] = []

    def add_failure(self, field: str, message: str, corrective_action: str = None) -> ValidationFailure:
        failure = ValidationFailure(field, message, corrective_action)
        self._failures.append(failure)
        return failure

    def extend(self, failures: Iterable[ValidationFailure]):
        self._failures.extend(failures)

    @property
    def failures(self) -> List[ValidationFailure]:
        return list(self._failures)

    def fields(self) -> List[str]:
        return [failure.field for failure in self._failures]

    def get_or_raise(self):
        """Raise a ConfigurationError carrying every failure collected so far."""
        if self._failures:
            raise ConfigurationError(self._failures)
