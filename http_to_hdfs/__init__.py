"""
Fetch a resource over HTTP(S) and store the response body on a
(distributed) filesystem, as a single pipeline action.
"""
from .action import ExecutionResult, HTTPToHDFSAction
from .config import ActionConfig, OutputTarget, RequestSpec
from .context import PipelineConfigurer, RunContext
from .errors import (
    ConfigurationError,
    ConnectionProtocolError,
    HTTPToHDFSError,
    TransientExecutionError,
)
from .validation import FailureCollector, ValidationFailure

__version__ = "1.6.0"

__all__ = [
    "ActionConfig",
    "ConfigurationError",
    "ConnectionProtocolError",
    "ExecutionResult",
    "FailureCollector",
    "HTTPToHDFSAction",
    "HTTPToHDFSError",
    "OutputTarget",
    "PipelineConfigurer",
    "RequestSpec",
    "RunContext",
    "TransientExecutionError",
    "ValidationFailure",
]
