"""
Action to fetch data from an external http endpoint and create a file in HDFS.

One run validates the configuration, then makes up to numRetries + 1
attempts, stopping at the first success. Malformed URLs and requests the
client refuses to send abort the run straight away.
"""
import json
from dataclasses import dataclass, field
from typing import Dict, Union

import httpx
import structlog

from .config import ActionConfig, OutputTarget, RequestSpec
from .context import PipelineConfigurer, RunContext
from .errors import ConnectionProtocolError, TransientExecutionError
from .fetcher import FetchResult, HTTPFetcher
from .storage import FileSink

logger = structlog.get_logger(__name__)

FATAL_ERRORS = (httpx.InvalidURL, httpx.UnsupportedProtocol, httpx.LocalProtocolError)


@dataclass(frozen=True)
class ExecutionResult:
    path: str
    headers: Dict[str, str] = field(default_factory=dict)
    attempts: int = 1
    status_code: int = 200


@dataclass(frozen=True)
class Success:
    result: FetchResult


@dataclass(frozen=True)
class RetryableFailure:
    error: Exception


@dataclass(frozen=True)
class FatalFailure:
    error: Exception


AttemptOutcome = Union[Success, RetryableFailure, FatalFailure]


class HTTPToHDFSAction:
    """Fetches one URL and writes the response body to the destination path."""

    def __init__(self, config: ActionConfig, fetcher: HTTPFetcher = None, storage_options: dict = None):
        self.config = config
        self.fetcher = fetcher or HTTPFetcher()
        self.storage_options = storage_options or {}

    def configure_pipeline(self, configurer: PipelineConfigurer):
        """Static check at deploy time; fields holding macros are checked again in run()."""
        configurer.failure_collector.extend(self.config.validate())

    def run(self, context: RunContext) -> ExecutionResult:
        config = self.config.with_arguments(context.arguments)
        collector = context.failure_collector
        collector.extend(config.unresolved_macros())
        collector.extend(config.validate())
        if collector.failures:
            logger.error("configuration_invalid", failures=[str(failure) for failure in collector.failures])
        collector.get_or_raise()

        spec = config.to_request_spec()
        target = config.to_output_target()

        last_failure = None
        for attempt in range(1, spec.attempts + 1):
            outcome = self._attempt(spec, target, attempt)

            if isinstance(outcome, Success):
                return self._publish(context, target, outcome.result, attempt)

            if isinstance(outcome, FatalFailure):
                logger.error("request_failed_fatal", method=spec.method, url=spec.url,
                             error=str(outcome.error))
                raise ConnectionProtocolError(
                    f"Error opening url connection. Reason: {outcome.error}") from outcome.error

            last_failure = outcome

        logger.error("request_retries_exhausted", method=spec.method, url=spec.url,
                     attempts=spec.attempts, error=str(last_failure.error))
        raise TransientExecutionError(
            f"Request to {spec.url} failed after {spec.attempts} attempt(s): {last_failure.error}",
            attempts=spec.attempts,
            last_error=last_failure.error,
        ) from last_failure.error

    def _attempt(self, spec: RequestSpec, target: OutputTarget, attempt: int) -> AttemptOutcome:
        logger.debug("request_attempt_started", method=spec.method, url=spec.url, attempt=attempt)
        try:
            sink = FileSink(target.destination_path, self.storage_options)
            return Success(self.fetcher.fetch(spec, target, sink))
        except FATAL_ERRORS as e:
            return FatalFailure(e)
        except Exception as e:
            logger.warning("request_attempt_failed",
                           method=spec.method,
                           url=spec.url,
                           headers=spec.headers,
                           attempt=attempt,
                           attempts=spec.attempts,
                           error=str(e))
            return RetryableFailure(e)

    def _publish(self, context: RunContext, target: OutputTarget, result: FetchResult,
                 attempts: int) -> ExecutionResult:
        context.arguments.set(target.result_path_var_name, target.destination_path)
        context.arguments.set(target.response_headers_var_name, json.dumps(result.headers))
        logger.info("request_succeeded",
                    url=result.url,
                    status_code=result.status_code,
                    path=target.destination_path,
                    bytes_written=result.bytes_written,
                    attempts=attempts)
        return ExecutionResult(
            path=target.destination_path,
            headers=result.headers,
            attempts=attempts,
            status_code=result.status_code,
        )
