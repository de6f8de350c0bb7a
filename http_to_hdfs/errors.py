"""
Errors raised by the http-to-hdfs action.

Configuration problems are collected up front and raised together,
connection problems either abort the run or are retried.
"""
from typing import List, Optional


class HTTPToHDFSError(Exception):
    """Base class for every error raised by the action."""


class ConfigurationError(HTTPToHDFSError):
    """One or more configuration properties are invalid."""

    def __init__(self, failures: List = None):
        self.failures = list(failures or [])
        details = "; ".join(str(failure) for failure in self.failures)
        super().__init__(f"Errors were encountered during validation. {details}".strip())


class ConnectionProtocolError(HTTPToHDFSError):
    """The URL or the request itself can never succeed, so it is not retried."""


class TransientExecutionError(HTTPToHDFSError):
    def __init__(self, message: str, attempts: int, last_error: Optional[BaseException] = None):
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error
