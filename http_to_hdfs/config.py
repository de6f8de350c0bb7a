"""
Properties of the http-to-hdfs action.

ActionConfig holds the raw values supplied by the pipeline (strings, ints
or unresolved ${macros}); once validated it is turned into the immutable
RequestSpec / OutputTarget pair the executor works with.
"""
import codecs
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union
from urllib.parse import urlsplit

from .errors import ConfigurationError
from .validation import ValidationFailure

HDFS_FILE_PATH = "hdfsFilePath"
URL = "url"
METHOD = "method"
BODY = "body"
REQUEST_HEADERS = "requestHeaders"
OUTPUT_FORMAT = "outputFormat"
CHARSET = "charset"
FOLLOW_REDIRECTS = "followRedirects"
DISABLE_SSL_VALIDATION = "disableSSLValidation"
NUM_RETRIES = "numRetries"
CONNECT_TIMEOUT = "connectTimeout"
READ_TIMEOUT = "readTimeout"
OUTPUT_PATH = "outputPath"
RESPONSE_HEADERS = "responseHeaders"

METHODS = ("GET", "POST")
OUTPUT_FORMATS = ("Text", "Binary")

MACRO_FIELDS = frozenset({
    HDFS_FILE_PATH, URL, BODY, REQUEST_HEADERS,
    CONNECT_TIMEOUT, READ_TIMEOUT, OUTPUT_PATH, RESPONSE_HEADERS,
})

DEFAULTS: Dict[str, Any] = {
    HDFS_FILE_PATH: None,
    URL: None,
    METHOD: "GET",
    BODY: None,
    REQUEST_HEADERS: None,
    OUTPUT_FORMAT: "Text",
    CHARSET: "UTF-8",
    FOLLOW_REDIRECTS: True,
    DISABLE_SSL_VALIDATION: True,
    NUM_RETRIES: 3,
    CONNECT_TIMEOUT: 60 * 1000,
    READ_TIMEOUT: 60 * 1000,
    OUTPUT_PATH: "filePath",
    RESPONSE_HEADERS: "responseHeaders",
}

KV_DELIMITER = ":"
DELIMITER = "\n"

_MACRO = re.compile(r"\$\{([^${}]+)\}")


def contains_macro(value: Any) -> bool:
    return isinstance(value, str) and _MACRO.search(value) is not None


def substitute_macros(value: Any, arguments: Mapping[str, str]) -> Any:
    """Replace every ${key} in value that arguments can resolve; unknown keys are left as they are."""
    if not isinstance(value, str):
        return value

    def _replace(match):
        key = match.group(1)
        if key in arguments:
            return str(arguments[key])
        return match.group(0)

    return _MACRO.sub(_replace, value)


def split_header_lines(headers: Optional[str]) -> List[str]:
    if not headers:
        return []
    lines = []
    for chunk in headers.split(DELIMITER):
        chunk = chunk.rstrip("\r")
        if chunk.strip():
            lines.append(chunk)
    return lines


def parse_headers(headers: Optional[str]) -> Dict[str, str]:
    """
    Parse newline separated key:value pairs into a dict.

    Each line is split on its first colon, so values may contain colons.
    Lines without a colon are skipped here; validate() reports them.
    """
    parsed: Dict[str, str] = {}
    for chunk in split_header_lines(headers):
        key_value = chunk.split(KV_DELIMITER, 1)
        if len(key_value) == 2:
            parsed[key_value[0].strip()] = key_value[1].strip()
    return parsed


def _as_int(value: Union[int, str, None]) -> Optional[int]:
    if value is None or isinstance(value, bool):
        raise ValueError(f"'{value}' is not an integer")
    if isinstance(value, int):
        return value
    return int(str(value).strip())


def _as_bool(value: Union[bool, str, None], default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() == "true"


@dataclass(frozen=True)
class RequestSpec:
    url: str
    method: str = "GET"
    body: Optional[bytes] = None
    headers: Dict[str, str] = field(default_factory=dict)
    charset: str = "UTF-8"
    connect_timeout_ms: int = 60 * 1000
    read_timeout_ms: int = 60 * 1000
    follow_redirects: bool = True
    retries: int = 3
    insecure_skip_verify: bool = True

    @property
    def attempts(self) -> int:
        return self.retries + 1


@dataclass(frozen=True)
class OutputTarget:
    destination_path: str
    output_format: str = "Text"
    result_path_var_name: str = "filePath"
    response_headers_var_name: str = "responseHeaders"

    @property
    def is_binary(self) -> bool:
        return self.output_format.lower() == "binary"


class ActionConfig:
    """Raw configuration of the action, keyed by the pipeline property names."""

    def __init__(self, properties: Mapping[str, Any] = None, **overrides):
        values = dict(DEFAULTS)
        for source in (properties or {}, overrides):
            for key, value in source.items():
                if key not in DEFAULTS:
                    raise KeyError(f"Unknown property '{key}'")
                if value is not None:
                    values[key] = value
        self._values = values

    def get(self, name: str) -> Any:
        return self._values[name]

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._values)

    def replace(self, **changes) -> "ActionConfig":
        """Return a copy with the given properties replaced (None restores the default)."""
        values = self.as_dict()
        for key, value in changes.items():
            if key not in DEFAULTS:
                raise KeyError(f"Unknown property '{key}'")
            values[key] = DEFAULTS[key] if value is None else value
        return ActionConfig(values)

    def contains_macro(self, name: str) -> bool:
        return name in MACRO_FIELDS and contains_macro(self._values[name])

    def with_arguments(self, arguments: Mapping[str, str]) -> "ActionConfig":
        """Resolve macros in macro-enabled properties from run arguments."""
        values = self.as_dict()
        for name in MACRO_FIELDS:
            values[name] = substitute_macros(values[name], arguments)
        return ActionConfig(values)

    @property
    def request_headers_map(self) -> Dict[str, str]:
        return parse_headers(self._values[REQUEST_HEADERS])

    def validate(self) -> List[ValidationFailure]:
        """Check every rule and return all the violations found; deferred (macro) fields are skipped."""
        failures: List[ValidationFailure] = []

        url = self._values[URL]
        if not self.contains_macro(URL):
            reason = _url_problem(url)
            if reason:
                failures.append(ValidationFailure(
                    URL, f"URL '{url}' is malformed: '{reason}'", "Provide an absolute http or https URL."))

        for name, label in ((CONNECT_TIMEOUT, "connection timeout"), (READ_TIMEOUT, "read timeout"),
                            (NUM_RETRIES, "number of retries")):
            if self.contains_macro(name):
                continue
            raw = self._values[name]
            try:
                number = _as_int(raw)
            except ValueError:
                failures.append(ValidationFailure(
                    name, f"Invalid {label} '{raw}'.", f"{label.capitalize()} must be an integer."))
                continue
            if number < 0:
                failures.append(ValidationFailure(
                    name, f"Invalid {label} '{number}'.", f"{label.capitalize()} must be 0 or a positive number."))

        if not self.contains_macro(REQUEST_HEADERS):
            for chunk in split_header_lines(self._values[REQUEST_HEADERS]):
                if len(chunk.split(KV_DELIMITER, 1)) != 2:
                    failures.append(ValidationFailure(
                        REQUEST_HEADERS, f"Unable to parse key-value pair '{chunk}'.",
                        "Provide correct value for request headers field."))

        method = str(self._values[METHOD] or "")
        if method.upper() not in METHODS:
            failures.append(ValidationFailure(
                METHOD, f"Invalid request method '{method}'.",
                f"Request method must be one of '{','.join(METHODS)}'."))

        output_format = str(self._values[OUTPUT_FORMAT] or "")
        if output_format.lower() not in (fmt.lower() for fmt in OUTPUT_FORMATS):
            failures.append(ValidationFailure(
                OUTPUT_FORMAT, f"Invalid output format '{output_format}'.",
                f"Output format must be one of '{','.join(OUTPUT_FORMATS)}'."))

        charset = self._values[CHARSET]
        try:
            codecs.lookup(str(charset))
        except LookupError:
            failures.append(ValidationFailure(
                CHARSET, f"Unknown charset '{charset}'.", "Provide a charset such as UTF-8."))

        if not self.contains_macro(HDFS_FILE_PATH) and not self._values[HDFS_FILE_PATH]:
            failures.append(ValidationFailure(
                HDFS_FILE_PATH, "Destination file path is missing.", "Provide the path to write the data to."))

        return failures

    def to_request_spec(self) -> RequestSpec:
        """Build the RequestSpec; raises ConfigurationError if validation fails."""
        self._check()
        charset = self._values[CHARSET]
        body = self._values[BODY]
        if isinstance(body, str):
            body = body.encode(charset)
        return RequestSpec(
            url=self._values[URL],
            method=self._values[METHOD].upper(),
            body=body,
            headers=self.request_headers_map,
            charset=charset,
            connect_timeout_ms=_as_int(self._values[CONNECT_TIMEOUT]),
            read_timeout_ms=_as_int(self._values[READ_TIMEOUT]),
            follow_redirects=_as_bool(self._values[FOLLOW_REDIRECTS], True),
            retries=_as_int(self._values[NUM_RETRIES]),
            insecure_skip_verify=_as_bool(self._values[DISABLE_SSL_VALIDATION], True),
        )

    def to_output_target(self) -> OutputTarget:
        self._check()
        output_format = self._values[OUTPUT_FORMAT]
        canonical = next(fmt for fmt in OUTPUT_FORMATS if fmt.lower() == output_format.lower())
        return OutputTarget(
            destination_path=self._values[HDFS_FILE_PATH],
            output_format=canonical,
            result_path_var_name=self._values[OUTPUT_PATH],
            response_headers_var_name=self._values[RESPONSE_HEADERS],
        )

    def unresolved_macros(self) -> List[ValidationFailure]:
        """One failure per macro-enabled property still holding a ${macro}."""
        return [
            ValidationFailure(name, f"Macro in '{self._values[name]}' was not resolved.",
                              "Provide a runtime argument for it.")
            for name in sorted(MACRO_FIELDS) if self.contains_macro(name)
        ]

    def _check(self):
        failures = self.unresolved_macros() + self.validate()
        if failures:
            raise ConfigurationError(failures)

    def __repr__(self) -> str:
        return f"ActionConfig(url={self._values[URL]!r}, method={self._values[METHOD]!r})"


def _url_problem(url: Any) -> Optional[str]:
    if not url or not isinstance(url, str):
        return "no URL provided"
    try:
        parts = urlsplit(url)
        # reading the port validates it
        parts.port
    except ValueError as e:
        return str(e)
    if not parts.scheme:
        return "no protocol"
    if not parts.netloc:
        return "no host"
    return None
