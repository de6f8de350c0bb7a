import codecs
import logging
import time
from typing import BinaryIO, Dict, Optional

import httpx

from .config import OutputTarget, RequestSpec
from .storage import FileSink

logger = logging.getLogger(__name__)

BUFFER_SIZE = 4096


class FetchResult:
    def __init__(
        self,
        url: str,
        status_code: int,
        headers: Dict[str, str] = None,
        final_url: str = None,
        bytes_written: int = 0,
        fetch_time: float = 0.0,
    ):
        """Initialize a FetchResult with the response metadata of a stored download."""
        self.url = url
        self.status_code = status_code
        self.headers = headers or {}
        self.final_url = final_url or url
        self.bytes_written = bytes_written
        self.fetch_time = fetch_time


def flatten_headers(headers: httpx.Headers) -> Dict[str, str]:
    """Join repeated response headers with commas, keeping the server's casing and dropping empty names."""
    flattened: Dict[str, str] = {}
    for raw_name, raw_value in headers.raw:
        name = raw_name.decode(headers.encoding)
        if not name:
            continue
        value = raw_value.decode(headers.encoding)
        if name in flattened:
            flattened[name] = f"{flattened[name]},{value}"
        else:
            flattened[name] = value
    return flattened


def copy_binary(response: httpx.Response, output: BinaryIO) -> int:
    written = 0
    for chunk in response.iter_bytes(chunk_size=BUFFER_SIZE):
        output.write(chunk)
        written += len(chunk)
    return written


def copy_text(response: httpx.Response, output: BinaryIO, charset: str) -> int:
    """Decode the body with charset and write it back in the same charset.

    Decoding and encoding are both incremental, so a multi-byte character
    split across two network chunks is kept intact and a byte order mark is
    written at most once.
    """
    response.encoding = charset
    encoder = codecs.getincrementalencoder(charset)()
    written = 0
    for text in response.iter_text(chunk_size=BUFFER_SIZE):
        data = encoder.encode(text)
        output.write(data)
        written += len(data)
    tail = encoder.encode("", final=True)
    output.write(tail)
    return written + len(tail)


def _seconds(millis: int) -> Optional[float]:
    # 0 means wait forever
    if not millis:
        return None
    return millis / 1000.0


class HTTPFetcher:
    def __init__(self, transport: httpx.BaseTransport = None, user_agent: str = 'HTTPToHDFS/1.0'):
        """Initialize the fetcher; transport is passed to every client it builds."""
        self.transport = transport
        self.user_agent = user_agent

    def build_client(self, spec: RequestSpec) -> httpx.Client:
        """Create a client whose TLS and redirect policy belongs to this request only."""
        timeout = httpx.Timeout(
            None,
            connect=_seconds(spec.connect_timeout_ms),
            read=_seconds(spec.read_timeout_ms),
        )
        return httpx.Client(
            timeout=timeout,
            follow_redirects=spec.follow_redirects,
            verify=not spec.insecure_skip_verify,
            headers={'User-Agent': self.user_agent},
            transport=self.transport,
        )

    def fetch(self, spec: RequestSpec, target: OutputTarget, sink: FileSink = None) -> FetchResult:
        """Perform one request and stream a successful response into the destination."""
        sink = sink or FileSink(target.destination_path)
        start_time = time.time()

        with self.build_client(spec) as client:
            with client.stream(
                spec.method,
                spec.url,
                headers=spec.headers,
                content=spec.body,
            ) as response:
                # 3xx is a result when redirects are not followed
                if response.is_error:
                    response.raise_for_status()

                with sink.open() as output:
                    if target.is_binary:
                        written = copy_binary(response, output)
                    else:
                        written = copy_text(response, output, spec.charset)

                fetch_time = time.time() - start_time
                logger.debug(f"Stored {written} bytes from {spec.url} in {fetch_time:.3f}s")

                return FetchResult(
                    url=spec.url,
                    status_code=response.status_code,
                    headers=flatten_headers(response.headers),
                    final_url=str(response.url),
                    bytes_written=written,
                    fetch_time=fetch_time,
                )
