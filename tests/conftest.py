import httpx
import pytest

from http_to_hdfs.config import ActionConfig
from http_to_hdfs.fetcher import HTTPFetcher
from http_to_hdfs.settings import Settings


class RecordingHandler:
    """MockTransport handler that replays a list of responses and records requests."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        index = min(len(self.requests), len(self.responses)) - 1
        response = self.responses[index]
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(request)
        # a Response can only be sent once, so hand out a fresh copy
        return httpx.Response(response.status_code, headers=response.headers.raw, content=response.content)

    @property
    def calls(self) -> int:
        return len(self.requests)


@pytest.fixture
def valid_properties(tmp_path):
    return {
        "hdfsFilePath": str(tmp_path / "data.txt"),
        "url": "http://test-url/feeds/users",
        "method": "GET",
        "body": None,
        "requestHeaders": None,
        "outputFormat": "Text",
        "charset": "UTF-8",
        "followRedirects": True,
        "disableSSLValidation": False,
        "numRetries": 0,
        "readTimeout": 60 * 1000,
        "connectTimeout": 60 * 1000,
        "outputPath": "filePath",
        "responseHeaders": "responseHeaders",
    }


@pytest.fixture
def valid_config(valid_properties):
    return ActionConfig(valid_properties)


@pytest.fixture
def make_fetcher():
    def _make(*responses):
        handler = RecordingHandler(*responses)
        return HTTPFetcher(transport=httpx.MockTransport(handler)), handler
    return _make


@pytest.fixture
def clean_env(monkeypatch):
    for name in Settings.ENV_MAPPINGS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
