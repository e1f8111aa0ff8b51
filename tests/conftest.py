from __future__ import annotations

import httpx
import pytest

from cospress.core.config import CosConfig

BUCKET = "press-1250000000"
REGION = "ap-guangzhou"
STORAGE_HOST = f"{BUCKET}.cos.{REGION}.myqcloud.com"
CDN_DOMAIN = "cdn.example.com"
FIXED_NOW = 1700000000


class RecordingTransport(httpx.BaseTransport):
    """Mock COS endpoint: answers HEAD/PUT from canned results and records requests."""

    def __init__(self, head=404, put=200):
        self.head = head
        self.put = put
        self.requests: list[httpx.Request] = []

    def _answer(self, outcome, request: httpx.Request) -> httpx.Response:
        if isinstance(outcome, type) and issubclass(outcome, httpx.TransportError):
            raise outcome("connection refused", request=request)
        return httpx.Response(outcome, request=request)

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        if request.method == "HEAD":
            return self._answer(self.head, request)
        if request.method == "PUT":
            return self._answer(self.put, request)
        return httpx.Response(405, request=request)

    def methods(self) -> list[str]:
        return [r.method for r in self.requests]


@pytest.fixture
def cos_config() -> CosConfig:
    return CosConfig(
        secret_id="AKIDexample",
        secret_key="secret",
        bucket=BUCKET,
        region=REGION,
        prefix="press/",
        cdn_domain=CDN_DOMAIN,
    )


@pytest.fixture
def clock():
    return lambda: FIXED_NOW
