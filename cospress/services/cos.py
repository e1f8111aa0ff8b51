"""
Tencent Cloud COS upload helpers for editor images.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import enum
import logging
import mimetypes
import time
from urllib.parse import quote

import httpx

from cospress.core.config import CosConfig, get_settings
from cospress.core.errors import RemoteRejection, TransportFailure
from cospress.services.cos_signing import Credentials, SigningWindow, authorization_for
from cospress.services.digest import build_object_key, normalize_extension

logger = logging.getLogger(__name__)

COS_DOMAIN = "myqcloud.com"


class ProbeOutcome(str, enum.Enum):
    FOUND = "found"
    MISSING = "missing"
    UNREACHABLE = "unreachable"


@dataclass(frozen=True)
class UploadResult:
    url: str
    key: str
    uploaded: bool


class CosService:
    """
    Content-addressed image upload: HEAD the object, PUT it only when absent.

    Build one instance per upload; it holds the credentials for that call only.
    """

    def __init__(
        self,
        config: CosConfig,
        *,
        transport: httpx.BaseTransport | None = None,
        clock: Callable[[], float] = time.time,
        sign_expire_seconds: int | None = None,
        timeout_seconds: float | None = None,
        category: str | None = None,
    ) -> None:
        settings = get_settings()
        self._config = config
        self._transport = transport
        self._clock = clock
        self._sign_expire_seconds = sign_expire_seconds or settings.cos_sign_expire_seconds
        self._timeout = timeout_seconds or settings.cos_timeout_seconds
        self._category = category or settings.cos_image_category

    def is_enabled(self) -> bool:
        return self._config.is_complete()

    def storage_host(self) -> str:
        c = self._config
        return f"{c.bucket}.cos.{c.region}.{COS_DOMAIN}"

    def _object_path(self, key: str) -> str:
        return f"/{key.lstrip('/')}"

    def _origin_url(self, key: str) -> str:
        return f"https://{self.storage_host()}{quote(self._object_path(key), safe='/-_.~')}"

    def public_url(self, key: str) -> str:
        cdn = self._config.cdn_domain.strip().strip("/")
        if cdn:
            return f"https://{cdn}/{key}"
        return f"https://{self.storage_host()}/{key}"

    def object_key(self, data: bytes, extension: str | None) -> str:
        return build_object_key(data, extension, prefix=self._config.prefix, category=self._category)

    def _credentials(self) -> Credentials:
        return Credentials(
            secret_id=self._config.secret_id,
            secret_key=self._config.secret_key.get_secret_value(),
        )

    def _signed_headers(self, method: str, key: str, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers = {"Host": self.storage_host()}
        if extra:
            headers.update(extra)
        # A fresh window per request; never shared between HEAD and PUT.
        window = SigningWindow.starting_now(self._sign_expire_seconds, clock=self._clock)
        authorization = authorization_for(
            self._credentials(),
            method,
            self._object_path(key),
            headers=headers,
            window=window,
        )
        return {**headers, "Authorization": authorization}

    def _client(self) -> httpx.Client:
        return httpx.Client(transport=self._transport, timeout=self._timeout)

    def probe(self, key: str) -> ProbeOutcome:
        headers = self._signed_headers("HEAD", key)
        try:
            with self._client() as client:
                response = client.head(self._origin_url(key), headers=headers)
        except httpx.TransportError as exc:
            logger.warning("COS probe for %s failed, treating object as absent: %s", key, exc)
            return ProbeOutcome.UNREACHABLE

        if response.is_success:
            return ProbeOutcome.FOUND
        logger.debug("COS probe for %s returned HTTP %s", key, response.status_code)
        return ProbeOutcome.MISSING

    def put_object(self, key: str, data: bytes, content_type: str) -> None:
        headers = self._signed_headers("PUT", key, {"Content-Type": content_type})
        try:
            with self._client() as client:
                response = client.put(self._origin_url(key), content=data, headers=headers)
        except httpx.TransportError as exc:
            logger.error("COS upload of %s failed: %s", key, exc)
            raise TransportFailure(f"Could not reach COS: {exc}") from exc

        if not response.is_success:
            logger.error("COS rejected upload of %s with HTTP %s", key, response.status_code)
            raise RemoteRejection(response.status_code)

    def upload(self, data: bytes, extension: str | None) -> UploadResult:
        """
        Upload image bytes and return their public URL.
        Skips the PUT when an object with the same content is already stored.
        """
        self._config.require_complete()

        key = self.object_key(data, extension)
        url = self.public_url(key)

        outcome = self.probe(key)
        if outcome is ProbeOutcome.FOUND:
            logger.info("File already exists, skipping upload: %s", url)
            return UploadResult(url=url, key=key, uploaded=False)

        content_type = mimetypes.guess_type(f"x.{normalize_extension(extension)}")[0] or "application/octet-stream"
        logger.info("Uploading %s (%d bytes, probe %s)", key, len(data), outcome.value)
        self.put_object(key, data, content_type)
        logger.info("Uploaded %s", url)
        return UploadResult(url=url, key=key, uploaded=True)
