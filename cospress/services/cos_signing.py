"""
Tencent Cloud COS request signing (q-sign-algorithm=sha1).

The remote verifier rebuilds the same canonical strings from the request it
receives, so everything here must be byte-exact:

    KeyTime      = "<start>;<end>"
    SignKey      = hex(HMAC-SHA1(SecretKey, KeyTime))
    HttpString   = method\\npath\\nparams\\nheaders\\n
    StringToSign = "sha1\\n" + KeyTime + "\\n" + hex(SHA1(HttpString)) + "\\n"
    Signature    = hex(HMAC-SHA1(SignKey, StringToSign))
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
import hashlib
import hmac
import time
from typing import Union

from cospress.core.errors import ConfigurationMissing, EncodingFailure

SIGN_ALGORITHM = "sha1"
DEFAULT_SIGN_HORIZON_SECONDS = 600

_UNRESERVED = frozenset(b"ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_.~")

FieldValue = Union[str, bytes, int]
FieldsInput = Union[Mapping[FieldValue, FieldValue], Iterable[tuple[FieldValue, FieldValue]], None]


def _to_text(value: FieldValue, what: str) -> str:
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise EncodingFailure(f"{what} is not valid UTF-8") from exc
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise EncodingFailure(f"{what} must be str, bytes or int, got {type(value).__name__}")
    text = str(value)
    try:
        text.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise EncodingFailure(f"{what} cannot be encoded as UTF-8") from exc
    return text


def cos_quote(value: FieldValue) -> str:
    """Percent-encode everything outside A-Z a-z 0-9 - _ . ~ (uppercase hex)."""
    raw = _to_text(value, "value").encode("utf-8")
    return "".join(chr(b) if b in _UNRESERVED else f"%{b:02X}" for b in raw)


class SigningFields:
    """
    Ordered header or query-parameter set for signing.

    Keys compare case-insensitively: each key is percent-encoded and
    lower-cased, entries are ordered by that encoded form, and two keys that
    only differ by case are rejected. Values keep their original casing
    until they are percent-encoded.
    """

    def __init__(self, items: FieldsInput = None):
        if items is None:
            pairs: Iterable[tuple[FieldValue, FieldValue]] = ()
        elif isinstance(items, Mapping):
            pairs = items.items()
        else:
            pairs = items

        entries: dict[str, str] = {}
        for key, value in pairs:
            name = _to_text(key, "field name")
            encoded_name = cos_quote(name).lower()
            if encoded_name in entries:
                raise EncodingFailure(f"duplicate field name {name!r} (names are case-insensitive)")
            entries[encoded_name] = _to_text(value, f"value of {name!r}")

        self._entries = tuple(sorted(entries.items()))

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SigningFields):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        return f"SigningFields({list(self._entries)!r})"

    def keys(self) -> tuple[str, ...]:
        return tuple(key for key, _ in self._entries)

    def encoded(self) -> str:
        return "&".join(f"{key}={cos_quote(value)}" for key, value in self._entries)


@dataclass(frozen=True)
class Credentials:
    secret_id: str
    secret_key: str = field(repr=False)

    def signing_secret(self) -> bytes:
        if not self.secret_key:
            raise ConfigurationMissing(["secret_key"])
        try:
            return self.secret_key.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise EncodingFailure("secret key cannot be encoded as UTF-8") from exc


@dataclass(frozen=True)
class SigningWindow:
    """Half-open validity interval [start, end) in Unix seconds."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise ValueError(f"Signing window must end after it starts: {self.start};{self.end}")

    @classmethod
    def starting_now(
        cls,
        horizon_seconds: int = DEFAULT_SIGN_HORIZON_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> SigningWindow:
        start = int(clock())
        return cls(start=start, end=start + int(horizon_seconds))

    def __str__(self) -> str:
        return f"{self.start};{self.end}"


@dataclass(frozen=True)
class CanonicalRequest:
    method: str
    uri_path: str
    query_string: str
    header_string: str
    header_list: tuple[str, ...]
    param_list: tuple[str, ...]

    @property
    def http_string(self) -> str:
        return f"{self.method}\n{self.uri_path}\n{self.query_string}\n{self.header_string}\n"


def build_canonical_request(
    method: str,
    uri_path: str,
    query_params: FieldsInput = None,
    headers: FieldsInput = None,
) -> CanonicalRequest:
    path = _to_text(uri_path, "uri path")
    if not path.startswith("/"):
        path = f"/{path}"

    params = query_params if isinstance(query_params, SigningFields) else SigningFields(query_params)
    header_fields = headers if isinstance(headers, SigningFields) else SigningFields(headers)

    return CanonicalRequest(
        method=_to_text(method, "method").lower(),
        uri_path=path,
        query_string=params.encoded(),
        header_string=header_fields.encoded(),
        header_list=header_fields.keys(),
        param_list=params.keys(),
    )


def build_string_to_sign(canonical: CanonicalRequest, window: SigningWindow) -> str:
    http_digest = hashlib.sha1(canonical.http_string.encode("utf-8")).hexdigest()
    return f"{SIGN_ALGORITHM}\n{window}\n{http_digest}\n"


def derive_sign_key(credentials: Credentials, window: SigningWindow) -> str:
    return hmac.new(credentials.signing_secret(), str(window).encode("utf-8"), hashlib.sha1).hexdigest()


def sign(credentials: Credentials, window: SigningWindow, canonical: CanonicalRequest) -> str:
    """Return the value for the Authorization header."""
    sign_key = derive_sign_key(credentials, window)
    string_to_sign = build_string_to_sign(canonical, window)
    signature = hmac.new(sign_key.encode("utf-8"), string_to_sign.encode("utf-8"), hashlib.sha1).hexdigest()

    secret_id = _to_text(credentials.secret_id, "secret id")
    fields = [
        ("q-sign-algorithm", SIGN_ALGORITHM),
        ("q-ak", secret_id),
        ("q-sign-time", str(window)),
        ("q-key-time", str(window)),
        ("q-header-list", ";".join(canonical.header_list)),
        ("q-url-param-list", ";".join(canonical.param_list)),
        ("q-signature", signature),
    ]
    return "&".join(f"{name}={value}" for name, value in fields)


def authorization_for(
    credentials: Credentials,
    method: str,
    uri_path: str,
    *,
    headers: FieldsInput = None,
    params: FieldsInput = None,
    window: SigningWindow,
) -> str:
    canonical = build_canonical_request(method, uri_path, params, headers)
    return sign(credentials, window, canonical)
