"""Header classification into standard, security, proxy and custom buckets.

Sensitive values (credentials, cookies, CSRF tokens) never leave this module:
their bucket only records that the header was present.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Iterable, List, Optional, Tuple

from .models import ClassifiedHeaders, HeaderValue, RawHeaders

REDACTED = "[REDACTED]"

STANDARD_HEADERS = frozenset({
    "host", "accept", "accept-charset", "accept-encoding", "accept-language",
    "cache-control", "connection", "content-length", "content-type",
    "date", "expect", "if-match", "if-modified-since", "if-none-match",
    "if-unmodified-since", "origin", "pragma", "range", "referer",
    "te", "transfer-encoding", "upgrade", "via", "dnt",
    "upgrade-insecure-requests", "sec-fetch-dest", "sec-fetch-mode",
    "sec-fetch-site", "sec-fetch-user",
})

SECURITY_HEADERS = frozenset({
    "authorization", "proxy-authorization",
    "cookie", "set-cookie",
    "x-csrf-token", "x-xsrf-token",
})

PROXY_HEADERS = frozenset({
    "x-forwarded-for", "x-forwarded-host", "x-forwarded-proto",
    "x-forwarded-port", "x-real-ip", "forwarded",
    "cf-connecting-ip", "cf-ray", "cf-ipcountry",
    "x-amzn-trace-id", "x-request-id",
    "true-client-ip",
})


def normalize_headers(pairs: Iterable[Tuple[str, str]]) -> RawHeaders:
    """Fold (name, value) pairs into RawHeaders.

    Names are lower-cased. A name seen more than once keeps every value, in
    arrival order, as a tuple.
    """
    grouped: Dict[str, List[str]] = {}
    for name, value in pairs:
        grouped.setdefault(name.lower(), []).append(value)
    out: Dict[str, HeaderValue] = {
        k: (v[0] if len(v) == 1 else tuple(v)) for k, v in grouped.items()
    }
    return MappingProxyType(out)


def classify_headers(headers: RawHeaders) -> ClassifiedHeaders:
    standard: Dict[str, HeaderValue] = {}
    security: Dict[str, str] = {}
    proxy: Dict[str, HeaderValue] = {}
    custom: Dict[str, HeaderValue] = {}

    # security wins over proxy, proxy over standard
    for key, value in headers.items():
        name = key.lower()
        if name in SECURITY_HEADERS:
            security[name] = REDACTED
        elif name in PROXY_HEADERS:
            proxy[name] = value
        elif name in STANDARD_HEADERS:
            standard[name] = value
        else:
            custom[name] = value

    return ClassifiedHeaders(
        standard=MappingProxyType(standard),
        security=MappingProxyType(security),
        proxy=MappingProxyType(proxy),
        custom=MappingProxyType(custom),
    )


def header_text(headers: RawHeaders, name: str) -> Optional[str]:
    """A header as one string, repeated values joined with ``", "``; None when absent or empty."""
    val = headers.get(name)
    if isinstance(val, tuple):
        val = ", ".join(val)
    return val or None
