from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, Union

HeaderValue = Union[str, Tuple[str, ...]]
RawHeaders = Mapping[str, HeaderValue]


def _empty() -> Mapping[str, Any]:
    return MappingProxyType({})


def _plain(value: Any) -> Any:
    if isinstance(value, tuple):
        return list(value)
    return value


def _plain_mapping(m: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: _plain(v) for k, v in m.items()}


# ----------------------------- Headers -----------------------------

@dataclass(frozen=True)
class ClassifiedHeaders:
    standard: Mapping[str, HeaderValue] = field(default_factory=_empty)
    security: Mapping[str, str] = field(default_factory=_empty)
    proxy: Mapping[str, HeaderValue] = field(default_factory=_empty)
    custom: Mapping[str, HeaderValue] = field(default_factory=_empty)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "standard": _plain_mapping(self.standard),
            "security": _plain_mapping(self.security),
            "proxy": _plain_mapping(self.proxy),
            "custom": _plain_mapping(self.custom),
        }


# ----------------------------- User agent -----------------------------

@dataclass(frozen=True)
class DeviceInfo:
    type: str = "desktop"
    vendor: Optional[str] = None
    model: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "vendor": self.vendor, "model": self.model}


@dataclass(frozen=True)
class ParsedUserAgent:
    raw: str = ""
    browser: Optional[str] = None
    browser_version: Optional[str] = None
    engine: Optional[str] = None
    os: Optional[str] = None
    os_version: Optional[str] = None
    device: DeviceInfo = field(default_factory=DeviceInfo)
    is_bot: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "raw": self.raw,
            "browser": self.browser,
            "browserVersion": self.browser_version,
            "engine": self.engine,
            "os": self.os,
            "osVersion": self.os_version,
            "device": self.device.to_dict(),
            "isBot": self.is_bot,
        }


# ----------------------------- Geo -----------------------------

@dataclass(frozen=True)
class GeoInfo:
    """Geo fields exactly as an upstream CDN wrote them; no numeric parsing."""

    country: Optional[str] = None
    region: Optional[str] = None
    city: Optional[str] = None
    latitude: Optional[str] = None
    longitude: Optional[str] = None
    timezone: Optional[str] = None
    source: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "country": self.country,
            "region": self.region,
            "city": self.city,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "timezone": self.timezone,
            "source": self.source,
        }


# ----------------------------- TLS -----------------------------

@dataclass(frozen=True)
class TlsInfo:
    encrypted: bool = False
    protocol: Optional[str] = None
    cipher: Optional[str] = None
    authorized: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "encrypted": self.encrypted,
            "protocol": self.protocol,
            "cipher": self.cipher,
            "authorized": self.authorized,
        }


# ----------------------------- Audit -----------------------------

@dataclass(frozen=True)
class AuditMeta:
    timestamp: str
    unix_timestamp: int
    request_id: str
    server_hostname: str
    python_version: str
    service_version: str
    process_id: int
    uptime: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "unixTimestamp": self.unix_timestamp,
            "requestId": self.request_id,
            "serverHostname": self.server_hostname,
            "pythonVersion": self.python_version,
            "serviceVersion": self.service_version,
            "processId": self.process_id,
            "uptime": self.uptime,
        }


@dataclass(frozen=True)
class ClientInfo:
    ip: str
    ips: Optional[Tuple[str, ...]]
    port: Optional[int]
    forwarded_for: Optional[str]
    forwarded_proto: Optional[str]
    real_ip: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ip": self.ip,
            "ips": _plain(self.ips),
            "port": self.port,
            "forwardedFor": self.forwarded_for,
            "forwardedProto": self.forwarded_proto,
            "realIp": self.real_ip,
        }


@dataclass(frozen=True)
class RequestInfo:
    method: str
    url: str
    path: str
    query_params: Mapping[str, HeaderValue]
    http_version: Optional[str]
    protocol: str
    secure: bool
    hostname: Optional[str]
    content_length: Optional[int]
    content_type: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "method": self.method,
            "url": self.url,
            "path": self.path,
            "queryParams": _plain_mapping(self.query_params),
            "httpVersion": self.http_version,
            "protocol": self.protocol,
            "secure": self.secure,
            "hostname": self.hostname,
            "contentLength": self.content_length,
            "contentType": self.content_type,
        }


@dataclass(frozen=True)
class RequestAudit:
    meta: AuditMeta
    client: ClientInfo
    request: RequestInfo
    user_agent: ParsedUserAgent
    headers: ClassifiedHeaders
    tls: TlsInfo
    geo: GeoInfo

    def to_dict(self) -> Dict[str, Any]:
        return {
            "meta": self.meta.to_dict(),
            "client": self.client.to_dict(),
            "request": self.request.to_dict(),
            "userAgent": self.user_agent.to_dict(),
            "headers": self.headers.to_dict(),
            "tls": self.tls.to_dict(),
            "geo": self.geo.to_dict(),
        }
