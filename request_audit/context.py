from __future__ import annotations

import ipaddress
import ssl
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, List, Mapping, Optional, Tuple, Union

from .headers import header_text, normalize_headers
from .models import HeaderValue, RawHeaders, TlsInfo

# Server-terminated TLS, as exported by mod_ssl / mod_wsgi style gateways
_ENV_TLS_PROTOCOL = "SSL_PROTOCOL"
_ENV_TLS_CIPHER = "SSL_CIPHER"
_ENV_TLS_VERIFY = "SSL_CLIENT_VERIFY"

# ----------------------------- Transport -----------------------------

@dataclass(frozen=True)
class PlainConnection:
    def tls_info(self) -> TlsInfo:
        return TlsInfo()


@dataclass(frozen=True)
class TlsConnection:
    protocol: Optional[str] = None
    cipher: Optional[str] = None
    authorized: Optional[bool] = None

    def tls_info(self) -> TlsInfo:
        return TlsInfo(
            encrypted=True,
            protocol=self.protocol,
            cipher=self.cipher,
            authorized=self.authorized,
        )


Connection = Union[PlainConnection, TlsConnection]


def connection_from_socket(sock: Any) -> Optional[TlsConnection]:
    if not isinstance(sock, ssl.SSLSocket):
        return None
    protocol = cipher = None
    authorized: Optional[bool] = None
    try:
        protocol = sock.version()
        negotiated = sock.cipher()
        cipher = negotiated[0] if negotiated else None
        # no client certificate gives None or {}, reported as not authorized
        authorized = bool(sock.getpeercert())
    except (OSError, ValueError):
        pass
    return TlsConnection(protocol=protocol, cipher=cipher, authorized=authorized)


def connection_from_environ(environ: Mapping[str, Any]) -> Connection:
    tls = connection_from_socket(environ.get("werkzeug.socket"))
    if tls is not None:
        return tls
    if environ.get(_ENV_TLS_PROTOCOL) or str(environ.get("HTTPS", "")).lower() == "on":
        # SSL_CLIENT_VERIFY=NONE means no client cert (False); unset means not reported (None)
        verify = environ.get(_ENV_TLS_VERIFY)
        return TlsConnection(
            protocol=environ.get(_ENV_TLS_PROTOCOL) or None,
            cipher=environ.get(_ENV_TLS_CIPHER) or None,
            authorized=(verify == "SUCCESS") if verify else None,
        )
    return PlainConnection()


# ----------------------------- Request context -----------------------------

@dataclass(frozen=True)
class RequestContext:
    """Everything the audit needs from one inbound request, already read off the wire."""

    method: str
    url: str
    path: str
    protocol: str
    secure: bool
    host: Optional[str] = None
    http_version: Optional[str] = None
    query_params: Mapping[str, HeaderValue] = field(default_factory=lambda: MappingProxyType({}))
    headers: RawHeaders = field(default_factory=lambda: MappingProxyType({}))
    remote_addr: Optional[str] = None
    remote_port: Optional[int] = None
    proxy_ips: Tuple[str, ...] = ()
    connection: Connection = field(default_factory=PlainConnection)


# ----------------------------- Flask adapter -----------------------------

def _first_token(val: Optional[str]) -> Optional[str]:
    if not val:
        return None
    tok = val.split(",", 1)[0].strip()
    return tok or None


def _clean_token_to_ip(token: str) -> Optional[str]:
    if not token:
        return None
    t = token.strip().strip('"').strip("'")
    if t.startswith("[") and "]" in t:
        t = t[1:t.index("]")]
    elif ":" in t and t.count(":") == 1:
        host, maybe_port = t.split(":", 1)
        if maybe_port.isdigit():
            t = host
    try:
        return ipaddress.ip_address(t).compressed
    except ValueError:
        return None


def parse_xff_list(val: Optional[str]) -> Tuple[str, ...]:
    """Valid IPs from an X-Forwarded-For value, client first."""
    if not val:
        return ()
    out: List[str] = []
    for item in val.split(","):
        ip = _clean_token_to_ip(item)
        if ip:
            out.append(ip)
    return tuple(out)


def _strip_port(host: Optional[str]) -> Optional[str]:
    if not host:
        return None
    if host.startswith("["):
        end = host.find("]")
        return host[:end + 1] if end != -1 else host
    if host.count(":") == 1:
        return host.split(":", 1)[0]
    return host


def _int_or_none(val: Any) -> Optional[int]:
    s = str(val or "")
    return int(s) if s.isdigit() else None


def context_from_flask(req: Any, trust_proxy: bool = True) -> RequestContext:
    """Read a Flask/Werkzeug request into a RequestContext.

    With ``trust_proxy`` the X-Forwarded-For chain, X-Forwarded-Proto and
    X-Forwarded-Host override what the socket and Host header say.
    """
    env = req.environ
    headers = normalize_headers(req.headers.items())

    proxy_ips: Tuple[str, ...] = ()
    protocol = req.scheme
    host = req.host
    if trust_proxy:
        proxy_ips = parse_xff_list(header_text(headers, "x-forwarded-for"))
        protocol = (_first_token(header_text(headers, "x-forwarded-proto")) or protocol).lower()
        host = _first_token(header_text(headers, "x-forwarded-host")) or host

    http_version = env.get("SERVER_PROTOCOL") or None
    if http_version and http_version.upper().startswith("HTTP/"):
        http_version = http_version[5:]

    query = {k: (v[0] if len(v) == 1 else tuple(v)) for k, v in req.args.lists()}

    return RequestContext(
        method=req.method,
        url=req.full_path if req.query_string else req.path,
        path=req.path,
        protocol=protocol,
        secure=protocol == "https",
        host=_strip_port(host),
        http_version=http_version,
        query_params=MappingProxyType(query),
        headers=headers,
        remote_addr=req.remote_addr or None,
        remote_port=_int_or_none(env.get("REMOTE_PORT")),
        proxy_ips=proxy_ips,
        connection=connection_from_environ(env),
    )
