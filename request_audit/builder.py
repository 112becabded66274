from __future__ import annotations

import os
import platform
import re
import socket
import uuid
from datetime import datetime, timezone
from functools import lru_cache
from typing import Callable, Optional

import psutil

from . import __version__ as SERVICE_VERSION
from .context import RequestContext
from .geo import extract_geo_info
from .headers import classify_headers, header_text
from .models import AuditMeta, ClientInfo, HeaderValue, RequestAudit, RequestInfo
from .user_agent import parse_user_agent

Clock = Callable[[], datetime]
IdFactory = Callable[[], str]

_RE_CONTENT_LENGTH = re.compile(r"[0-9]+")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _new_request_id() -> str:
    return str(uuid.uuid4())


def first_non_null(*values):
    """First value that is not None, or None."""
    for v in values:
        if v is not None:
            return v
    return None


def parse_content_length(value: Optional[HeaderValue]) -> Optional[int]:
    if isinstance(value, tuple):
        value = value[0] if value else None
    if not isinstance(value, str):
        return None
    s = value.strip()
    if not _RE_CONTENT_LENGTH.fullmatch(s):
        return None
    return int(s)


def _inbound_request_id(ctx: RequestContext) -> Optional[str]:
    val = ctx.headers.get("x-request-id")
    candidates = val if isinstance(val, tuple) else (val,)
    for c in candidates:
        if c and c.strip():
            return c
    return None


@lru_cache(maxsize=1)
def _process_started() -> Optional[float]:
    try:
        return psutil.Process(os.getpid()).create_time()
    except psutil.Error:
        return None


def _process_uptime(now: datetime) -> int:
    started = _process_started()
    if started is None:
        return 0
    return max(0, round(now.timestamp() - started))


def _iso_millis(now: datetime) -> str:
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_request_audit(
    ctx: RequestContext,
    clock: Optional[Clock] = None,
    id_factory: Optional[IdFactory] = None,
) -> RequestAudit:
    """Assemble the audit record for one request.

    Never raises on missing or malformed optional input; each field degrades
    to None (or its documented default) on its own.
    """
    now = (clock or _utc_now)()
    headers = ctx.headers

    meta = AuditMeta(
        timestamp=_iso_millis(now),
        unix_timestamp=int(now.timestamp() * 1000),
        request_id=_inbound_request_id(ctx) or (id_factory or _new_request_id)(),
        server_hostname=socket.gethostname(),
        python_version=platform.python_version(),
        service_version=SERVICE_VERSION,
        process_id=os.getpid(),
        uptime=_process_uptime(now),
    )

    client = ClientInfo(
        ip=first_non_null(ctx.proxy_ips[0] if ctx.proxy_ips else None, ctx.remote_addr, "unknown"),
        ips=ctx.proxy_ips or None,
        port=ctx.remote_port,
        forwarded_for=header_text(headers, "x-forwarded-for"),
        forwarded_proto=header_text(headers, "x-forwarded-proto"),
        real_ip=header_text(headers, "x-real-ip"),
    )

    request = RequestInfo(
        method=ctx.method,
        url=ctx.url,
        path=ctx.path,
        query_params=ctx.query_params,
        http_version=ctx.http_version,
        protocol=ctx.protocol,
        secure=ctx.secure,
        hostname=ctx.host,
        content_length=parse_content_length(headers.get("content-length")),
        content_type=header_text(headers, "content-type"),
    )

    return RequestAudit(
        meta=meta,
        client=client,
        request=request,
        user_agent=parse_user_agent(header_text(headers, "user-agent")),
        headers=classify_headers(headers),
        tls=ctx.connection.tls_info(),
        geo=extract_geo_info(headers),
    )
