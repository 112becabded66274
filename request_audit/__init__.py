"""Per-request audit records: classified headers, parsed user agent, TLS state and CDN geo."""

__version__ = "1.0.0"

from .builder import build_request_audit, first_non_null, parse_content_length  # noqa: E402
from .context import (  # noqa: E402
    PlainConnection,
    RequestContext,
    TlsConnection,
    context_from_flask,
)
from .geo import GEO_CONVENTIONS, extract_geo_info  # noqa: E402
from .headers import REDACTED, classify_headers, normalize_headers  # noqa: E402
from .models import (  # noqa: E402
    ClassifiedHeaders,
    GeoInfo,
    ParsedUserAgent,
    RequestAudit,
    TlsInfo,
)
from .user_agent import parse_user_agent  # noqa: E402

__all__ = [
    "ClassifiedHeaders",
    "GEO_CONVENTIONS",
    "GeoInfo",
    "ParsedUserAgent",
    "PlainConnection",
    "REDACTED",
    "RequestAudit",
    "RequestContext",
    "TlsConnection",
    "TlsInfo",
    "build_request_audit",
    "classify_headers",
    "context_from_flask",
    "extract_geo_info",
    "first_non_null",
    "normalize_headers",
    "parse_content_length",
    "parse_user_agent",
]
