"""Passive geo extraction from headers a CDN or edge proxy already attached.

Supported conventions, checked in this order: Cloudflare, AWS CloudFront,
Vercel, Akamai, Fastly. The first convention whose country header is present
supplies every field; conventions are never merged.

Akamai's ``x-akamai-edgescape`` carries a delimited list of ``key=value``
pairs. It is reported verbatim as ``country`` and is not decomposed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .models import GeoInfo, RawHeaders


@dataclass(frozen=True)
class GeoConvention:
    source: str
    country: str
    region: Optional[str] = None
    city: Optional[str] = None
    latitude: Optional[str] = None
    longitude: Optional[str] = None
    timezone: Optional[str] = None


GEO_CONVENTIONS = (
    GeoConvention(
        source="cloudflare",
        country="cf-ipcountry",
        region="cf-ipregion",
        city="cf-ipcity",
        latitude="cf-iplatitude",
        longitude="cf-iplongitude",
        timezone="cf-timezone",
    ),
    GeoConvention(
        source="aws-cloudfront",
        country="cloudfront-viewer-country",
        region="cloudfront-viewer-country-region",
        city="cloudfront-viewer-city",
        latitude="cloudfront-viewer-latitude",
        longitude="cloudfront-viewer-longitude",
        timezone="cloudfront-viewer-time-zone",
    ),
    GeoConvention(
        source="vercel",
        country="x-vercel-ip-country",
        region="x-vercel-ip-country-region",
        city="x-vercel-ip-city",
        latitude="x-vercel-ip-latitude",
        longitude="x-vercel-ip-longitude",
        timezone="x-vercel-ip-timezone",
    ),
    GeoConvention(source="akamai", country="x-akamai-edgescape"),
    GeoConvention(source="fastly", country="x-geo-country", city="x-geo-city"),
)


def _single(headers: RawHeaders, name: Optional[str]) -> Optional[str]:
    # repeated headers arrive as tuples and are not trusted for geo
    if not name:
        return None
    val = headers.get(name)
    if isinstance(val, str) and val:
        return val
    return None


def extract_geo_info(headers: RawHeaders) -> GeoInfo:
    for conv in GEO_CONVENTIONS:
        country = _single(headers, conv.country)
        if country is None:
            continue
        return GeoInfo(
            country=country,
            region=_single(headers, conv.region),
            city=_single(headers, conv.city),
            latitude=_single(headers, conv.latitude),
            longitude=_single(headers, conv.longitude),
            timezone=_single(headers, conv.timezone),
            source=conv.source,
        )
    return GeoInfo()
