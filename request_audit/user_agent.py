from __future__ import annotations

import re
from typing import Optional

from user_agents import parse as ua_parse

from .models import DeviceInfo, ParsedUserAgent

BOT_PATTERN = re.compile(
    r"bot|crawler|spider|crawling|slurp|mediapartners|googlebot|bingbot|yandex|baidu|"
    r"duckduck|facebookexternalhit|twitterbot|linkedinbot|semrush|ahref|mj12bot|dotbot",
    re.IGNORECASE,
)

# First match wins; Blink browsers also carry AppleWebKit and "like Gecko".
_ENGINE_PATTERNS = (
    (re.compile(r"Trident/|MSIE ", re.IGNORECASE), "Trident"),
    (re.compile(r"Edge/\d", re.IGNORECASE), "EdgeHTML"),
    (re.compile(r"Presto/", re.IGNORECASE), "Presto"),
    (re.compile(r"AppleWebKit/.*(?:Chrome|Chromium|CriOS)/", re.IGNORECASE), "Blink"),
    (re.compile(r"AppleWebKit/", re.IGNORECASE), "WebKit"),
    (re.compile(r"Gecko/\d", re.IGNORECASE), "Gecko"),
)

# ua-parser reports this family when nothing matched
_UNKNOWN_FAMILY = "Other"

# ua-parser placeholder brands for crawlers and unbranded devices
_PLACEHOLDER_BRANDS = ("Spider", "Generic")


def _known(value: Optional[str]) -> Optional[str]:
    if not value or value == _UNKNOWN_FAMILY:
        return None
    return value


def _placeholder_brand(brand: Optional[str]) -> bool:
    return bool(brand) and brand.startswith(_PLACEHOLDER_BRANDS)


def _display(name: Optional[str], version: Optional[str]) -> Optional[str]:
    if not name:
        return None
    return f"{name} {version}" if version else name


def detect_engine(raw: str) -> Optional[str]:
    # CriOS runs on iOS WebKit, not Blink
    if "CriOS/" in raw:
        return "WebKit"
    for pattern, name in _ENGINE_PATTERNS:
        if pattern.search(raw):
            return name
    return None


def is_bot(raw: str) -> bool:
    return bool(BOT_PATTERN.search(raw))


def parse_user_agent(raw: Optional[str]) -> ParsedUserAgent:
    """Parse a User-Agent value into browser, engine, OS and device fields.

    Never raises: a missing or empty value yields an all-null result with
    ``raw == ""``. The bot flag comes from ``BOT_PATTERN`` alone and does not
    depend on the structural parse recognising anything.
    """
    ua_string = raw or ""
    if not ua_string:
        return ParsedUserAgent(raw="")

    ua = ua_parse(ua_string)

    browser_name = _known(ua.browser.family)
    browser_version = (ua.browser.version_string or None) if browser_name else None
    os_name = _known(ua.os.family)
    os_version = (ua.os.version_string or None) if os_name else None

    if ua.is_tablet:
        device_type = "tablet"
    elif ua.is_mobile:
        device_type = "mobile"
    else:
        device_type = "desktop"

    # the model under a placeholder brand is a class name such as "Desktop"
    placeholder = _placeholder_brand(ua.device.brand)

    return ParsedUserAgent(
        raw=ua_string,
        browser=_display(browser_name, browser_version),
        browser_version=browser_version,
        engine=detect_engine(ua_string),
        os=_display(os_name, os_version),
        os_version=os_version,
        device=DeviceInfo(
            type=device_type,
            vendor=None if placeholder else _known(ua.device.brand),
            model=None if placeholder else _known(ua.device.model),
        ),
        is_bot=is_bot(ua_string),
    )
