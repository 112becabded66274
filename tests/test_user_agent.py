"""
Tests for user-agent parsing and bot detection.
"""

import pytest

from request_audit.user_agent import detect_engine, is_bot, parse_user_agent
from tests.samples import (
    CHROME_ANDROID,
    CHROME_WINDOWS,
    FIREFOX_LINUX,
    GOOGLEBOT,
    SAFARI_IPAD,
    SAFARI_IPHONE,
)


class TestParseUserAgent:
    """Tests for parse_user_agent."""

    @pytest.mark.parametrize("raw", [None, ""])
    def test_missing_user_agent(self, raw):
        ua = parse_user_agent(raw)

        assert ua.raw == ""
        assert ua.browser is None
        assert ua.browser_version is None
        assert ua.engine is None
        assert ua.os is None
        assert ua.os_version is None
        assert ua.device.type == "desktop"
        assert ua.device.vendor is None
        assert ua.device.model is None
        assert ua.is_bot is False

    def test_chrome_on_windows(self):
        ua = parse_user_agent(CHROME_WINDOWS)

        assert ua.raw == CHROME_WINDOWS
        assert ua.browser.startswith("Chrome ")
        assert ua.browser_version.startswith("120")
        assert ua.engine == "Blink"
        assert ua.os.startswith("Windows")
        assert ua.device.type == "desktop"
        assert ua.is_bot is False

    def test_firefox_is_gecko(self):
        ua = parse_user_agent(FIREFOX_LINUX)

        assert ua.browser.startswith("Firefox ")
        assert ua.engine == "Gecko"
        assert ua.is_bot is False

    def test_iphone_is_mobile(self):
        ua = parse_user_agent(SAFARI_IPHONE)

        assert ua.device.type == "mobile"
        assert ua.device.vendor == "Apple"
        assert ua.engine == "WebKit"
        assert ua.os.startswith("iOS")

    def test_ipad_is_tablet(self):
        assert parse_user_agent(SAFARI_IPAD).device.type == "tablet"

    def test_googlebot(self):
        assert parse_user_agent(GOOGLEBOT).is_bot is True

    def test_crawler_has_no_device_vendor_or_model(self):
        device = parse_user_agent(GOOGLEBOT).device
        assert device.vendor is None
        assert device.model is None
        assert device.type == "desktop"

    def test_unbranded_android_has_no_vendor(self):
        ua = parse_user_agent(CHROME_ANDROID)
        assert ua.device.type == "mobile"
        assert ua.device.vendor is None
        assert ua.os.startswith("Android")

    def test_browser_display_combines_name_and_version(self):
        ua = parse_user_agent(CHROME_WINDOWS)
        assert ua.browser == f"Chrome {ua.browser_version}"

    def test_unrecognised_string_yields_nulls(self):
        ua = parse_user_agent("zzz")

        assert ua.raw == "zzz"
        assert ua.browser is None
        assert ua.os is None
        assert ua.engine is None
        assert ua.device.type == "desktop"

    def test_to_dict_keys(self):
        out = parse_user_agent(CHROME_WINDOWS).to_dict()
        assert list(out) == [
            "raw", "browser", "browserVersion", "engine", "os", "osVersion", "device", "isBot",
        ]
        assert list(out["device"]) == ["type", "vendor", "model"]


class TestBotDetection:
    """Tests for is_bot."""

    @pytest.mark.parametrize("raw", [
        GOOGLEBOT,
        "Mozilla/5.0 (compatible; bingbot/2.0; +http://www.bing.com/bingbot.htm)",
        "Mozilla/5.0 (compatible; YandexBot/3.0; +http://yandex.com/bots)",
        "facebookexternalhit/1.1 (+http://www.facebook.com/externalhit_uatext.php)",
        "Mozilla/5.0 (compatible; AhrefsBot/7.0; +http://ahrefs.com/robot/)",
        "Mozilla/5.0 (compatible; SemrushBot/7~bl; +http://www.semrush.com/bot.html)",
        "Mozilla/5.0 (compatible; Yahoo! Slurp; http://help.yahoo.com/help/us/ysearch/slurp)",
        "DuckDuckGo-Favicons-Bot/1.0",
        "my-site-CRAWLER/0.1",
        "SomeSpider",
    ])
    def test_known_bots(self, raw):
        assert is_bot(raw) is True

    @pytest.mark.parametrize("raw", [CHROME_WINDOWS, FIREFOX_LINUX, SAFARI_IPHONE, "curl/8.4.0"])
    def test_regular_clients(self, raw):
        assert is_bot(raw) is False

    def test_bot_flag_independent_of_structural_parse(self):
        ua = parse_user_agent("acme-crawler")
        assert ua.is_bot is True


class TestDetectEngine:
    """Tests for detect_engine."""

    @pytest.mark.parametrize("raw,engine", [
        (CHROME_WINDOWS, "Blink"),
        (FIREFOX_LINUX, "Gecko"),
        (SAFARI_IPHONE, "WebKit"),
        ("Mozilla/5.0 (Windows NT 6.1; Trident/7.0; rv:11.0) like Gecko", "Trident"),
        ("Mozilla/5.0 (Windows NT 10.0) AppleWebKit/537.36 (KHTML, like Gecko) "
         "Chrome/70.0.3538.102 Safari/537.36 Edge/18.19582", "EdgeHTML"),
        ("Opera/9.80 (Windows NT 6.1) Presto/2.12.388 Version/12.18", "Presto"),
        ("curl/8.4.0", None),
    ])
    def test_engines(self, raw, engine):
        assert detect_engine(raw) == engine
