"""
Unit tests for asset loading.
"""

import asyncio
import base64
import http.client
import urllib.error

import pytest

from quotesmith import assets
from quotesmith.assets import host_allowed, load_asset, local_asset_path
from quotesmith.config import Settings


@pytest.fixture
def use_settings(monkeypatch):
    """Install settings for the asset loader."""
    def install(**values):
        settings = Settings(**values)
        monkeypatch.setattr(assets, "get_settings", lambda: settings)
        return settings
    return install


class TestLoadAsset:
    """Tests for load_asset."""

    def test_base64_data_uri(self):
        payload = base64.b64encode(b"\x89PNG fake").decode()
        assert asyncio.run(load_asset(f"data:image/png;base64,{payload}")) == b"\x89PNG fake"

    def test_plain_data_uri(self):
        assert asyncio.run(load_asset("data:text/plain,hello%20there")) == b"hello there"

    def test_local_file(self, tmp_path, use_settings):
        use_settings(assets_dir=str(tmp_path))
        (tmp_path / "logo.png").write_bytes(b"logo-bytes")

        assert asyncio.run(load_asset("logo.png")) == b"logo-bytes"
        assert asyncio.run(load_asset("/logo.png")) == b"logo-bytes"
        assert asyncio.run(load_asset("file:///logo.png")) == b"logo-bytes"

    def test_missing_file(self, tmp_path, use_settings):
        use_settings(assets_dir=str(tmp_path))
        assert asyncio.run(load_asset("missing.png")) is None

    def test_empty_url(self):
        assert asyncio.run(load_asset("")) is None
        assert asyncio.run(load_asset(None)) is None

    def test_network_failure_yields_none(self, monkeypatch, caplog, use_settings):
        use_settings(asset_hosts=["*"])

        def unreachable(url, timeout):
            raise urllib.error.URLError("connection refused")

        monkeypatch.setattr(assets, "_fetch", unreachable)

        assert asyncio.run(load_asset("https://example.invalid/logo.png")) is None
        assert "Failed to load asset" in caplog.text

    def test_truncated_response_yields_none(self, monkeypatch, use_settings):
        use_settings(asset_hosts=["example.com"])

        def truncated(url, timeout):
            raise http.client.IncompleteRead(b"partial")

        monkeypatch.setattr(assets, "_fetch", truncated)

        assert asyncio.run(load_asset("https://example.com/logo.png")) is None

    def test_http_fetch(self, monkeypatch, use_settings):
        use_settings(asset_hosts=["example.com"])
        seen = {}

        def fetch(url, timeout):
            seen["url"] = url
            seen["timeout"] = timeout
            return b"remote"

        monkeypatch.setattr(assets, "_fetch", fetch)

        assert asyncio.run(load_asset("https://example.com/logo.png")) == b"remote"
        assert seen == {"url": "https://example.com/logo.png", "timeout": 10.0}

    def test_site_relative_path_uses_base_url(self, monkeypatch, use_settings):
        use_settings(asset_base_url="https://brokenrubik.com/")
        seen = []
        monkeypatch.setattr(assets, "_fetch", lambda url, timeout: seen.append(url) or b"logo")

        assert asyncio.run(load_asset("/logo.webp")) == b"logo"
        assert seen == ["https://brokenrubik.com/logo.webp"]


class TestAssetConfinement:
    """Asset URLs come from requests and must not reach arbitrary resources."""

    def test_server_paths_are_not_readable(self, tmp_path, use_settings):
        use_settings(assets_dir=str(tmp_path / "assets"))
        (tmp_path / "assets").mkdir()
        (tmp_path / "secret.txt").write_bytes(b"secret")

        assert asyncio.run(load_asset(str(tmp_path / "secret.txt"))) is None
        assert asyncio.run(load_asset("../secret.txt")) is None
        assert asyncio.run(load_asset("/etc/hostname")) is None

    def test_local_reads_disabled_without_assets_dir(self, tmp_path, use_settings):
        settings = use_settings(assets_dir="")
        assert local_asset_path("logo.png", settings) is None

    def test_escaping_paths_rejected(self, tmp_path):
        settings = Settings(assets_dir=str(tmp_path))
        assert local_asset_path("../outside.png", settings) is None
        assert local_asset_path("img/../logo.png", settings) == str((tmp_path / "logo.png").resolve())

    def test_remote_hosts_need_allow_list(self, monkeypatch, use_settings):
        use_settings()
        monkeypatch.setattr(assets, "_fetch", lambda url, timeout: b"internal")

        assert asyncio.run(load_asset("http://169.254.169.254/latest/meta-data")) is None

    def test_unsupported_scheme(self, use_settings):
        use_settings(asset_hosts=["*"])
        assert asyncio.run(load_asset("ftp://example.com/logo.png")) is None

    @pytest.mark.parametrize("url,hosts,expected", [
        ("https://cdn.example.com/a.png", ["cdn.example.com"], True),
        ("https://CDN.example.com/a.png", ["cdn.example.com"], True),
        ("https://other.example.com/a.png", ["cdn.example.com"], False),
        ("https://anything.test/a.png", ["*"], True),
        ("https://localhost/a.png", [], False),
    ])
    def test_host_allowed(self, url, hosts, expected):
        assert host_allowed(url, Settings(asset_hosts=hosts)) is expected

    def test_base_url_host_is_allowed(self):
        settings = Settings(asset_base_url="https://brokenrubik.com")
        assert host_allowed("https://brokenrubik.com/logo.webp", settings)
