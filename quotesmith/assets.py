"""
Asset loading for logos and other embedded images.

`load_asset` never raises: every failure is logged and yields None so the
export degrades to a placeholder instead of failing.

Asset URLs arrive in request bodies, so reads are confined: local paths
resolve inside `Settings.assets_dir` and remote fetches (redirects
included) only reach hosts listed in `Settings.asset_hosts` or the host of
`Settings.asset_base_url`.

License: MIT
"""

import asyncio
import base64
import logging
import os
import urllib.error
import urllib.parse
import urllib.request
from typing import Optional

from quotesmith.config import Settings, get_settings

logger = logging.getLogger(__name__)


def _decode_data_uri(url: str) -> bytes:
    """Decode a `data:[<mime>][;base64],<payload>` URI."""
    header, _, payload = url[len("data:"):].partition(",")
    if header.endswith(";base64"):
        return base64.b64decode(payload, validate=False)
    return urllib.parse.unquote_to_bytes(payload)


def host_allowed(url: str, settings: Settings) -> bool:
    """Whether a remote asset URL points at an allowed host."""
    host = (urllib.parse.urlsplit(url).hostname or "").lower()
    allowed = {h.strip().lower() for h in settings.asset_hosts if h.strip()}
    if settings.asset_base_url:
        allowed.add((urllib.parse.urlsplit(settings.asset_base_url).hostname or "").lower())
    return bool(host) and ("*" in allowed or host in allowed)


def local_asset_path(url: str, settings: Settings) -> Optional[str]:
    """
    Resolve a local asset path inside the assets directory.

    Absolute paths are treated as relative to the assets directory.

    Returns:
        Real path of the asset, or None when it would escape the directory
    """
    if not settings.assets_dir:
        return None
    root = os.path.realpath(settings.assets_dir)
    relative = url[len("file://"):] if url.startswith("file://") else url
    path = os.path.realpath(os.path.join(root, relative.lstrip("/\\")))
    if os.path.commonpath([root, path]) != root:
        return None
    return path


class AllowListRedirectHandler(urllib.request.HTTPRedirectHandler):
    """Refuses redirects that leave the allowed asset hosts."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def redirect_request(self, req, fp, code, msg, headers, newurl):
        if not host_allowed(newurl, self.settings):
            raise urllib.error.URLError(f"redirect to disallowed host: {newurl}")
        return super().redirect_request(req, fp, code, msg, headers, newurl)


def _fetch(url: str, timeout: float) -> bytes:
    opener = urllib.request.build_opener(AllowListRedirectHandler(get_settings()))
    request = urllib.request.Request(url, headers={"User-Agent": "quotesmith"})
    with opener.open(request, timeout=timeout) as response:
        return response.read()


def _read_file(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


async def load_asset(url: Optional[str]) -> Optional[bytes]:
    """
    Load an asset from a data URI, an http(s) URL or a local path.

    Site-relative paths such as `/logo.webp` are fetched from the configured
    asset base URL when one is set, and read from the assets directory
    otherwise.

    Args:
        url: Asset location

    Returns:
        Raw bytes, or None when the asset is missing, not permitted or
        cannot be loaded
    """
    if not url or not url.strip():
        return None
    url = url.strip()
    settings = get_settings()

    try:
        if url.startswith("data:"):
            return _decode_data_uri(url) or None

        if url.startswith("/") and settings.asset_base_url:
            url = settings.asset_base_url.rstrip("/") + url

        if url.startswith(("http://", "https://")):
            if not host_allowed(url, settings):
                logger.warning(f"Asset host not allowed: {url[:80]}")
                return None
            data = await asyncio.to_thread(_fetch, url, settings.asset_timeout)
            logger.info(f"Fetched asset {url} ({len(data)} bytes)")
            return data or None

        if "://" in url and not url.startswith("file://"):
            logger.warning(f"Unsupported asset scheme: {url[:80]}")
            return None

        path = local_asset_path(url, settings)
        if path is None:
            logger.warning(f"Asset path outside the assets directory: {url[:80]}")
            return None
        if not os.path.isfile(path):
            logger.warning(f"Asset not found: {path}")
            return None
        return await asyncio.to_thread(_read_file, path)

    except Exception as e:
        logger.warning(f"Failed to load asset {url[:80]}: {e}")
        return None
