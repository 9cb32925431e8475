# File: scrapers/article_fetcher.py
"""Async page fetcher, single attempt per URL"""
import asyncio
import time
from typing import Optional
from urllib.parse import urlparse

import aiohttp

from config.settings import HTTPConfig
from core.exceptions import FetchError, ValidationError
from core.models import FetchResult
from utils.logger import get_logger

logger = get_logger(__name__)


def validate_url(url) -> str:
    """Reject anything that is not an absolute http(s) URL"""
    if not isinstance(url, str) or not url.strip():
        raise ValidationError("URL is required.")

    if any(ch.isspace() or not ch.isprintable() for ch in url):
        raise ValidationError(f"Malformed URL: {url!r}")

    try:
        parsed = urlparse(url)
        # Out-of-range or non-numeric ports only surface on access
        parsed.port
    except ValueError as e:
        raise ValidationError(f"Malformed URL: {url!r}", cause=e)

    if parsed.scheme.lower() not in ('http', 'https') or not parsed.netloc or not parsed.hostname:
        raise ValidationError(f"URL must be an absolute http(s) URL: {url!r}")

    return url


class ArticleFetcher:
    """Fetches article pages with browser-like headers.

    Holds one ``aiohttp.ClientSession`` for the lifetime of the process.
    Failed requests are never retried, the caller must resubmit.
    """

    def __init__(self, config: Optional[HTTPConfig] = None, session: Optional[aiohttp.ClientSession] = None):
        self.config = config or HTTPConfig()
        self.session = session
        self._owns_session = session is None

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def start(self):
        if self.session is not None:
            return

        timeout = aiohttp.ClientTimeout(
            total=self.config.total_timeout,
            connect=self.config.connect_timeout,
            sock_read=self.config.read_timeout
        )

        self.session = aiohttp.ClientSession(
            timeout=timeout,
            headers=self.build_headers(),
            raise_for_status=False
        )
        self._owns_session = True

    async def close(self):
        if self.session and self._owns_session:
            await self.session.close()
        self.session = None

    def build_headers(self):
        return {
            'User-Agent': self.config.user_agent,
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
            'Accept-Language': self.config.accept_language,
            'Accept-Encoding': 'gzip, deflate'
        }

    async def fetch(self, url: str) -> FetchResult:
        """GET the page once, anything but HTTP 200 raises FetchError"""
        validate_url(url)

        if self.session is None:
            raise FetchError("Fetcher session is not started")

        start_time = time.time()
        try:
            async with self.session.get(url, headers=self.build_headers()) as response:
                if response.status != 200:
                    raise FetchError(
                        f"Failed to fetch URL with status code: {response.status}",
                        status=response.status
                    )
                body = await response.text(errors='replace')
                content_type = response.headers.get('Content-Type')

        except asyncio.TimeoutError as e:
            raise FetchError(f"Timeout fetching {url}", cause=e)
        except aiohttp.ClientError as e:
            raise FetchError(f"Request error fetching {url}: {e}", cause=e)

        logger.debug(
            f"Fetched {url} ({len(body)} chars) in {time.time() - start_time:.2f}s",
            extra={'url': url, 'stage': 'fetch'}
        )
        return FetchResult(url=url, status=200, body=body, content_type=content_type)
