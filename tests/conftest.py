"""Shared fixtures: sample pages, a local page server and a temp database."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from config.settings import HTTPConfig
from core.models import FetchResult
from llm.gemini_client import GeminiSummarizer
from orchestration.pipeline import SummarizationPipeline
from processing.extractor import ArticleExtractor
from processing.prompt_builder import PromptBuilder
from processing.response_parser import ResponseParser
from scrapers.article_fetcher import ArticleFetcher
from storage.database import AsyncArticleDatabase

ARTICLE_HTML = """<html>
<head><title>Acme Corp posts record quarter</title><script>var tracking = 1;</script></head>
<body>
<nav><a href="/">Home</a> <a href="/markets">Markets</a></nav>
<h1>Acme Corp posts record quarter</h1>
<p>Acme Corp reported revenue of $4.2 billion for the third quarter, up 18% from a year earlier.</p>
<h2>Buyback</h2>
<p>The company also announced a $500 million share buyback programme starting in January.</p>
<ul><li>Shares rose 6% in early trading.</li></ul>
<footer>Copyright Acme News</footer>
</body>
</html>"""

SHORT_HTML = "<html><body><h1>Subscribe</h1><p>Sign in to continue reading.</p></body></html>"

STRUCTURED_REPLY = '{"summary": "Acme revenue rose 18% to $4.2B and a $500M buyback was announced.", "sentiment": "Positive"}'


@pytest.fixture
async def page_server():
    """Local site serving article pages, records every request it sees."""
    requests_seen = []

    async def record(request):
        requests_seen.append(request)

    async def article(request):
        await record(request)
        return web.Response(text=ARTICLE_HTML, content_type='text/html')

    async def slow_article(request):
        await record(request)
        await asyncio.sleep(0.2)
        return web.Response(text=ARTICLE_HTML, content_type='text/html')

    async def short(request):
        await record(request)
        return web.Response(text=SHORT_HTML, content_type='text/html')

    async def missing(request):
        await record(request)
        return web.Response(status=404, text='not found')

    async def broken(request):
        await record(request)
        return web.Response(status=503, text='try later')

    async def hanging(request):
        await record(request)
        await asyncio.sleep(1)
        return web.Response(text=ARTICLE_HTML, content_type='text/html')

    app = web.Application()
    app.router.add_get('/article', article)
    app.router.add_get('/slow-article', slow_article)
    app.router.add_get('/short', short)
    app.router.add_get('/missing', missing)
    app.router.add_get('/broken', broken)
    app.router.add_get('/hanging', hanging)

    server = TestServer(app)
    await server.start_server()
    server.requests_seen = requests_seen
    yield server
    await server.close()


@pytest.fixture
async def fetcher():
    async with ArticleFetcher(HTTPConfig(total_timeout=2, connect_timeout=1, read_timeout=1)) as article_fetcher:
        yield article_fetcher


@pytest.fixture
async def database(tmp_path):
    db = AsyncArticleDatabase(str(tmp_path / "articles.db"))
    await db.initialize()
    return db


@pytest.fixture
def summarizer():
    """Model stand-in answering with the structured shape."""
    fake = MagicMock(spec=GeminiSummarizer)
    fake.summarize = AsyncMock(return_value=STRUCTURED_REPLY)
    return fake


@pytest.fixture
def pipeline(fetcher, summarizer, database):
    return SummarizationPipeline(
        fetcher=fetcher,
        extractor=ArticleExtractor(),
        prompt_builder=PromptBuilder(),
        summarizer=summarizer,
        parser=ResponseParser(),
        database=database
    )


def fetched(body: str, url: str = "https://news.example.com/story") -> FetchResult:
    return FetchResult(url=url, status=200, body=body, content_type='text/html')
