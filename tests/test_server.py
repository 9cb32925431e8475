"""Tests for the aiohttp API in api.server."""

import asyncio

import aiosqlite
import pytest
from aiohttp.test_utils import TestClient, TestServer

from api.auth import StaticTokenAuthenticator, bearer_token
from api.server import GENERIC_FAILURE_MESSAGE, create_app
from core.exceptions import AuthenticationError

AUTH = {'Authorization': 'Bearer alice-token'}


@pytest.fixture
async def client(pipeline, database):
    authenticator = StaticTokenAuthenticator({'alice-token': 'alice', 'bob-token': 'bob'})
    async with TestClient(TestServer(create_app(pipeline, database, authenticator))) as test_client:
        yield test_client


class TestSummarizeEndpoint:
    async def test_success(self, client, page_server) -> None:
        resp = await client.post('/api/summarize', json={'url': str(page_server.make_url('/article'))}, headers=AUTH)

        assert resp.status == 200
        assert await resp.json() == {
            'summary': "Acme revenue rose 18% to $4.2B and a $500M buyback was announced.",
            'sentiment': 'Positive'
        }

    @pytest.mark.parametrize("body", [{}, {'url': ''}, {'url': None}, ['https://example.com']])
    async def test_missing_url_is_400(self, client, body) -> None:
        resp = await client.post('/api/summarize', json=body, headers=AUTH)
        assert resp.status == 400
        assert 'error' in await resp.json()

    @pytest.mark.parametrize("url", ['notaurl', 'http://exa mple.com/story', 'http://example.com:99999/story'])
    async def test_malformed_url_is_400_without_fetch(self, client, page_server, summarizer, url) -> None:
        resp = await client.post('/api/summarize', json={'url': url}, headers=AUTH)

        assert resp.status == 400
        assert page_server.requests_seen == []
        summarizer.summarize.assert_not_called()

    async def test_invalid_json_body_is_400(self, client) -> None:
        resp = await client.post('/api/summarize', data='url=x', headers=AUTH)
        assert resp.status == 400

    async def test_fetch_failure_is_generic_500(self, client, page_server, summarizer) -> None:
        resp = await client.post('/api/summarize', json={'url': str(page_server.make_url('/missing'))}, headers=AUTH)

        assert resp.status == 500
        body = await resp.json()
        assert body == {'error': GENERIC_FAILURE_MESSAGE}
        assert '404' not in body['error']
        summarizer.summarize.assert_not_called()

    async def test_short_page_is_500(self, client, page_server, summarizer) -> None:
        resp = await client.post('/api/summarize', json={'url': str(page_server.make_url('/short'))}, headers=AUTH)

        assert resp.status == 500
        summarizer.summarize.assert_not_called()

    async def test_unknown_sentiment_still_succeeds_and_persists(self, client, page_server, summarizer) -> None:
        summarizer.summarize.return_value = "Acme beat forecasts. Sentiment: Bullish"
        url = str(page_server.make_url('/article'))

        resp = await client.post('/api/summarize', json={'url': url}, headers=AUTH)

        assert resp.status == 200
        assert await resp.json() == {'summary': 'Acme beat forecasts.', 'sentiment': 'Unknown'}
        listed = await (await client.get('/api/articles', headers=AUTH)).json()
        assert listed[0]['sentiment'] == 'Unknown'

    async def test_persistence_failure_still_returns_result(self, client, page_server, database) -> None:
        kept_url = str(page_server.make_url('/article')) + "?id=kept"
        lost_url = str(page_server.make_url('/article')) + "?id=reject"
        assert (await client.post('/api/summarize', json={'url': kept_url}, headers=AUTH)).status == 200

        async with aiosqlite.connect(database.db_path) as db:
            await db.execute('''
                CREATE TRIGGER reject_insert BEFORE INSERT ON articles
                WHEN NEW.url LIKE '%reject%'
                BEGIN SELECT RAISE(ABORT, 'write failed'); END
            ''')
            await db.commit()

        resp = await client.post('/api/summarize', json={'url': lost_url}, headers=AUTH)

        assert resp.status == 200
        assert (await resp.json())['sentiment'] == 'Positive'
        listed = await (await client.get('/api/articles', headers=AUTH)).json()
        assert [item['url'] for item in listed] == [kept_url]

    async def test_unauthorized(self, client, summarizer) -> None:
        resp = await client.post('/api/summarize', json={'url': 'https://example.com'})
        assert resp.status == 401

        resp = await client.post('/api/summarize', json={'url': 'https://example.com'},
                                 headers={'Authorization': 'Bearer nope'})
        assert resp.status == 401
        summarizer.summarize.assert_not_called()


class TestArticlesEndpoint:
    async def test_concurrent_requests_listed_newest_first(self, client, page_server) -> None:
        slow_url = str(page_server.make_url('/slow-article')) + "?utm_source=Feed&x=1"
        fast_url = str(page_server.make_url('/article')) + "?x=2"

        responses = await asyncio.gather(
            client.post('/api/summarize', json={'url': slow_url}, headers=AUTH),
            client.post('/api/summarize', json={'url': fast_url}, headers=AUTH),
        )
        assert [r.status for r in responses] == [200, 200]

        listed = await (await client.get('/api/articles', headers=AUTH)).json()

        assert [item['url'] for item in listed] == [slow_url, fast_url]
        assert listed[0]['createdAt'] >= listed[1]['createdAt']
        assert set(listed[0]) == {'url', 'summary', 'sentiment', 'createdAt'}

    async def test_records_are_scoped_to_owner(self, client, page_server) -> None:
        await client.post('/api/summarize', json={'url': str(page_server.make_url('/article'))}, headers=AUTH)

        resp = await client.get('/api/articles', headers={'Authorization': 'Bearer bob-token'})

        assert resp.status == 200
        assert await resp.json() == []

    async def test_requires_auth(self, client) -> None:
        resp = await client.get('/api/articles')
        assert resp.status == 401

    async def test_health(self, client) -> None:
        resp = await client.get('/health')
        assert await resp.json() == {'status': 'ok'}


class TestAuth:
    @pytest.mark.parametrize("header,expected", [
        ('Bearer abc', 'abc'),
        ('bearer  abc ', 'abc'),
        ('Basic abc', None),
        ('Bearer', None),
        (None, None),
    ])
    def test_bearer_token(self, header, expected) -> None:
        assert bearer_token(header) == expected

    async def test_static_tokens(self) -> None:
        authenticator = StaticTokenAuthenticator({'t': 'owner-1'})
        assert await authenticator.authenticate('t') == 'owner-1'
        with pytest.raises(AuthenticationError):
            await authenticator.authenticate('other')
        with pytest.raises(AuthenticationError):
            await authenticator.authenticate(None)


class BrokenFetcher:
    async def fetch(self, url):
        raise RuntimeError("unexpected bug")


class TestUnexpectedFailure:
    async def test_unexpected_error_is_generic_500(self, pipeline, database) -> None:
        pipeline.fetcher = BrokenFetcher()
        authenticator = StaticTokenAuthenticator({'alice-token': 'alice'})
        async with TestClient(TestServer(create_app(pipeline, database, authenticator))) as test_client:
            resp = await test_client.post('/api/summarize', json={'url': 'https://example.com/a'}, headers=AUTH)

            assert resp.status == 500
            assert await resp.json() == {'error': GENERIC_FAILURE_MESSAGE}
