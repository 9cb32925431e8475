# File: api/server.py
"""aiohttp handlers for the summarize and article list operations"""
import asyncio

from aiohttp import web

from api.auth import Authenticator, bearer_token
from core.exceptions import AuthenticationError, PersistenceError, ValidationError
from orchestration.pipeline import SummarizationPipeline
from storage.database import AsyncArticleDatabase
from utils.logger import get_logger

logger = get_logger(__name__)

GENERIC_FAILURE_MESSAGE = (
    'Failed to process article. The website may be blocking requests. '
    'Please try a different URL.'
)

PIPELINE_KEY = web.AppKey('pipeline', SummarizationPipeline)
DATABASE_KEY = web.AppKey('database', AsyncArticleDatabase)
AUTHENTICATOR_KEY = web.AppKey('authenticator', Authenticator)


def _error(status: int, message: str) -> web.Response:
    return web.json_response({'error': message}, status=status)


async def _owner_for(request: web.Request) -> str:
    credential = bearer_token(request.headers.get('Authorization'))
    return await request.app[AUTHENTICATOR_KEY].authenticate(credential)


async def summarize_article(request: web.Request) -> web.Response:
    try:
        owner_id = await _owner_for(request)
    except AuthenticationError as e:
        return _error(401, str(e))

    try:
        body = await request.json()
    except ValueError:
        return _error(400, 'Request body must be JSON.')

    url = body.get('url') if isinstance(body, dict) else None
    if not url:
        return _error(400, 'URL is required.')

    try:
        # A client disconnect must not abort the fetch or model call
        outcome = await asyncio.shield(request.app[PIPELINE_KEY].run(url, owner_id))
    except Exception:
        logger.exception("Unexpected error during summarization", extra={'url': url, 'owner': owner_id})
        return _error(500, GENERIC_FAILURE_MESSAGE)

    if isinstance(outcome.error, ValidationError):
        return _error(400, outcome.error.message)
    if not outcome.ok:
        return _error(500, GENERIC_FAILURE_MESSAGE)

    return web.json_response(outcome.result.to_dict())


async def list_articles(request: web.Request) -> web.Response:
    try:
        owner_id = await _owner_for(request)
    except AuthenticationError as e:
        return _error(401, str(e))

    try:
        records = await request.app[DATABASE_KEY].list_articles(owner_id)
    except PersistenceError as e:
        logger.error(f"Listing articles failed: {e}", extra={'owner': owner_id})
        return _error(500, 'Server error')

    return web.json_response([record.to_dict() for record in records])


async def health(request: web.Request) -> web.Response:
    return web.json_response({'status': 'ok'})


def create_app(pipeline: SummarizationPipeline,
               database: AsyncArticleDatabase,
               authenticator: Authenticator) -> web.Application:
    app = web.Application()
    app[PIPELINE_KEY] = pipeline
    app[DATABASE_KEY] = database
    app[AUTHENTICATOR_KEY] = authenticator

    app.router.add_post('/api/summarize', summarize_article)
    app.router.add_get('/api/articles', list_articles)
    app.router.add_get('/health', health)
    return app
