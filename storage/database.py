# File: storage/database.py
"""Async append-only store for article summaries"""
import asyncio
import sqlite3
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List

import aiosqlite

from core.exceptions import PersistenceError
from core.models import ArticleRecord, Sentiment, SummarizationResult
from utils.logger import get_logger

logger = get_logger(__name__)

class AsyncArticleDatabase:
    """Async database operations, one connection per operation"""

    def __init__(self, db_path: str, max_connections: int = 10):
        self.db_path = db_path
        self.max_connections = max_connections
        self.connection_semaphore = asyncio.Semaphore(max_connections)

    async def initialize(self):
        """Initialize database schema"""
        async with self.get_connection() as db:
            await db.execute('''
                             CREATE TABLE IF NOT EXISTS articles (
                                 id INTEGER PRIMARY KEY AUTOINCREMENT,
                                 owner_id TEXT NOT NULL,
                                 url TEXT NOT NULL,
                                 summary TEXT NOT NULL,
                                 sentiment TEXT NOT NULL,
                                 created_at TEXT NOT NULL
                             )
                             ''')

            await db.execute(
                'CREATE INDEX IF NOT EXISTS idx_articles_owner_created ON articles(owner_id, created_at)'
            )

            await db.commit()
            logger.info(f"Database initialized at {self.db_path}")

    @asynccontextmanager
    async def get_connection(self):
        """Get database connection with proper configuration"""
        async with self.connection_semaphore:
            async with aiosqlite.connect(self.db_path) as db:
                # WAL lets concurrent requests read while another appends
                await db.execute('PRAGMA journal_mode=WAL')
                await db.execute('PRAGMA synchronous=NORMAL')
                yield db

    async def save_article(self, owner_id: str, url: str, result: SummarizationResult) -> ArticleRecord:
        """Append one record, the URL is stored exactly as submitted"""
        created_at = datetime.now(timezone.utc)

        try:
            async with self.get_connection() as db:
                cursor = await db.execute('''
                                          INSERT INTO articles (owner_id, url, summary, sentiment, created_at)
                                          VALUES (?, ?, ?, ?, ?)
                                          ''', (
                                              owner_id, url, result.summary,
                                              result.sentiment.value, created_at.isoformat(timespec='microseconds')
                                          ))
                await db.commit()
                record_id = cursor.lastrowid

        except (sqlite3.Error, OSError, ValueError) as e:
            raise PersistenceError(f"Failed to save article for {url}: {e}", cause=e)

        logger.debug(f"Saved article {record_id} for owner {owner_id}", extra={'url': url, 'owner': owner_id})
        return ArticleRecord(
            id=record_id,
            owner_id=owner_id,
            url=url,
            summary=result.summary,
            sentiment=result.sentiment,
            created_at=created_at
        )

    async def list_articles(self, owner_id: str) -> List[ArticleRecord]:
        """Owner's records, newest first"""
        try:
            async with self.get_connection() as db:
                cursor = await db.execute('''
                                          SELECT id, owner_id, url, summary, sentiment, created_at
                                          FROM articles
                                          WHERE owner_id = ?
                                          ORDER BY created_at DESC, id DESC
                                          ''', (owner_id,))
                rows = await cursor.fetchall()

        except (sqlite3.Error, OSError, ValueError) as e:
            raise PersistenceError(f"Failed to list articles for {owner_id}: {e}", cause=e)

        return [
            ArticleRecord(
                id=row[0],
                owner_id=row[1],
                url=row[2],
                summary=row[3],
                sentiment=Sentiment.from_token(row[4]),
                created_at=datetime.fromisoformat(row[5])
            )
            for row in rows
        ]
