# File: main.py
"""Main entry point for the article summarizer service"""
import asyncio
import json
import sys

from aiohttp import web

from api.auth import StaticTokenAuthenticator
from api.server import create_app
from config.settings import ConfigManager
from core.exceptions import ConfigurationError, SummarizerServiceError
from llm.gemini_client import GeminiSummarizer
from orchestration.pipeline import SummarizationPipeline
from processing.extractor import ArticleExtractor
from processing.prompt_builder import PromptBuilder
from processing.response_parser import ResponseParser
from scrapers.article_fetcher import ArticleFetcher
from storage.database import AsyncArticleDatabase
from utils.logger import setup_logging, get_logger


class SummarizerApp:
    """Builds every service handle once and wires them together"""

    def __init__(self, config_path: str = "summarizer_config.yaml"):
        self.config_manager = ConfigManager(config_path)
        self.config = self.config_manager.load_config()

        setup_logging(self.config.get('logging', {}))
        self.logger = get_logger('main')

        db_config = self.config_manager.get_database_config()
        model_config = self.config_manager.get_model_config()
        self.server_config = self.config_manager.get_server_config()

        self.db = AsyncArticleDatabase(db_config.path, db_config.max_connections)
        self.fetcher = ArticleFetcher(self.config_manager.get_http_config())
        self.summarizer = GeminiSummarizer(model_config)
        self.pipeline = SummarizationPipeline(
            fetcher=self.fetcher,
            extractor=ArticleExtractor(self.config_manager.get_extraction_config()),
            prompt_builder=PromptBuilder(model_config.max_prompt_chars),
            summarizer=self.summarizer,
            parser=ResponseParser(),
            database=self.db
        )
        self.authenticator = StaticTokenAuthenticator(self.server_config.api_tokens)

    async def initialize(self):
        """Initialize application components"""
        await self.db.initialize()
        await self.fetcher.start()
        await self.summarizer.start()
        self.logger.info("Application initialized successfully")

    async def shutdown(self):
        await self.fetcher.close()
        await self.summarizer.close()
        self.logger.info("Application stopped")

    def build_web_app(self) -> web.Application:
        app = create_app(self.pipeline, self.db, self.authenticator)

        async def on_startup(_):
            await self.initialize()

        async def on_cleanup(_):
            await self.shutdown()

        app.on_startup.append(on_startup)
        app.on_cleanup.append(on_cleanup)
        return app

    def serve(self):
        if not self.server_config.api_tokens:
            self.logger.warning("No API tokens configured, every request will be rejected")
        web.run_app(self.build_web_app(), host=self.server_config.host, port=self.server_config.port)

    async def summarize_once(self, url: str, owner_id: str):
        """Run the pipeline for a single URL from the command line"""
        await self.initialize()
        try:
            outcome = await self.pipeline.run(url, owner_id)
        finally:
            await self.shutdown()

        if not outcome.ok:
            self.logger.error(f"Summarization failed at {outcome.error.stage}: {outcome.error}")
            return None

        print(json.dumps(outcome.result.to_dict(), indent=2))
        if not outcome.persisted:
            self.logger.warning("Result was not stored")
        return outcome

    async def show_articles(self, owner_id: str):
        await self.db.initialize()
        records = await self.db.list_articles(owner_id)
        print(json.dumps([record.to_dict() for record in records], indent=2))
        self.logger.info(f"{len(records)} articles for {owner_id}")
        return records


def main():
    """Main CLI interface"""
    if len(sys.argv) < 2:
        print("Usage:")
        print("  python -m main serve                    # Start the HTTP API")
        print("  python -m main summarize URL [owner]    # Summarize one article")
        print("  python -m main articles owner           # List stored summaries")
        return

    command = sys.argv[1]

    try:
        app = SummarizerApp()

        if command == "serve":
            app.serve()

        elif command == "summarize":
            if len(sys.argv) < 3:
                print("summarize needs a URL")
                sys.exit(1)
            owner_id = sys.argv[3] if len(sys.argv) > 3 else 'cli'
            outcome = asyncio.run(app.summarize_once(sys.argv[2], owner_id))
            if outcome is None:
                sys.exit(1)

        elif command == "articles":
            if len(sys.argv) < 3:
                print("articles needs an owner id")
                sys.exit(1)
            asyncio.run(app.show_articles(sys.argv[2]))

        else:
            print(f"Unknown command: {command}")

    except ConfigurationError as e:
        print(f"Configuration error: {e}")
        sys.exit(1)
    except SummarizerServiceError as e:
        print(f"Summarizer error: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        print("Application stopped by user")

if __name__ == "__main__":
    main()
