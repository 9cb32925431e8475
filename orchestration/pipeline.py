# File: orchestration/pipeline.py
"""Summarize pipeline: fetch, extract, prompt, model, parse, persist"""
import inspect
import time
from typing import Any, Callable

from core.exceptions import PipelineError
from core.models import PipelineOutcome, StageOutcome
from llm.gemini_client import GeminiSummarizer
from processing.extractor import ArticleExtractor
from processing.prompt_builder import PromptBuilder
from processing.response_parser import ResponseParser
from scrapers.article_fetcher import ArticleFetcher
from storage.database import AsyncArticleDatabase
from utils.logger import get_logger

logger = get_logger(__name__)


async def _call(func: Callable[..., Any], *args) -> Any:
    result = func(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


class SummarizationPipeline:
    """Runs one URL through every stage for one owner.

    Service handles are built once at process start and passed in; the
    pipeline keeps no per-request state. Each stage becomes a StageOutcome and
    the run stops at the first error. A failed save still returns the parsed
    result to the caller.
    """

    def __init__(self,
                 fetcher: ArticleFetcher,
                 extractor: ArticleExtractor,
                 prompt_builder: PromptBuilder,
                 summarizer: GeminiSummarizer,
                 parser: ResponseParser,
                 database: AsyncArticleDatabase):
        self.fetcher = fetcher
        self.extractor = extractor
        self.prompt_builder = prompt_builder
        self.summarizer = summarizer
        self.parser = parser
        self.database = database

    async def _run_stage(self, stage: str, func: Callable[..., Any], *args) -> StageOutcome:
        try:
            return StageOutcome(stage=stage, value=await _call(func, *args))
        except PipelineError as e:
            return StageOutcome(stage=stage, error=e)

    async def run(self, url: str, owner_id: str) -> PipelineOutcome:
        start_time = time.time()
        outcome = PipelineOutcome(url=url, owner_id=owner_id)

        stages = [
            ('fetch', self.fetcher.fetch, lambda _: (url,)),
            ('extract', self.extractor.extract, lambda fetched: (fetched.body,)),
            ('prompt', self.prompt_builder.build, lambda extracted: (extracted.text,)),
            ('summarize', self.summarizer.summarize, lambda prompt: (prompt,)),
            ('parse', self.parser.parse, lambda raw: (raw,)),
        ]

        value = None
        for stage, func, arguments in stages:
            stage_outcome = await self._run_stage(stage, func, *arguments(value))
            if not stage_outcome.ok:
                outcome.error = stage_outcome.error
                outcome.duration = time.time() - start_time
                logger.error(
                    f"Pipeline failed at {stage}: {stage_outcome.error}",
                    extra={'url': url, 'owner': owner_id, 'stage': stage, 'duration': outcome.duration}
                )
                return outcome
            value = stage_outcome.value

        outcome.result = value

        saved = await self._run_stage('persist', self.database.save_article, owner_id, url, outcome.result)
        if saved.ok:
            outcome.record = saved.value
            outcome.persisted = True
        else:
            # Best effort: the write is not retried or queued
            outcome.persistence_error = saved.error
            logger.error(
                f"Summary computed but not stored: {saved.error}",
                extra={'url': url, 'owner': owner_id, 'stage': 'persist'}
            )

        outcome.duration = time.time() - start_time
        logger.info(
            f"Summarized {url}: sentiment={outcome.result.sentiment.value} "
            f"persisted={outcome.persisted} in {outcome.duration:.2f}s",
            extra={'url': url, 'owner': owner_id, 'duration': outcome.duration}
        )
        return outcome
