# File: llm/gemini_client.py
"""Gemini generateContent client, one call per prompt"""
import asyncio
import time
from typing import Any, Dict, Optional

import aiohttp

from config.settings import ModelConfig
from core.exceptions import SummarizationError
from utils.logger import get_logger

logger = get_logger(__name__)


class GeminiSummarizer:
    """Sends a prompt to the model and returns its raw text.

    Timeouts, rate limiting and transport failures all surface as
    SummarizationError. There is no retry or backoff.
    """

    def __init__(self, config: ModelConfig, session: Optional[aiohttp.ClientSession] = None):
        self.config = config
        self.session = session
        self._owns_session = session is None

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def start(self):
        if self.session is None:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.config.timeout),
                raise_for_status=False
            )
            self._owns_session = True

    async def close(self):
        if self.session and self._owns_session:
            await self.session.close()
        self.session = None

    @property
    def url(self) -> str:
        return f"{self.config.endpoint.rstrip('/')}/models/{self.config.model}:generateContent"

    def build_payload(self, prompt: str) -> Dict[str, Any]:
        payload = {'contents': [{'role': 'user', 'parts': [{'text': prompt}]}]}
        if self.config.response_mime_type:
            payload['generationConfig'] = {'responseMimeType': self.config.response_mime_type}
        return payload

    async def summarize(self, prompt: str) -> str:
        if self.session is None:
            raise SummarizationError("Model client session is not started")

        start_time = time.time()
        try:
            async with self.session.post(
                self.url,
                params={'key': self.config.api_key},
                json=self.build_payload(prompt)
            ) as response:
                if response.status == 429:
                    raise SummarizationError("Model rate limit exceeded", status=429)
                if response.status != 200:
                    detail = (await response.text(errors='replace'))[:200]
                    raise SummarizationError(
                        f"Model request failed with status {response.status}: {detail}",
                        status=response.status
                    )
                data = await response.json(content_type=None)

        except asyncio.TimeoutError as e:
            raise SummarizationError("Model request timed out", cause=e)
        except aiohttp.ClientError as e:
            raise SummarizationError(f"Model transport error: {e}", cause=e)
        except ValueError as e:
            raise SummarizationError("Model returned a non-JSON body", cause=e)

        text = self.extract_text(data)
        logger.debug(
            f"Model {self.config.model} answered with {len(text)} chars in {time.time() - start_time:.2f}s",
            extra={'stage': 'summarize', 'duration': time.time() - start_time}
        )
        return text

    @staticmethod
    def extract_text(data: Any) -> str:
        """Concatenate the text parts of the first candidate"""
        if not isinstance(data, dict):
            raise SummarizationError("Unexpected model response body")

        candidates = data.get('candidates') or []
        if not isinstance(candidates, list) or not candidates:
            block_reason = (data.get('promptFeedback') or {}).get('blockReason')
            if block_reason:
                raise SummarizationError(f"Prompt blocked by model: {block_reason}")
            raise SummarizationError("Model returned no candidates")

        first = candidates[0] if isinstance(candidates[0], dict) else {}
        content = first.get('content') or {}
        parts = content.get('parts') or []
        text = ''.join(part.get('text', '') for part in parts if isinstance(part, dict))

        if not text.strip():
            finish_reason = first.get('finishReason', 'unknown')
            raise SummarizationError(f"Model returned no text (finishReason={finish_reason})")

        return text
