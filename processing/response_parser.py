# File: processing/response_parser.py
"""Model output parsing into the canonical summary/sentiment pair.

The model is asked for a JSON object but does not always comply. Two shapes
are accepted:

* a JSON object with ``summary`` and ``sentiment`` keys, optionally wrapped in
  a Markdown code fence
* free text ending in ``Sentiment: <word>``, split on the last marker

Both are mapped to :class:`SummarizationResult`; unrecognized sentiment words
become ``Sentiment.UNKNOWN`` instead of failing the run.
"""
import json
import re
from typing import Optional

from core.exceptions import ParseError
from core.models import DelimitedText, ParseOutcome, StructuredJson, SummarizationResult
from utils.logger import get_logger

logger = get_logger(__name__)

SENTIMENT_MARKER = 'Sentiment:'

_CODE_FENCE = re.compile(r'^```[a-zA-Z]*\s*\n?(.*?)\n?```$', re.DOTALL)


def _strip_code_fence(raw: str) -> str:
    match = _CODE_FENCE.match(raw.strip())
    return match.group(1).strip() if match else raw.strip()


def parse_structured(raw: str) -> Optional[StructuredJson]:
    try:
        data = json.loads(_strip_code_fence(raw))
    except ValueError:
        return None

    if not isinstance(data, dict) or not isinstance(data.get('summary'), str):
        return None

    return StructuredJson(summary=data['summary'], sentiment=data.get('sentiment'))


def parse_delimited(raw: str, marker: str = SENTIMENT_MARKER) -> Optional[DelimitedText]:
    index = raw.lower().rfind(marker.lower())
    if index < 0:
        return None

    return DelimitedText(
        summary=raw[:index].strip(),
        sentiment_token=raw[index + len(marker):].strip()
    )


class ResponseParser:
    """Turns raw model text into a SummarizationResult or raises ParseError"""

    def __init__(self, marker: str = SENTIMENT_MARKER):
        self.marker = marker

    def detect(self, raw: str) -> Optional[ParseOutcome]:
        """Structured shape wins, the delimited shape is the fallback"""
        return parse_structured(raw) or parse_delimited(raw, self.marker)

    def parse(self, raw: str) -> SummarizationResult:
        if not isinstance(raw, str) or not raw.strip():
            raise ParseError("Model returned an empty response")

        outcome = self.detect(raw)
        if outcome is None:
            raise ParseError("Model output matched neither the JSON nor the delimited shape")

        result = outcome.to_result()
        if not result.summary:
            raise ParseError(f"Model output ({type(outcome).__name__}) has an empty summary")

        logger.debug(f"Parsed model output as {type(outcome).__name__}, sentiment={result.sentiment.value}")
        return result
