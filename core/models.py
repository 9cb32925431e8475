# File: core/models.py
"""Data models for the summarization pipeline"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any, Union

from core.exceptions import PipelineError


class Sentiment(Enum):
    POSITIVE = "Positive"
    NEGATIVE = "Negative"
    NEUTRAL = "Neutral"
    UNKNOWN = "Unknown"

    @classmethod
    def from_token(cls, token: Any) -> 'Sentiment':
        """Normalize a raw model token, anything unrecognized becomes UNKNOWN"""
        if not isinstance(token, str):
            return cls.UNKNOWN

        cleaned = token.strip().strip('"\'*`.!,;: ').lower()
        for member in (cls.POSITIVE, cls.NEGATIVE, cls.NEUTRAL):
            if cleaned == member.value.lower():
                return member
        return cls.UNKNOWN


@dataclass(frozen=True)
class FetchResult:
    url: str
    status: int
    body: str
    content_type: Optional[str] = None


@dataclass(frozen=True)
class ExtractionResult:
    text: str
    char_count: int


@dataclass(frozen=True)
class SummarizationResult:
    """Canonical summary/sentiment pair"""
    summary: str
    sentiment: Sentiment

    def to_dict(self) -> Dict[str, str]:
        return {'summary': self.summary, 'sentiment': self.sentiment.value}


@dataclass(frozen=True)
class StructuredJson:
    """Model honoured the JSON object instruction"""
    summary: str
    sentiment: Any = None

    def to_result(self) -> SummarizationResult:
        return SummarizationResult(self.summary.strip(), Sentiment.from_token(self.sentiment))


@dataclass(frozen=True)
class DelimitedText:
    """Free text with a trailing 'Sentiment:' marker"""
    summary: str
    sentiment_token: str

    def to_result(self) -> SummarizationResult:
        return SummarizationResult(self.summary.strip().rstrip('*').strip(), Sentiment.from_token(self.sentiment_token))


ParseOutcome = Union[StructuredJson, DelimitedText]


@dataclass(frozen=True)
class ArticleRecord:
    """Immutable stored summary owned by a caller"""
    owner_id: str
    url: str
    summary: str
    sentiment: Sentiment
    created_at: datetime
    id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return {
            'url': self.url,
            'summary': self.summary,
            'sentiment': self.sentiment.value,
            'createdAt': self.created_at.isoformat()
        }


@dataclass(frozen=True)
class StageOutcome:
    """Result-or-error value produced by one pipeline stage"""
    stage: str
    value: Any = None
    error: Optional[PipelineError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class PipelineOutcome:
    """Final state of one summarize run"""
    url: str
    owner_id: str
    result: Optional[SummarizationResult] = None
    error: Optional[PipelineError] = None
    record: Optional[ArticleRecord] = None
    persisted: bool = False
    persistence_error: Optional[PipelineError] = None
    duration: float = 0.0

    @property
    def ok(self) -> bool:
        return self.result is not None and self.error is None
