# File: processing/extractor.py
"""Readable text extraction from article markup"""
from typing import Optional

from bs4 import BeautifulSoup
from bs4.element import PreformattedString

from config.settings import ExtractionConfig
from core.exceptions import ExtractionError
from core.models import ExtractionResult
from utils.logger import get_logger

logger = get_logger(__name__)

HEADING_TAGS = ['h1', 'h2', 'h3', 'h4', 'h5', 'h6']
TEXT_TAGS = HEADING_TAGS + ['p']


class ArticleExtractor:
    """Pulls heading and paragraph text out of a page in document order"""

    def __init__(self, config: Optional[ExtractionConfig] = None):
        self.config = config or ExtractionConfig()
        self.tags = TEXT_TAGS + (['li'] if self.config.include_list_items else [])

    def own_text(self, element) -> str:
        """Text of ``element`` minus anything inside a nested selected tag.

        html.parser nests unclosed ``<p>`` tags, so each string is credited
        only to its closest selected ancestor.
        """
        parts = []
        for string in element.find_all(string=True):
            if isinstance(string, PreformattedString):
                continue
            if string.find_parent(self.tags) is element:
                parts.append(str(string))
        return ''.join(parts)

    def extract(self, markup) -> ExtractionResult:
        soup = BeautifulSoup(markup or '', 'html.parser')

        pieces = []
        for element in soup.find_all(self.tags):
            text = self.own_text(element).strip()
            if text:
                pieces.append(text)

        text = '\n'.join(pieces).strip()
        char_count = len(text)

        if char_count < self.config.min_text_length:
            logger.warning(
                f"Insufficient article text: {char_count} < {self.config.min_text_length}",
                extra={'stage': 'extract'}
            )
            raise ExtractionError(
                "insufficient article text: the URL may not be a news article "
                "or the content is being blocked"
            )

        return ExtractionResult(text=text, char_count=char_count)
