# File: processing/prompt_builder.py
"""Instruction template for the summarization model"""

DEFAULT_MAX_PROMPT_CHARS = 5000

PROMPT_TEMPLATE = """Please provide a concise, factual summary of the following article content. \
Focus on key financial figures, major announcements, and the overall sentiment \
in a single word (e.g., "Positive", "Negative", "Neutral").

Article Content:
{article_text}

Format your response as a JSON object with 'summary' and 'sentiment' keys. For example:
{{ "summary": "The article discusses...", "sentiment": "Positive" }}
"""


class PromptBuilder:
    """Keeps the leading part of the article, lead paragraphs carry the news"""

    def __init__(self, max_chars: int = DEFAULT_MAX_PROMPT_CHARS):
        self.max_chars = max_chars

    def truncate(self, text: str) -> str:
        return text[:self.max_chars]

    def build(self, text: str) -> str:
        return PROMPT_TEMPLATE.format(article_text=self.truncate(text))
