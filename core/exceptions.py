# File: core/exceptions.py
"""Custom exceptions for the summarizer service"""
from typing import Optional


class SummarizerServiceError(Exception):
    """Base exception for summarizer service errors"""
    pass

class ConfigurationError(SummarizerServiceError):
    """Configuration-related errors"""
    pass

class AuthenticationError(SummarizerServiceError):
    """Caller could not be identified"""
    pass

class PipelineError(SummarizerServiceError):
    """Failure of a single pipeline stage"""
    stage = "pipeline"

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

class ValidationError(PipelineError):
    """Missing or malformed input URL"""
    stage = "validate"

class FetchError(PipelineError):
    """Network or HTTP status failure while fetching the page"""
    stage = "fetch"

    def __init__(self, message: str, status: Optional[int] = None, cause: Optional[BaseException] = None):
        super().__init__(message, cause)
        self.status = status

class ExtractionError(PipelineError):
    """Not enough article text could be extracted"""
    stage = "extract"

class SummarizationError(PipelineError):
    """Model invocation failure"""
    stage = "summarize"

    def __init__(self, message: str, status: Optional[int] = None, cause: Optional[BaseException] = None):
        super().__init__(message, cause)
        self.status = status

class ParseError(PipelineError):
    """Model output matched neither supported shape"""
    stage = "parse"

class PersistenceError(PipelineError):
    """Store write or read failure"""
    stage = "persist"
