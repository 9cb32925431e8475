# File: utils/logger.py
"""Logging configuration"""
import logging
import json
import sys
from datetime import datetime, timezone
from typing import Dict, Any, Optional

ROOT_LOGGER_NAME = 'article_summarizer'
STANDARD_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

class JSONFormatter(logging.Formatter):
    """One JSON object per record, carrying the pipeline context fields"""

    EXTRA_FIELDS = ('url', 'owner', 'stage', 'duration', 'status')

    def format(self, record):
        log_entry = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'line': record.lineno
        }
        log_entry.update({
            field: getattr(record, field) for field in self.EXTRA_FIELDS if hasattr(record, field)
        })

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)

def setup_logging(config: Optional[Dict[str, Any]] = None) -> logging.Logger:
    """Attach console and optional file handlers to the service logger"""
    config = config or {}
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, str(config.get('level', 'INFO')).upper(), logging.INFO))
    logger.handlers.clear()

    formatter = JSONFormatter() if config.get('format') == 'json' else logging.Formatter(STANDARD_FORMAT)

    handlers = []
    if config.get('console_enabled', True):
        handlers.append(logging.StreamHandler(sys.stdout))
    if config.get('file_enabled', False):
        handlers.append(logging.FileHandler(config.get('file_path', 'summarizer.log')))

    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger

def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f'{ROOT_LOGGER_NAME}.{name}')
