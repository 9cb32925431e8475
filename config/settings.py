# File: config/settings.py
"""Configuration management and validation"""
import os
from dataclasses import dataclass, field
from typing import Dict, Any, Optional

import yaml
from dotenv import load_dotenv

from core.exceptions import ConfigurationError
from utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_USER_AGENT = (
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36'
)
DEFAULT_MODEL_ENDPOINT = 'https://generativelanguage.googleapis.com/v1beta'

@dataclass
class DatabaseConfig:
    """Database configuration"""
    path: str
    max_connections: int = 10

@dataclass
class HTTPConfig:
    """Outbound page fetch configuration"""
    total_timeout: int = 30
    connect_timeout: int = 10
    read_timeout: int = 20
    user_agent: str = DEFAULT_USER_AGENT
    accept_language: str = 'en-US,en;q=0.9'

@dataclass
class ExtractionConfig:
    """Text extraction configuration"""
    min_text_length: int = 100
    include_list_items: bool = False

@dataclass
class ModelConfig:
    """Generative model configuration"""
    api_key: str
    model: str = 'gemini-1.5-flash'
    endpoint: str = DEFAULT_MODEL_ENDPOINT
    timeout: int = 60
    max_prompt_chars: int = 5000
    response_mime_type: Optional[str] = None

@dataclass
class ServerConfig:
    """HTTP server configuration"""
    host: str = '0.0.0.0'
    port: int = 3001
    api_tokens: Dict[str, str] = field(default_factory=dict)

class ConfigManager:
    """Configuration manager with validation"""

    def __init__(self, config_path: str = "summarizer_config.yaml"):
        self.config_path = config_path
        self._config: Dict[str, Any] = {}
        self._validated = False

    def load_config(self) -> Dict[str, Any]:
        """Load, merge environment overrides and validate configuration"""
        load_dotenv()

        try:
            if os.path.exists(self.config_path):
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    self._config = yaml.safe_load(f) or {}
            else:
                logger.warning(f"Configuration file {self.config_path} not found, using environment and defaults")
                self._config = {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {e}")
        except OSError as e:
            raise ConfigurationError(f"Error reading configuration: {e}")

        if not isinstance(self._config, dict):
            raise ConfigurationError("Configuration root must be a mapping")

        self._apply_environment()
        self._apply_defaults()
        self._validate_config()

        logger.info(f"Configuration loaded from {self.config_path}")
        return self._config

    def _apply_environment(self):
        """Environment variables override the YAML file"""
        model = self._config.get('model') or {}
        if not isinstance(model, dict):
            raise ConfigurationError("'model' must be a dictionary")
        self._config['model'] = model
        if os.getenv('GEMINI_API_KEY'):
            model['api_key'] = os.getenv('GEMINI_API_KEY')
        if os.getenv('GEMINI_MODEL'):
            model['name'] = os.getenv('GEMINI_MODEL')

        if os.getenv('DATABASE_PATH'):
            self._config['database_path'] = os.getenv('DATABASE_PATH')

        if os.getenv('PORT'):
            server = self._config.get('server') or {}
            server['port'] = os.getenv('PORT')
            self._config['server'] = server

        # SUMMARIZER_API_TOKENS="token1:alice,token2:bob"
        raw_tokens = os.getenv('SUMMARIZER_API_TOKENS')
        if raw_tokens:
            tokens = self._config.get('api_tokens') or {}
            if not isinstance(tokens, dict):
                raise ConfigurationError("'api_tokens' must be a mapping of token to owner id")
            self._config['api_tokens'] = tokens
            for pair in raw_tokens.split(','):
                token, sep, owner = pair.strip().partition(':')
                if not sep or not token or not owner:
                    raise ConfigurationError("SUMMARIZER_API_TOKENS entries must look like 'token:owner'")
                tokens[token] = owner

    def _validate_config(self):
        """Validate configuration structure and values"""
        if not self._config.get('database_path'):
            raise ConfigurationError("Missing required configuration key: database_path")

        model = self._config.get('model')
        if not isinstance(model, dict):
            raise ConfigurationError("'model' must be a dictionary")
        if not model.get('api_key'):
            raise ConfigurationError("Missing model API key (set GEMINI_API_KEY)")

        if not isinstance(self._config.get('api_tokens'), dict):
            raise ConfigurationError("'api_tokens' must be a mapping of token to owner id")

        for key in ('min_text_length', 'max_prompt_chars', 'request_timeout_seconds'):
            value = self._config.get(key)
            if not isinstance(value, int) or value <= 0:
                raise ConfigurationError(f"'{key}' must be a positive integer")

        try:
            int(self._config['server']['port'])
        except (TypeError, ValueError):
            raise ConfigurationError("'server.port' must be an integer")

        self._validated = True
        logger.info("Configuration validation passed")

    def _apply_defaults(self):
        """Apply default values for optional configuration"""
        defaults = {
            'max_connections': 10,
            'request_timeout_seconds': 30,
            'connect_timeout_seconds': 10,
            'read_timeout_seconds': 20,
            'user_agent': DEFAULT_USER_AGENT,
            'accept_language': 'en-US,en;q=0.9',
            'min_text_length': 100,
            'include_list_items': False,
            'max_prompt_chars': 5000,
            'api_tokens': {},
            'model': {
                'name': 'gemini-1.5-flash',
                'endpoint': DEFAULT_MODEL_ENDPOINT,
                'timeout_seconds': 60,
                'response_mime_type': None
            },
            'server': {
                'host': '0.0.0.0',
                'port': 3001
            },
            'logging': {
                'level': 'INFO',
                'file_enabled': False,
                'file_path': 'summarizer.log',
                'console_enabled': True,
                'format': 'standard'
            }
        }

        for key, value in defaults.items():
            if key not in self._config or self._config[key] is None:
                self._config[key] = dict(value) if isinstance(value, dict) else value
            elif isinstance(value, dict) and isinstance(self._config[key], dict):
                # Merge nested dictionaries
                for subkey, subvalue in value.items():
                    if subkey not in self._config[key]:
                        self._config[key][subkey] = subvalue

    def _require_validated(self):
        if not self._validated:
            raise ConfigurationError("Configuration not validated")

    def get_database_config(self) -> DatabaseConfig:
        """Get database configuration"""
        self._require_validated()

        return DatabaseConfig(
            path=self._config['database_path'],
            max_connections=self._config.get('max_connections', 10)
        )

    def get_http_config(self) -> HTTPConfig:
        """Get HTTP configuration"""
        self._require_validated()

        return HTTPConfig(
            total_timeout=self._config.get('request_timeout_seconds', 30),
            connect_timeout=self._config.get('connect_timeout_seconds', 10),
            read_timeout=self._config.get('read_timeout_seconds', 20),
            user_agent=self._config.get('user_agent', DEFAULT_USER_AGENT),
            accept_language=self._config.get('accept_language', 'en-US,en;q=0.9')
        )

    def get_extraction_config(self) -> ExtractionConfig:
        """Get extraction configuration"""
        self._require_validated()

        return ExtractionConfig(
            min_text_length=self._config.get('min_text_length', 100),
            include_list_items=bool(self._config.get('include_list_items', False))
        )

    def get_model_config(self) -> ModelConfig:
        """Get generative model configuration"""
        self._require_validated()

        model = self._config['model']
        return ModelConfig(
            api_key=model['api_key'],
            model=model.get('name', 'gemini-1.5-flash'),
            endpoint=model.get('endpoint', DEFAULT_MODEL_ENDPOINT),
            timeout=model.get('timeout_seconds', 60),
            max_prompt_chars=self._config.get('max_prompt_chars', 5000),
            response_mime_type=model.get('response_mime_type')
        )

    def get_server_config(self) -> ServerConfig:
        """Get HTTP server configuration"""
        self._require_validated()

        server = self._config['server']
        return ServerConfig(
            host=server.get('host', '0.0.0.0'),
            port=int(server.get('port', 3001)),
            api_tokens=dict(self._config.get('api_tokens', {}))
        )
