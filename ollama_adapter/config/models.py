import os
from enum import Enum
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ollama_adapter.config.paths import get_app_dir
from ollama_adapter.config.yaml import safe_load_with_env

DEFAULT_CONFIG_FILENAME = 'ollama-adapter.yaml'


class AuthType(str, Enum):
    """Authentication modes a content generator can be configured with."""

    LOGIN_WITH_GOOGLE = 'oauth-personal'
    USE_GEMINI = 'gemini-api-key'
    USE_VERTEX_AI = 'vertex-ai'
    CLOUD_SHELL = 'cloud-shell'
    USE_OPENAI = 'openai'
    USE_OLLAMA = 'ollama'


class SamplingParams(BaseModel):
    """Sampling parameters copied into the provider's options block."""

    temperature: Optional[float] = Field(default=None, ge=0)
    top_p: Optional[float] = Field(default=None, ge=0, le=1)
    top_k: Optional[int] = Field(default=None, ge=0)
    repetition_penalty: Optional[float] = Field(default=None)
    max_tokens: Optional[int] = Field(default=None, description='Maximum number of tokens to predict')
    seed: Optional[int] = Field(default=None)


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default='INFO', description='Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)')
    console_enabled: bool = Field(default=True, description='Enable console logging')
    file_enabled: bool = Field(default=False, description='Enable file logging')
    log_file_dir: Optional[str] = Field(default=None, description='Log directory (defaults to ~/.ollama-adapter/logs)')
    max_file_size: str = Field(default='10MB', description='Maximum log file size before rotation')
    backup_count: int = Field(default=4, ge=0, description='Number of backup files to keep')

    @field_validator('level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        if v.upper() not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            raise ValueError(f"Invalid log level '{v}'")
        return v.upper()


class ContentGeneratorConfig(BaseModel):
    """Configuration handed to a content generator by its caller."""

    model_config = ConfigDict(extra='allow', protected_namespaces=())

    model: str = Field(default='', description='Model identifier sent to the provider')
    base_url: Optional[str] = Field(default=None, description='Provider base URL; http://localhost:11434 when unset')
    auth_type: AuthType = Field(default=AuthType.USE_OLLAMA)
    sampling_params: Optional[SamplingParams] = Field(default=None)
    timeout: float = Field(default=180, gt=0, description='Request timeout in seconds')
    logging: LoggingConfig = Field(default_factory=LoggingConfig, description='Logging configuration')

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> 'ContentGeneratorConfig':
        """Load configuration from YAML.

        Without an explicit path, ``~/.ollama-adapter/config.yaml`` is read
        first and ``./ollama-adapter.yaml`` overrides it. ``OLLAMA_HOST`` and
        ``OLLAMA_MODEL`` fill ``base_url`` and ``model`` when the files leave
        them out.
        """
        config_paths: List[str] = []
        if config_path:
            config_paths.append(config_path)
        else:
            home_config = get_app_dir() / 'config.yaml'
            if home_config.exists():
                config_paths.append(str(home_config))
            config_paths.append(DEFAULT_CONFIG_FILENAME)

        data = {}
        for path in config_paths:
            try:
                with open(path, 'r') as f:
                    file_data = safe_load_with_env(f) or {}
            except FileNotFoundError:
                continue
            except yaml.YAMLError as e:
                raise ValueError(f'Invalid YAML in config file {path}: {e}')
            if not isinstance(file_data, dict):
                raise ValueError(f'Config file {path} must contain a mapping, got {type(file_data).__name__}')
            data.update(file_data)

        if not data.get('base_url') and os.environ.get('OLLAMA_HOST'):
            data['base_url'] = os.environ['OLLAMA_HOST']
        if not data.get('model') and os.environ.get('OLLAMA_MODEL'):
            data['model'] = os.environ['OLLAMA_MODEL']
        return cls(**data)

    def save(self, config_path: str) -> None:
        """Save configuration to a YAML file."""
        Path(config_path).parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, 'w') as f:
            yaml.safe_dump(self.model_dump(mode='json', exclude_none=True), f, default_flow_style=False, sort_keys=False, indent=2)
