"""Content generators and the factory that builds them from configuration."""

from typing import Optional

import httpx

from ollama_adapter.config.models import AuthType, ContentGeneratorConfig
from ollama_adapter.common.exceptions import ConfigurationException
from ollama_adapter.generator.interfaces import ContentGenerator
from ollama_adapter.generator.ollama import DEFAULT_BASE_URL, OllamaContentGenerator


def create_content_generator(config: ContentGeneratorConfig, client: Optional[httpx.AsyncClient] = None) -> ContentGenerator:
    """Build the generator matching ``config.auth_type``.

    Only Ollama is served from this package; other auth types are rejected.
    """
    if config.auth_type == AuthType.USE_OLLAMA:
        return OllamaContentGenerator(config, client=client)
    raise ConfigurationException(f'Unsupported authType: {config.auth_type.value}')


__all__ = ['ContentGenerator', 'DEFAULT_BASE_URL', 'OllamaContentGenerator', 'create_content_generator']
