"""Ollama adapter for the generic content generator interface."""

from ollama_adapter.config.models import AuthType, ContentGeneratorConfig
from ollama_adapter.generator import ContentGenerator, OllamaContentGenerator, create_content_generator

__all__ = ['AuthType', 'ContentGenerator', 'ContentGeneratorConfig', 'OllamaContentGenerator', 'create_content_generator']
