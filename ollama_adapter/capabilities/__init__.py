"""Provider capabilities for auxiliary operations."""

from ollama_adapter.capabilities.embeddings import EmbeddingCapability
from ollama_adapter.capabilities.interfaces import ProviderCapability
from ollama_adapter.capabilities.token_count import TokenCountCapability, estimate_tokens

__all__ = ['ProviderCapability', 'EmbeddingCapability', 'TokenCountCapability', 'estimate_tokens']
