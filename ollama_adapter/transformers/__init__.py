"""Request and response transformers between the generic and Ollama formats."""

from ollama_adapter.transformers.interfaces import RequestTransformer, ResponseTransformer
from ollama_adapter.transformers.ollama import OllamaRequestTransformer, OllamaResponseTransformer

__all__ = ['RequestTransformer', 'ResponseTransformer', 'OllamaRequestTransformer', 'OllamaResponseTransformer']
