"""Boundary models for the generic content-generation API and the Ollama API."""

from ollama_adapter.models.genai import (
    Candidate,
    Content,
    ContentEmbedding,
    CountTokensParameters,
    CountTokensResponse,
    EmbedContentParameters,
    EmbedContentResponse,
    FinishReason,
    FunctionCall,
    FunctionDeclaration,
    FunctionResponse,
    GenerateContentConfig,
    GenerateContentParameters,
    GenerateContentResponse,
    Part,
    Tool,
    UsageMetadata,
)
from ollama_adapter.models.ollama import (
    OllamaChatRequest,
    OllamaChatResponse,
    OllamaEmbeddingRequest,
    OllamaEmbeddingResponse,
    OllamaMessage,
    OllamaOptions,
    OllamaTool,
    OllamaToolCall,
    OllamaToolFunction,
)

__all__ = [
    'Candidate',
    'Content',
    'ContentEmbedding',
    'CountTokensParameters',
    'CountTokensResponse',
    'EmbedContentParameters',
    'EmbedContentResponse',
    'FinishReason',
    'FunctionCall',
    'FunctionDeclaration',
    'FunctionResponse',
    'GenerateContentConfig',
    'GenerateContentParameters',
    'GenerateContentResponse',
    'Part',
    'Tool',
    'UsageMetadata',
    'OllamaChatRequest',
    'OllamaChatResponse',
    'OllamaEmbeddingRequest',
    'OllamaEmbeddingResponse',
    'OllamaMessage',
    'OllamaOptions',
    'OllamaTool',
    'OllamaToolCall',
    'OllamaToolFunction',
]
