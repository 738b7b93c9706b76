"""The generic content generator interface consumed by callers."""

from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Dict, Union

from ollama_adapter.models.genai import (
    CountTokensParameters,
    CountTokensResponse,
    EmbedContentParameters,
    EmbedContentResponse,
    GenerateContentParameters,
    GenerateContentResponse,
)

GenerateRequest = Union[GenerateContentParameters, Dict[str, Any]]
CountTokensRequest = Union[CountTokensParameters, Dict[str, Any]]
EmbedRequest = Union[EmbedContentParameters, Dict[str, Any]]


class ContentGenerator(ABC):
    """Provider-agnostic content generation.

    Requests may be passed as validated models or as plain dicts in the
    camelCase wire shape; implementations validate dicts at the boundary.
    """

    @abstractmethod
    async def generate_content(self, request: GenerateRequest, user_prompt_id: str) -> GenerateContentResponse:
        """Generate a complete response.

        Args:
            request: Conversation turns, optional tools
            user_prompt_id: Opaque caller correlation id, used for log correlation only
        """
        pass

    @abstractmethod
    def generate_content_stream(self, request: GenerateRequest, user_prompt_id: str) -> AsyncIterator[GenerateContentResponse]:
        """Stream partial responses in arrival order; the last one has finish reason STOP."""
        pass

    @abstractmethod
    async def count_tokens(self, request: CountTokensRequest) -> CountTokensResponse:
        pass

    @abstractmethod
    async def embed_content(self, request: EmbedRequest) -> EmbedContentResponse:
        pass

    def use_summarized_thinking(self) -> bool:
        return False
