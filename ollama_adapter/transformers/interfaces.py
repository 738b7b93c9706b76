"""Transformer interfaces for converting between the generic and provider formats."""

from abc import ABC, abstractmethod

from ollama_adapter.models.genai import GenerateContentParameters, GenerateContentResponse
from ollama_adapter.models.ollama import OllamaChatRequest, OllamaChatResponse


class RequestTransformer(ABC):
    """Interface for transformers that build the outgoing provider request.

    A `logger` instance can be accessed using self.logger
    """

    def __init__(self, logger):
        super().__init__()
        self.logger = logger

    @abstractmethod
    def transform(self, request: GenerateContentParameters) -> OllamaChatRequest:
        """Convert a generic request into a provider request.

        Args:
            request: Validated generic request

        Returns:
            Provider request with ``stream`` set to False; the streaming
            call path flips it after mapping.
        """
        pass


class ResponseTransformer(ABC):
    """Interface for transformers that convert provider records back to the generic format.

    Streaming records and complete responses share one shape, so a single
    method handles both.
    """

    def __init__(self, logger):
        super().__init__()
        self.logger = logger

    @abstractmethod
    def transform_response(self, response: OllamaChatResponse) -> GenerateContentResponse:
        """Convert one provider record into one generic response.

        Args:
            response: A complete response or a single stream record

        Returns:
            Generic response with exactly one candidate
        """
        pass
