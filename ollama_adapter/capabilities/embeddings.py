"""Embedding capability - single-prompt embeddings via ``/api/embeddings``."""

from typing import List

from ollama_adapter.capabilities.interfaces import ProviderCapability
from ollama_adapter.config.log import get_logger
from ollama_adapter.models.genai import ContentEmbedding, EmbedContentParameters, EmbedContentResponse, join_text_parts
from ollama_adapter.models.ollama import OllamaEmbeddingRequest, OllamaEmbeddingResponse

logger = get_logger(__name__)


class EmbeddingCapability(ProviderCapability):
    """Builds embedding requests and extracts the single returned vector.

    All turns are flattened into one prompt, so exactly one embedding is
    produced no matter how many turns the request carries.
    """

    def __init__(self, model: str):
        self.model = model

    def get_operation_name(self) -> str:
        return 'embed_content'

    def prepare_request(self, request: EmbedContentParameters) -> OllamaEmbeddingRequest:
        """Flatten every text part into one trimmed prompt."""
        return OllamaEmbeddingRequest(model=self.model, prompt=join_text_parts(request.contents).strip())

    def extract_embedding(self, response: OllamaEmbeddingResponse) -> List[float]:
        """Return the first vector, or an empty one if the provider sent none."""
        if response.embeddings:
            return response.embeddings[0]
        if response.embedding:
            return response.embedding

        logger.warning('Ollama returned no embeddings', model=response.model)
        return []

    def process_response(self, response: OllamaEmbeddingResponse) -> EmbedContentResponse:
        return EmbedContentResponse(embeddings=[ContentEmbedding(values=self.extract_embedding(response))])
