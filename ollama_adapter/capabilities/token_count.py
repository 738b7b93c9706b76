"""Token count capability - client-side estimate, Ollama has no count endpoint."""

import math

from ollama_adapter.capabilities.interfaces import ProviderCapability
from ollama_adapter.config.log import get_logger
from ollama_adapter.models.genai import CountTokensParameters, CountTokensResponse, join_text_parts

logger = get_logger(__name__)

CHARS_PER_TOKEN = 4


def estimate_tokens(text: str) -> int:
    """Approximate token count as ``ceil(len(text) / 4)``."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


class TokenCountCapability(ProviderCapability):
    """Estimates token counts without calling the provider.

    The result is a heuristic (about four characters per token), not the
    model tokenizer's exact count; callers must not rely on it for hard
    context-window limits.
    """

    def get_operation_name(self) -> str:
        return 'count_tokens'

    def count_tokens(self, request: CountTokensParameters) -> CountTokensResponse:
        """Estimate tokens over the text parts of every turn.

        Parts are joined with single spaces and no trailing separator, so
        ``"hell"`` counts as one token, not two.
        """
        text = join_text_parts(request.contents)
        total_tokens = estimate_tokens(text)
        logger.debug('Estimated token count', characters=len(text), total_tokens=total_tokens)
        return CountTokensResponse(total_tokens=total_tokens)
