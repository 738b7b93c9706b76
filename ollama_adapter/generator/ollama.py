"""Content generator backed by a local Ollama server."""

from typing import AsyncIterator, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from ollama_adapter.capabilities.embeddings import EmbeddingCapability
from ollama_adapter.capabilities.token_count import TokenCountCapability
from ollama_adapter.common.exceptions import (
    AdapterException,
    ConfigurationException,
    EmptyResponseException,
    StreamTruncatedException,
    TransformerException,
)
from ollama_adapter.config.log import get_logger
from ollama_adapter.config.models import AuthType, ContentGeneratorConfig
from ollama_adapter.generator.http_client import OllamaHttpClient
from ollama_adapter.generator.interfaces import ContentGenerator, CountTokensRequest, EmbedRequest, GenerateRequest
from ollama_adapter.models.genai import (
    CountTokensParameters,
    CountTokensResponse,
    EmbedContentParameters,
    EmbedContentResponse,
    GenerateContentParameters,
    GenerateContentResponse,
)
from ollama_adapter.models.ollama import OllamaChatResponse, OllamaEmbeddingResponse
from ollama_adapter.streaming.ndjson import NDJSONDecoder
from ollama_adapter.transformers.ollama import OllamaRequestTransformer, OllamaResponseTransformer

logger = get_logger(__name__)

DEFAULT_BASE_URL = 'http://localhost:11434'

ModelT = TypeVar('ModelT', bound=BaseModel)


def _validate(model_cls: Type[ModelT], value) -> ModelT:
    if isinstance(value, model_cls):
        return value
    return model_cls.model_validate(value)


def _parse_provider_payload(model_cls: Type[ModelT], payload) -> ModelT:
    try:
        return model_cls.model_validate(payload)
    except ValidationError as e:
        raise TransformerException(f'Unexpected Ollama response shape: {e}') from e


class OllamaContentGenerator(ContentGenerator):
    """Translates generic content requests to Ollama's chat and embedding APIs.

    Holds only read-only configuration and an HTTP client; every call builds
    and discards its own request/response objects.
    """

    def __init__(self, config: ContentGeneratorConfig, client: Optional[httpx.AsyncClient] = None):
        if config.auth_type != AuthType.USE_OLLAMA:
            raise ConfigurationException(f'Invalid authType for OllamaContentGenerator: {config.auth_type.value}')

        self.config = config
        self.base_url = (config.base_url or DEFAULT_BASE_URL).rstrip('/')

        self._owns_client = client is None
        self.http_client = OllamaHttpClient(client or httpx.AsyncClient(timeout=httpx.Timeout(config.timeout)))

        self.request_transformer = OllamaRequestTransformer(logger, config)
        self.response_transformer = OllamaResponseTransformer(logger)
        self.token_count = TokenCountCapability()
        self.embeddings = EmbeddingCapability(config.model)

        logger.info('Ollama content generator initialized', base_url=self.base_url, model=config.model)

    @property
    def chat_url(self) -> str:
        return f'{self.base_url}/api/chat'

    @property
    def embeddings_url(self) -> str:
        return f'{self.base_url}/api/embeddings'

    async def generate_content(self, request: GenerateRequest, user_prompt_id: str) -> GenerateContentResponse:
        log = logger.bind(correlation_id=user_prompt_id, operation='generate_content')
        ollama_request = self.request_transformer.transform(_validate(GenerateContentParameters, request))
        payload = ollama_request.to_payload()
        log.debug('Ollama request', url=self.chat_url, payload=payload)

        try:
            data = await self.http_client.post_json(self.chat_url, payload)
            response = _parse_provider_payload(OllamaChatResponse, data)

            if not response.message.content:
                raise EmptyResponseException('No response text received from Ollama', correlation_id=user_prompt_id)

            return self.response_transformer.transform_response(response)
        except AdapterException as e:
            e.correlation_id = e.correlation_id or user_prompt_id
            log.error('Error generating content with Ollama', error=str(e))
            raise

    async def generate_content_stream(self, request: GenerateRequest, user_prompt_id: str) -> AsyncIterator[GenerateContentResponse]:
        """Stream generic responses decoded from Ollama's NDJSON output.

        Raises StreamTruncatedException after the last record if the server
        closed the stream without sending its terminal record.
        """
        log = logger.bind(correlation_id=user_prompt_id, operation='generate_content_stream')
        ollama_request = self.request_transformer.transform(_validate(GenerateContentParameters, request))
        ollama_request.stream = True
        payload = ollama_request.to_payload()
        log.debug('Ollama stream request', url=self.chat_url, payload=payload)

        decoder = NDJSONDecoder()
        try:
            async with self.http_client.stream(self.chat_url, payload) as chunks:
                async for chunk in chunks:
                    for record in decoder.feed(chunk):
                        if (response := self._convert_stream_record(record, log)) is not None:
                            yield response
                    if decoder.terminated:
                        break
                else:
                    for record in decoder.finish():
                        if (response := self._convert_stream_record(record, log)) is not None:
                            yield response

            if not decoder.terminated:
                raise StreamTruncatedException('Ollama stream ended without a final (done) record', correlation_id=user_prompt_id)
        except AdapterException as e:
            e.correlation_id = e.correlation_id or user_prompt_id
            log.error('Error streaming content from Ollama', error=str(e))
            raise

    def _convert_stream_record(self, record: OllamaChatResponse, log) -> Optional[GenerateContentResponse]:
        try:
            return self.response_transformer.transform_response(record)
        except TransformerException as e:
            # The terminal record carries the finish reason and usage; it is never dropped.
            if record.done:
                raise
            log.warning('Failed to convert Ollama stream chunk', error=str(e))
            return None

    async def count_tokens(self, request: CountTokensRequest) -> CountTokensResponse:
        """Estimate the token count client-side (about four characters per token).

        Ollama exposes no token counting endpoint, so the result is a
        heuristic rather than the model tokenizer's exact count.
        """
        logger.debug('Counting tokens locally', operation=self.token_count.get_operation_name())
        return self.token_count.count_tokens(_validate(CountTokensParameters, request))

    async def embed_content(self, request: EmbedRequest) -> EmbedContentResponse:
        """Embed the flattened text of all turns as one prompt; returns exactly one embedding."""
        log = logger.bind(operation=self.embeddings.get_operation_name())
        embedding_request = self.embeddings.prepare_request(_validate(EmbedContentParameters, request))
        payload = embedding_request.model_dump(mode='json')
        log.debug('Ollama embeddings request', url=self.embeddings_url, payload=payload)

        try:
            data = await self.http_client.post_json(self.embeddings_url, payload, api_name='Ollama embeddings API')
            return self.embeddings.process_response(_parse_provider_payload(OllamaEmbeddingResponse, data))
        except AdapterException as e:
            log.error('Error generating embeddings with Ollama', error=str(e))
            raise

    def use_summarized_thinking(self) -> bool:
        return False

    async def aclose(self) -> None:
        """Close the HTTP client if this generator created it."""
        if self._owns_client:
            await self.http_client.aclose()

    async def __aenter__(self) -> 'OllamaContentGenerator':
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
