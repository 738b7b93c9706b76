from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict

import httpx
import orjson

from ollama_adapter.common.exceptions import ExternalApiException, MissingReaderException, TransformerException
from ollama_adapter.config.log import get_logger

logger = get_logger(__name__)

JSON_HEADERS = {'Content-Type': 'application/json', 'Accept': 'application/json'}


class OllamaHttpClient:
    """Thin JSON-over-HTTP layer around an ``httpx.AsyncClient``.

    Failures are raised as adapter exceptions; non-2xx bodies are read as
    text and embedded in the error message.
    """

    def __init__(self, client: httpx.AsyncClient):
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    async def post_json(self, url: str, payload: Dict[str, Any], *, api_name: str = 'Ollama API') -> Dict[str, Any]:
        """Execute a non-streaming POST and decode the JSON body"""
        try:
            response = await self._client.post(url, content=orjson.dumps(payload), headers=JSON_HEADERS)
        except httpx.HTTPError as e:
            raise ExternalApiException(f'{api_name} request failed: {e}') from e

        logger.debug('Ollama response received', url=url, status_code=response.status_code, reason=response.reason_phrase)

        if not response.is_success:
            raise self._error_from_response(response, response.text, api_name)

        try:
            data = orjson.loads(response.content)
        except orjson.JSONDecodeError as e:
            raise TransformerException(f'{api_name} returned invalid JSON: {e}') from e

        logger.debug('Ollama response data', url=url, payload=data)
        return data

    @asynccontextmanager
    async def stream(self, url: str, payload: Dict[str, Any], *, api_name: str = 'Ollama API') -> AsyncIterator[AsyncIterator[bytes]]:
        """Execute a streaming POST, yielding the raw body chunks.

        The response is closed when the block exits, however it exits.
        """
        try:
            async with self._client.stream('POST', url, content=orjson.dumps(payload), headers=JSON_HEADERS) as response:
                logger.debug('Ollama stream opened', url=url, status_code=response.status_code, reason=response.reason_phrase)

                if not response.is_success:
                    body = await response.aread()
                    raise self._error_from_response(response, body.decode('utf-8', errors='replace'), api_name)

                yield self.body_chunks(response)
        except httpx.HTTPError as e:
            raise ExternalApiException(f'{api_name} request failed: {e}') from e

    @staticmethod
    def body_chunks(response: httpx.Response) -> AsyncIterator[bytes]:
        """Return an async iterator over the response body."""
        if not isinstance(response.stream, httpx.AsyncByteStream):
            raise MissingReaderException('Could not get response reader')
        return response.aiter_bytes()

    @staticmethod
    def _error_from_response(response: httpx.Response, body: str, api_name: str) -> ExternalApiException:
        logger.debug('Ollama error response body', status_code=response.status_code, body=body)
        return ExternalApiException(
            f'{api_name} request failed: {response.status_code} {response.reason_phrase}. Body: {body}',
            status_code=response.status_code,
            response_body=body,
        )

    async def aclose(self) -> None:
        await self._client.aclose()
