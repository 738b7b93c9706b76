"""Tests for the Ollama content generator."""

from typing import List

import httpx
import orjson
import pytest

from ollama_adapter.common.exceptions import (
    ConfigurationException,
    EmptyResponseException,
    ExternalApiException,
    StreamTruncatedException,
    TransformerException,
)
from ollama_adapter.config.models import AuthType, ContentGeneratorConfig, SamplingParams
from ollama_adapter.generator import OllamaContentGenerator, create_content_generator
from ollama_adapter.models.genai import FinishReason, GenerateContentParameters


class TrackingStream(httpx.AsyncByteStream):
    """Async body stream that records whether it was closed."""

    def __init__(self, chunks: List[bytes]):
        self.chunks = chunks
        self.sent = 0
        self.closed = False

    async def __aiter__(self):
        for chunk in self.chunks:
            self.sent += 1
            yield chunk

    async def aclose(self) -> None:
        self.closed = True


def ndjson(*records) -> bytes:
    return b''.join(orjson.dumps(record) + b'\n' for record in records)


class FakeOllama:
    """Mock transport handler capturing requests and replaying canned responses."""

    def __init__(self, response: httpx.Response):
        self.response = response
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.response

    @property
    def last_body(self):
        return orjson.loads(self.requests[-1].content)


@pytest.fixture
def config():
    return ContentGeneratorConfig(model='llama3', base_url='http://ollama.test:11434/')


def make_generator(config, response: httpx.Response):
    fake = FakeOllama(response)
    client = httpx.AsyncClient(transport=httpx.MockTransport(fake))
    return OllamaContentGenerator(config, client=client), fake


CHAT_REQUEST = {'contents': [{'role': 'user', 'parts': [{'text': 'Hi'}]}]}


class TestConstruction:
    """Test generator construction and configuration checks."""

    def test_rejects_other_auth_types(self):
        """Test that a non-Ollama auth type fails at construction."""
        config = ContentGeneratorConfig(model='m', auth_type=AuthType.USE_GEMINI)

        with pytest.raises(ConfigurationException, match='Invalid authType for OllamaContentGenerator: gemini-api-key'):
            OllamaContentGenerator(config)

    def test_default_base_url(self):
        generator = OllamaContentGenerator(ContentGeneratorConfig(model='m'))

        assert generator.chat_url == 'http://localhost:11434/api/chat'
        assert generator.embeddings_url == 'http://localhost:11434/api/embeddings'

    def test_trailing_slash_is_stripped(self, config):
        generator = OllamaContentGenerator(config)

        assert generator.chat_url == 'http://ollama.test:11434/api/chat'

    def test_does_not_use_summarized_thinking(self, config):
        assert OllamaContentGenerator(config).use_summarized_thinking() is False

    def test_factory_builds_ollama_generator(self, config):
        assert isinstance(create_content_generator(config), OllamaContentGenerator)

    def test_factory_rejects_unsupported_auth_type(self):
        with pytest.raises(ConfigurationException, match='Unsupported authType: openai'):
            create_content_generator(ContentGeneratorConfig(auth_type=AuthType.USE_OPENAI))

    @pytest.mark.asyncio
    async def test_aclose_closes_owned_client_only(self, config):
        """Test that only a client created by the generator is closed."""
        owned = OllamaContentGenerator(config)
        await owned.aclose()
        assert owned.http_client.client.is_closed

        external = httpx.AsyncClient()
        async with OllamaContentGenerator(config, client=external):
            pass
        assert not external.is_closed
        await external.aclose()


class TestGenerateContent:
    """Test non-streaming generation."""

    @pytest.mark.asyncio
    async def test_successful_generation(self, config):
        """Test request mapping and response conversion end to end."""
        config.sampling_params = SamplingParams(temperature=0.5, max_tokens=64)
        response = httpx.Response(
            200,
            json={
                'model': 'llama3',
                'created_at': '2024-05-01T12:00:00Z',
                'message': {'role': 'assistant', 'content': 'Hello!'},
                'done': True,
                'prompt_eval_count': 3,
                'eval_count': 2,
            },
        )
        generator, fake = make_generator(config, response)

        result = await generator.generate_content(CHAT_REQUEST, 'prompt-1')

        request = fake.requests[0]
        assert request.method == 'POST'
        assert str(request.url) == 'http://ollama.test:11434/api/chat'
        assert request.headers['content-type'] == 'application/json'
        assert fake.last_body == {
            'model': 'llama3',
            'messages': [{'role': 'user', 'content': 'Hi'}],
            'stream': False,
            'options': {'num_predict': 64, 'temperature': 0.5},
        }

        assert result.text == 'Hello!'
        assert result.candidates[0].finish_reason == FinishReason.STOP
        assert result.usage_metadata.total_token_count == 5

    @pytest.mark.asyncio
    async def test_accepts_model_requests(self, config):
        """Test that validated request models are accepted as well as dicts."""
        generator, fake = make_generator(config, httpx.Response(200, json={'message': {'content': 'ok'}, 'done': True}))

        result = await generator.generate_content(GenerateContentParameters.model_validate(CHAT_REQUEST), 'prompt-2')

        assert result.text == 'ok'

    @pytest.mark.asyncio
    async def test_tool_calls_alongside_text(self, config):
        response = httpx.Response(
            200,
            json={
                'message': {'content': 'Checking', 'tool_calls': [{'function': {'name': 'get_weather', 'arguments': {'city': 'Oslo'}}}]},
                'done': True,
            },
        )
        generator, _ = make_generator(config, response)

        result = await generator.generate_content(CHAT_REQUEST, 'prompt-3')

        assert [(c.name, c.args) for c in result.function_calls] == [('get_weather', {'city': 'Oslo'})]

    @pytest.mark.parametrize(
        'message',
        [
            {'content': ''},
            {},
            {'content': '', 'tool_calls': [{'function': {'name': 'f', 'arguments': '{}'}}]},
        ],
    )
    @pytest.mark.asyncio
    async def test_empty_response_text_fails(self, config, message):
        """Test that a response without message text is an error."""
        generator, _ = make_generator(config, httpx.Response(200, json={'message': message, 'done': True}))

        with pytest.raises(EmptyResponseException, match='No response text received from Ollama') as exc_info:
            await generator.generate_content(CHAT_REQUEST, 'prompt-4')

        assert exc_info.value.correlation_id == 'prompt-4'

    @pytest.mark.asyncio
    async def test_non_success_status(self, config):
        """Test that a non-2xx response embeds status and body in the error."""
        generator, _ = make_generator(config, httpx.Response(404, text='model "llama3" not found'))

        with pytest.raises(ExternalApiException) as exc_info:
            await generator.generate_content(CHAT_REQUEST, 'prompt-5')

        error = exc_info.value
        assert error.status_code == 404
        assert error.correlation_id == 'prompt-5'
        assert error.response_body == 'model "llama3" not found'
        assert str(error) == 'Ollama API request failed: 404 Not Found. Body: model "llama3" not found'

    @pytest.mark.asyncio
    async def test_network_failure(self, config):
        def refuse(request):
            raise httpx.ConnectError('Connection refused', request=request)

        generator = OllamaContentGenerator(config, client=httpx.AsyncClient(transport=httpx.MockTransport(refuse)))

        with pytest.raises(ExternalApiException, match='Connection refused'):
            await generator.generate_content(CHAT_REQUEST, 'prompt-6')

    @pytest.mark.asyncio
    async def test_invalid_json_body(self, config):
        generator, _ = make_generator(config, httpx.Response(200, content=b'<html>'))

        with pytest.raises(TransformerException, match='invalid JSON'):
            await generator.generate_content(CHAT_REQUEST, 'prompt-7')

    @pytest.mark.asyncio
    async def test_unexpected_response_shape(self, config):
        generator, _ = make_generator(config, httpx.Response(200, json=['not', 'an', 'object']))

        with pytest.raises(TransformerException, match='Unexpected Ollama response shape'):
            await generator.generate_content(CHAT_REQUEST, 'prompt-8')


class TestGenerateContentStream:
    """Test streaming generation."""

    @staticmethod
    async def collect(stream):
        return [item async for item in stream]

    @pytest.mark.asyncio
    async def test_streams_records_in_order(self, config):
        """Test that records split across chunks are surfaced once each, in order."""
        stream = TrackingStream([b'{"message":{"content":"a"},"done":false}\n{"mess', b'age":{"content":"b"},"done":true,"eval_count":2}\n'])
        generator, fake = make_generator(config, httpx.Response(200, stream=stream))

        results = await self.collect(generator.generate_content_stream(CHAT_REQUEST, 'stream-1'))

        assert fake.last_body['stream'] is True
        assert [r.text for r in results] == ['a', 'b']
        assert [r.candidates[0].finish_reason for r in results] == [FinishReason.LENGTH, FinishReason.STOP]
        assert results[-1].usage_metadata.candidates_token_count == 2
        assert stream.closed

    @pytest.mark.asyncio
    async def test_skips_invalid_and_empty_lines(self, config):
        body = b'not-json\n' + ndjson({'message': {'content': ''}, 'done': False}, {'message': {'content': 'x'}, 'done': True})
        generator, _ = make_generator(config, httpx.Response(200, content=body))

        results = await self.collect(generator.generate_content_stream(CHAT_REQUEST, 'stream-2'))

        assert [r.text for r in results] == ['x']

    @pytest.mark.asyncio
    async def test_stops_reading_after_done(self, config):
        """Test that chunks after the terminal record are not consumed and the body is closed."""
        stream = TrackingStream(
            [
                ndjson({'message': {'content': 'a'}, 'done': True}),
                ndjson({'message': {'content': 'never'}, 'done': False}),
                ndjson({'message': {'content': 'read'}, 'done': True}),
            ]
        )
        generator, _ = make_generator(config, httpx.Response(200, stream=stream))

        results = await self.collect(generator.generate_content_stream(CHAT_REQUEST, 'stream-3'))

        assert [r.text for r in results] == ['a']
        assert stream.sent == 1
        assert stream.closed

    @pytest.mark.asyncio
    async def test_truncated_stream_raises_after_records(self, config):
        """Test that a stream ending without done surfaces its records, then fails."""
        stream = TrackingStream([ndjson({'message': {'content': 'a'}, 'done': False}, {'message': {'content': 'b'}, 'done': False})])
        generator, _ = make_generator(config, httpx.Response(200, stream=stream))

        results = []
        with pytest.raises(StreamTruncatedException) as exc_info:
            async for response in generator.generate_content_stream(CHAT_REQUEST, 'stream-4'):
                results.append(response)

        assert [r.text for r in results] == ['a', 'b']
        assert exc_info.value.correlation_id == 'stream-4'
        assert stream.closed

    @pytest.mark.asyncio
    async def test_final_line_without_newline(self, config):
        """Test that a terminal record missing its trailing newline still completes the stream."""
        stream = TrackingStream([b'{"message":{"content":"a"}}\n', b'{"message":{"content":"b"},"done":true}'])
        generator, _ = make_generator(config, httpx.Response(200, stream=stream))

        results = await self.collect(generator.generate_content_stream(CHAT_REQUEST, 'stream-5'))

        assert [r.text for r in results] == ['a', 'b']

    @pytest.mark.asyncio
    async def test_abandoned_stream_releases_response(self, config):
        """Test that closing the generator early closes the response body."""
        stream = TrackingStream([ndjson({'message': {'content': 'a'}}), ndjson({'message': {'content': 'b'}, 'done': True})])
        generator, _ = make_generator(config, httpx.Response(200, stream=stream))

        responses = generator.generate_content_stream(CHAT_REQUEST, 'stream-6')
        first = await responses.__anext__()
        await responses.aclose()

        assert first.text == 'a'
        assert stream.closed

    @pytest.mark.asyncio
    async def test_bad_tool_arguments_skip_record(self, config):
        """Test that a record with undecodable tool arguments is skipped, not fatal."""
        body = ndjson(
            {'message': {'content': '', 'tool_calls': [{'function': {'name': 'f', 'arguments': '{broken'}}]}, 'done': False},
            {'message': {'content': 'after'}, 'done': True},
        )
        generator, _ = make_generator(config, httpx.Response(200, content=body))

        results = await self.collect(generator.generate_content_stream(CHAT_REQUEST, 'stream-7'))

        assert [r.text for r in results] == ['after']

    @pytest.mark.asyncio
    async def test_bad_tool_arguments_on_terminal_record_fail(self, config):
        """Test that an unconvertible done record fails the stream instead of ending it silently."""
        body = ndjson(
            {'message': {'content': 'a'}, 'done': False},
            {'message': {'content': '', 'tool_calls': [{'function': {'name': 'f', 'arguments': '{broken'}}]}, 'done': True, 'eval_count': 5},
        )
        generator, _ = make_generator(config, httpx.Response(200, content=body))

        results = []
        with pytest.raises(TransformerException, match="Invalid arguments for tool call 'f'") as exc_info:
            async for response in generator.generate_content_stream(CHAT_REQUEST, 'stream-10'):
                results.append(response)

        assert [(r.text, r.candidates[0].finish_reason) for r in results] == [('a', FinishReason.LENGTH)]
        assert exc_info.value.correlation_id == 'stream-10'

    @pytest.mark.asyncio
    async def test_non_success_status(self, config):
        stream = TrackingStream([b'internal error'])
        generator, _ = make_generator(config, httpx.Response(500, stream=stream))

        with pytest.raises(ExternalApiException) as exc_info:
            await self.collect(generator.generate_content_stream(CHAT_REQUEST, 'stream-8'))

        assert exc_info.value.status_code == 500
        assert exc_info.value.correlation_id == 'stream-8'
        assert 'Body: internal error' in str(exc_info.value)
        assert stream.closed

    @pytest.mark.asyncio
    async def test_transport_error_mid_stream(self, config):
        class FailingStream(httpx.AsyncByteStream):
            async def __aiter__(self):
                yield ndjson({'message': {'content': 'a'}})
                raise httpx.ReadError('connection reset')

        generator, _ = make_generator(config, httpx.Response(200, stream=FailingStream()))

        results = []
        with pytest.raises(ExternalApiException, match='connection reset'):
            async for response in generator.generate_content_stream(CHAT_REQUEST, 'stream-9'):
                results.append(response)

        assert [r.text for r in results] == ['a']


class TestCountTokens:
    @pytest.mark.asyncio
    async def test_count_tokens_is_local(self, config):
        """Test that token counting makes no HTTP request."""
        generator, fake = make_generator(config, httpx.Response(500))

        result = await generator.count_tokens({'contents': [{'role': 'user', 'parts': [{'text': 'hello'}]}, {'role': 'model', 'parts': [{'text': 'world'}]}]})

        # 'hello world' has 11 characters
        assert result.total_tokens == 3
        assert fake.requests == []


class TestEmbedContent:
    """Test embedding requests."""

    EMBED_REQUEST = {'contents': [{'role': 'user', 'parts': [{'text': 'hello'}]}, {'role': 'user', 'parts': [{'text': 'world'}]}]}

    @pytest.mark.asyncio
    async def test_embed_content(self, config):
        generator, fake = make_generator(config, httpx.Response(200, json={'embedding': [0.1, -0.2, 0.3]}))

        result = await generator.embed_content(self.EMBED_REQUEST)

        assert str(fake.requests[0].url) == 'http://ollama.test:11434/api/embeddings'
        assert fake.last_body == {'model': 'llama3', 'prompt': 'hello world'}
        assert [e.values for e in result.embeddings] == [[0.1, -0.2, 0.3]]

    @pytest.mark.asyncio
    async def test_no_vectors_gives_empty_embedding(self, config):
        generator, _ = make_generator(config, httpx.Response(200, json={'embeddings': []}))

        result = await generator.embed_content(self.EMBED_REQUEST)

        assert [e.values for e in result.embeddings] == [[]]

    @pytest.mark.asyncio
    async def test_embeddings_api_error(self, config):
        generator, _ = make_generator(config, httpx.Response(503, text='loading'))

        with pytest.raises(ExternalApiException, match='Ollama embeddings API request failed: 503 Service Unavailable. Body: loading'):
            await generator.embed_content(self.EMBED_REQUEST)
