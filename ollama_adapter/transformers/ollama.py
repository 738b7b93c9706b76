"""Ollama transformers for request/response format conversion."""

from typing import Any, Dict, List, Optional

import orjson

from ollama_adapter.common.exceptions import TransformerException
from ollama_adapter.config.models import ContentGeneratorConfig
from ollama_adapter.models.genai import (
    Candidate,
    Content,
    FinishReason,
    FunctionCall,
    GenerateContentParameters,
    GenerateContentResponse,
    Part,
    Tool,
    UsageMetadata,
)
from ollama_adapter.models.ollama import (
    OllamaChatRequest,
    OllamaChatResponse,
    OllamaMessage,
    OllamaOptions,
    OllamaTool,
    OllamaToolCall,
    OllamaToolFunction,
)
from ollama_adapter.transformers.interfaces import RequestTransformer, ResponseTransformer


class OllamaRequestTransformer(RequestTransformer):
    """Transformer to convert generic content requests to Ollama chat format."""

    # Any role not listed here (system included) is sent as user.
    ROLE_MAPPING = {'model': 'assistant', 'user': 'user'}

    def __init__(self, logger, config: ContentGeneratorConfig):
        super().__init__(logger)
        self.config = config

    def transform(self, request: GenerateContentParameters) -> OllamaChatRequest:
        """Convert a generic request to an Ollama ``/api/chat`` request."""
        ollama_request = OllamaChatRequest(model=self.config.model, messages=self._convert_contents(request.contents), stream=False)

        if tools := request.effective_tools:
            ollama_request.tools = self._convert_tools(tools)

        if options := self._build_options():
            ollama_request.options = options

        return ollama_request

    def _convert_contents(self, contents: List[Content]) -> List[OllamaMessage]:
        """Flatten each turn into a single text message.

        Non-text parts are dropped; a turn with no text left is not sent.
        """
        messages = []

        for content in contents:
            if not content.is_turn:
                self.logger.debug('Skipping content without role and parts')
                continue

            text = ' '.join(part.text for part in content.parts if part.text is not None).strip()
            if not text:
                continue

            messages.append(OllamaMessage(role=self.ROLE_MAPPING.get(content.role, 'user'), content=text))

        return messages

    def _convert_tools(self, tools: List[Tool]) -> List[OllamaTool]:
        """Convert tools to Ollama function tools.

        Tools are converted one by one and unusable ones come back as an empty
        sentinel, which is filtered out afterwards.
        """
        converted = [self._convert_tool(tool) for tool in tools]
        return [tool for tool in converted if tool.type and tool.function.name]

    def _convert_tool(self, tool: Tool) -> OllamaTool:
        declarations = tool.function_declarations or []
        if declarations and declarations[0].name:
            func = declarations[0]
            return OllamaTool(
                type='function',
                function=OllamaToolFunction(name=func.name, description=func.description or '', parameters=func.parameters or {}),
            )

        self.logger.warning('Tool has no usable function declaration, skipping')
        return OllamaTool(type='', function=OllamaToolFunction(name=''))

    def _build_options(self) -> Optional[OllamaOptions]:
        """Build the Ollama options block from the configured sampling parameters."""
        params = self.config.sampling_params
        if params is None:
            return None

        return OllamaOptions(
            temperature=params.temperature,
            top_p=params.top_p,
            top_k=params.top_k,
            repeat_penalty=params.repetition_penalty,
            num_predict=params.max_tokens,
            seed=params.seed,
        )


class OllamaResponseTransformer(ResponseTransformer):
    """Transformer to convert Ollama chat records to generic content responses."""

    def transform_response(self, response: OllamaChatResponse) -> GenerateContentResponse:
        """Convert one Ollama record (full response or stream record) to a generic response."""
        parts: List[Part] = []

        if response.message.content:
            parts.append(Part(text=response.message.content))

        for tool_call in response.message.tool_calls or []:
            parts.append(Part(function_call=self._convert_tool_call(tool_call)))

        candidate = Candidate(
            content=Content(role='model', parts=parts),
            finish_reason=FinishReason.STOP if response.done else FinishReason.LENGTH,
            index=0,
        )

        return GenerateContentResponse(
            candidates=[candidate],
            usage_metadata=self._convert_usage(response),
            model_version=response.model or None,
            create_time=response.created_at,
        )

    def _convert_tool_call(self, tool_call: OllamaToolCall) -> FunctionCall:
        name = tool_call.function.name
        return FunctionCall(name=name, args=self._parse_arguments(name, tool_call.function.arguments))

    def _parse_arguments(self, name: str, arguments: str) -> Dict[str, Any]:
        try:
            args = orjson.loads(arguments or '{}')
        except orjson.JSONDecodeError as e:
            raise TransformerException(f"Invalid arguments for tool call '{name}': {e}") from e

        if not isinstance(args, dict):
            raise TransformerException(f"Arguments for tool call '{name}' must be a JSON object, got {type(args).__name__}")
        return args

    def _convert_usage(self, response: OllamaChatResponse) -> UsageMetadata:
        prompt_tokens = max(response.prompt_eval_count or 0, 0)
        candidate_tokens = max(response.eval_count or 0, 0)
        return UsageMetadata(
            prompt_token_count=prompt_tokens,
            candidates_token_count=candidate_tokens,
            total_token_count=prompt_tokens + candidate_tokens,
        )
