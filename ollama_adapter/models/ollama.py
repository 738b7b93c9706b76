"""Ollama chat and embedding API models."""

from typing import Any, Dict, List, Literal, Optional

import orjson
from pydantic import BaseModel, ConfigDict, Field, field_validator


class OllamaMessage(BaseModel):
    """Flattened chat message sent to ``/api/chat``."""

    role: Literal['user', 'assistant', 'system']
    content: str


class OllamaToolFunction(BaseModel):
    name: str
    description: str = ''
    parameters: Dict[str, Any] = Field(default_factory=dict)


class OllamaTool(BaseModel):
    type: str = 'function'
    function: OllamaToolFunction


class OllamaOptions(BaseModel):
    """Sampling options block."""

    num_predict: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    top_k: Optional[int] = None
    repeat_penalty: Optional[float] = None
    seed: Optional[int] = None


class OllamaChatRequest(BaseModel):
    model: str
    messages: List[OllamaMessage] = Field(default_factory=list)
    stream: bool = False
    tools: Optional[List[OllamaTool]] = None
    options: Optional[OllamaOptions] = None

    def to_payload(self) -> Dict[str, Any]:
        """Serialize to the JSON body, leaving out unset options."""
        return self.model_dump(mode='json', exclude_none=True)


class OllamaToolCallFunction(BaseModel):
    model_config = ConfigDict(extra='allow')

    name: str = ''
    arguments: str = ''

    @field_validator('name', mode='before')
    @classmethod
    def _coerce_name(cls, value: Any) -> str:
        return value if isinstance(value, str) else ''

    @field_validator('arguments', mode='before')
    @classmethod
    def _coerce_arguments(cls, value: Any) -> str:
        # Current Ollama servers send arguments as an object, older ones as a JSON string.
        if value is None:
            return ''
        if isinstance(value, str):
            return value
        return orjson.dumps(value).decode()


class OllamaToolCall(BaseModel):
    model_config = ConfigDict(extra='allow')

    function: OllamaToolCallFunction = Field(default_factory=OllamaToolCallFunction)


class OllamaResponseMessage(BaseModel):
    model_config = ConfigDict(extra='allow')

    role: str = 'assistant'
    content: str = ''
    tool_calls: Optional[List[OllamaToolCall]] = None

    @field_validator('content', mode='before')
    @classmethod
    def _coerce_content(cls, value: Any) -> str:
        return value if isinstance(value, str) else ''


class OllamaChatResponse(BaseModel):
    """One decoded unit of ``/api/chat`` output (a full response or a stream record)."""

    model_config = ConfigDict(extra='allow', protected_namespaces=())

    model: str = ''
    created_at: Optional[str] = None
    message: OllamaResponseMessage = Field(default_factory=OllamaResponseMessage)
    done: bool = False
    done_reason: Optional[str] = None
    total_duration: Optional[int] = None
    load_duration: Optional[int] = None
    prompt_eval_count: Optional[int] = None
    prompt_eval_duration: Optional[int] = None
    eval_count: Optional[int] = None
    eval_duration: Optional[int] = None

    @property
    def has_content(self) -> bool:
        """Whether the record carries message text or at least one tool call."""
        return bool(self.message.content) or bool(self.message.tool_calls)


class OllamaEmbeddingRequest(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    model: str
    prompt: str


class OllamaEmbeddingResponse(BaseModel):
    """Embedding response; ``/api/embeddings`` returns ``embedding``, ``/api/embed`` returns ``embeddings``."""

    model_config = ConfigDict(extra='allow', protected_namespaces=())

    model: Optional[str] = None
    embeddings: Optional[List[List[float]]] = None
    embedding: Optional[List[float]] = None
