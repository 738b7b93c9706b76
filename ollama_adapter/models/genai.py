"""Generic content-generation models (Gemini GenerateContent shapes).

Inbound payloads may be loose: ``contents`` can be a single turn, a list of
turns or a bare string, and ``parts`` can be a single part or a list. The
validators below normalize that once so mapping code only ever sees lists.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class GenAIModel(BaseModel):
    """Base model accepting both camelCase wire names and snake_case attributes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra='allow', protected_namespaces=())

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using wire (camelCase) names."""
        return self.model_dump(mode='json', by_alias=True, exclude_none=True)


class FunctionCall(GenAIModel):
    id: Optional[str] = None
    name: Optional[str] = None
    args: Dict[str, Any] = Field(default_factory=dict)


class FunctionResponse(GenAIModel):
    id: Optional[str] = None
    name: Optional[str] = None
    response: Dict[str, Any] = Field(default_factory=dict)


class Part(GenAIModel):
    """Smallest unit of content: text, or a function call/result."""

    text: Optional[str] = None
    function_call: Optional[FunctionCall] = None
    function_response: Optional[FunctionResponse] = None

    @model_validator(mode='before')
    @classmethod
    def _coerce_part(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {'text': data}
        if isinstance(data, dict) and 'text' in data and not isinstance(data['text'], str):
            return {key: value for key, value in data.items() if key != 'text'}
        return data


def _is_part_like(value: Any) -> bool:
    return isinstance(value, (Part, dict, str))


class Content(GenAIModel):
    """One role-tagged turn of a conversation."""

    role: Optional[str] = None
    parts: List[Part] = Field(default_factory=list)

    @field_validator('role', mode='before')
    @classmethod
    def _coerce_role(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None

    @field_validator('parts', mode='before')
    @classmethod
    def _normalize_parts(cls, value: Any) -> List[Any]:
        if value is None:
            return []
        if _is_part_like(value):
            return [value]
        if isinstance(value, (list, tuple)):
            return [part for part in value if _is_part_like(part)]
        return []

    @property
    def is_turn(self) -> bool:
        """Whether this entry was supplied with both a role and a parts sequence."""
        return {'role', 'parts'} <= self.model_fields_set

    @property
    def has_parts(self) -> bool:
        return 'parts' in self.model_fields_set


def normalize_contents(value: Any) -> List[Any]:
    """Normalize the array-or-single ``contents`` union into a list of turns.

    Bare strings become user turns with one text part; anything that is not
    a mapping, a ``Content`` or a string is dropped.
    """
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        value = [value]

    contents = []
    for item in value:
        if isinstance(item, str):
            contents.append({'role': 'user', 'parts': [{'text': item}]})
        elif isinstance(item, (Content, dict)):
            contents.append(item)
    return contents


def join_text_parts(contents: List[Content]) -> str:
    """Join the string text of every part of every turn carrying parts with single spaces."""
    texts = []
    for content in contents:
        if not content.has_parts:
            continue
        texts.extend(part.text for part in content.parts if part.text is not None)
    return ' '.join(texts)


class FunctionDeclaration(GenAIModel):
    name: Optional[str] = None
    description: Optional[str] = None
    parameters: Optional[Dict[str, Any]] = None

    @model_validator(mode='before')
    @classmethod
    def _drop_invalid_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        cleaned = dict(data)
        for key in ('name', 'description'):
            if key in cleaned and not isinstance(cleaned[key], str):
                cleaned.pop(key)
        if 'parameters' in cleaned and not isinstance(cleaned['parameters'], dict):
            cleaned.pop('parameters')
        return cleaned


class Tool(GenAIModel):
    function_declarations: Optional[List[FunctionDeclaration]] = None

    @field_validator('function_declarations', mode='before')
    @classmethod
    def _normalize_declarations(cls, value: Any) -> Optional[List[Any]]:
        if not isinstance(value, (list, tuple)):
            return None
        return [decl if isinstance(decl, (FunctionDeclaration, dict)) else {} for decl in value]


def normalize_tools(value: Any) -> Optional[List[Any]]:
    if value is None:
        return None
    if not isinstance(value, (list, tuple)):
        value = [value]
    # Keep malformed entries as empty tools so they map to the filtered sentinel.
    return [tool if isinstance(tool, (Tool, dict)) else {} for tool in value]


class GenerateContentConfig(GenAIModel):
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    top_k: Optional[float] = None
    max_output_tokens: Optional[int] = None
    tools: Optional[List[Tool]] = None

    @field_validator('tools', mode='before')
    @classmethod
    def _normalize_tools(cls, value: Any) -> Optional[List[Any]]:
        return normalize_tools(value)


class ContentsRequest(GenAIModel):
    """Common base for requests carrying conversation contents."""

    model: Optional[str] = None
    contents: List[Content] = Field(default_factory=list)

    @field_validator('contents', mode='before')
    @classmethod
    def _normalize_contents(cls, value: Any) -> List[Any]:
        return normalize_contents(value)


class GenerateContentParameters(ContentsRequest):
    tools: Optional[List[Tool]] = None
    config: Optional[GenerateContentConfig] = None

    @field_validator('tools', mode='before')
    @classmethod
    def _normalize_tools(cls, value: Any) -> Optional[List[Any]]:
        return normalize_tools(value)

    @property
    def effective_tools(self) -> List[Tool]:
        """Top-level tools, falling back to ``config.tools``."""
        if self.tools is not None:
            return self.tools
        if self.config is not None and self.config.tools is not None:
            return self.config.tools
        return []


class CountTokensParameters(ContentsRequest):
    pass


class EmbedContentParameters(ContentsRequest):
    pass


class FinishReason(str, Enum):
    STOP = 'STOP'
    LENGTH = 'LENGTH'


class Candidate(GenAIModel):
    content: Content = Field(default_factory=lambda: Content(role='model', parts=[]))
    finish_reason: Optional[FinishReason] = None
    index: int = 0


class UsageMetadata(GenAIModel):
    prompt_token_count: int = Field(default=0, ge=0)
    candidates_token_count: int = Field(default=0, ge=0)
    total_token_count: int = Field(default=0, ge=0)


class GenerateContentResponse(GenAIModel):
    candidates: List[Candidate] = Field(default_factory=list)
    usage_metadata: UsageMetadata = Field(default_factory=UsageMetadata)
    model_version: Optional[str] = None
    create_time: Optional[str] = None

    @property
    def text(self) -> Optional[str]:
        """Concatenated text parts of the first candidate, or None without any."""
        if not self.candidates:
            return None
        texts = [part.text for part in self.candidates[0].content.parts if part.text is not None]
        return ''.join(texts) if texts else None

    @property
    def function_calls(self) -> List[FunctionCall]:
        if not self.candidates:
            return []
        return [part.function_call for part in self.candidates[0].content.parts if part.function_call is not None]


class CountTokensResponse(GenAIModel):
    total_tokens: int = Field(default=0, ge=0)


class ContentEmbedding(GenAIModel):
    values: List[float] = Field(default_factory=list)


class EmbedContentResponse(GenAIModel):
    embeddings: List[ContentEmbedding] = Field(default_factory=list)
