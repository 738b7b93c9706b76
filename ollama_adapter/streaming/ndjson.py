"""Incremental decoder for Ollama's newline-delimited JSON stream."""

import codecs
from typing import List, Optional, Union

import orjson
from pydantic import ValidationError

from ollama_adapter.config.log import get_logger
from ollama_adapter.models.ollama import OllamaChatResponse

logger = get_logger(__name__)


class NDJSONDecoder:
    """Turns arbitrarily sized chunks of ``/api/chat`` output into stream records.

    Feed chunks as they arrive; each call returns the records completed by
    that chunk. A record is surfaced when it carries text or tool calls, or
    when it is the terminal (``done``) record. Once the terminal record has
    been surfaced the decoder ignores everything after it.

    Lines that are not valid records are logged and skipped.
    """

    def __init__(self):
        self._buffer = ''
        self._utf8 = codecs.getincrementaldecoder('utf-8')(errors='replace')
        self._done = False

    @property
    def buffer(self) -> str:
        """Incomplete trailing line carried over to the next chunk."""
        return self._buffer

    @property
    def terminated(self) -> bool:
        """Whether the terminal record has been seen."""
        return self._done

    def feed(self, chunk: Union[bytes, str]) -> List[OllamaChatResponse]:
        if self._done:
            return []

        self._buffer += chunk if isinstance(chunk, str) else self._utf8.decode(chunk)

        *lines, self._buffer = self._buffer.split('\n')
        return self._process_lines(lines)

    def finish(self) -> List[OllamaChatResponse]:
        """Flush at end of input; a final line without a trailing newline still counts."""
        if self._done:
            return []

        remainder = self._buffer + self._utf8.decode(b'', final=True)
        self._buffer = ''
        return self._process_lines([remainder])

    def _process_lines(self, lines: List[str]) -> List[OllamaChatResponse]:
        records = []

        for line in lines:
            record = self._parse_line(line)
            if record is None:
                continue

            if record.has_content or record.done:
                records.append(record)

            if record.done:
                self._done = True
                self._buffer = ''
                break

        return records

    def _parse_line(self, line: str) -> Optional[OllamaChatResponse]:
        line = line.strip()
        if not line:
            return None

        try:
            return OllamaChatResponse.model_validate(orjson.loads(line))
        except (orjson.JSONDecodeError, ValidationError) as e:
            logger.warning('Failed to parse Ollama stream chunk', line=line[:200], error=str(e))
            return None
