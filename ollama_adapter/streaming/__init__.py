"""Streaming decoders for provider output."""

from ollama_adapter.streaming.ndjson import NDJSONDecoder

__all__ = ['NDJSONDecoder']
