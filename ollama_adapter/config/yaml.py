"""YAML loading with ``!env`` tags for configuration files.

``!env OLLAMA_HOST`` requires the variable to be set; ``!env [OLLAMA_HOST, http://localhost:11434]``
falls back to the given default.
"""

from __future__ import annotations

import os
from typing import Any

import yaml


class EnvSafeLoader(yaml.SafeLoader):
    """SafeLoader with the ``!env`` constructor registered on it alone."""


def _construct_env(loader: EnvSafeLoader, node: yaml.Node) -> Any:
    if isinstance(node, yaml.ScalarNode):
        var_name, default, required = loader.construct_scalar(node), None, True
    elif isinstance(node, yaml.SequenceNode):
        values = loader.construct_sequence(node)
        if len(values) != 2:
            raise yaml.constructor.ConstructorError(
                None, None, f'!env sequence must be [var_name, default], got {len(values)} items', node.start_mark
            )
        (var_name, default), required = values, False
    else:
        raise yaml.constructor.ConstructorError(None, None, f'!env expects a scalar or a sequence, got {type(node).__name__}', node.start_mark)

    if not isinstance(var_name, str) or not var_name:
        raise yaml.constructor.ConstructorError(None, None, f'!env variable name must be a non-empty string, got {var_name!r}', node.start_mark)

    value = os.getenv(var_name)
    if value is None:
        if required:
            raise ValueError(f"Required environment variable '{var_name}' is not set")
        return default
    return value


EnvSafeLoader.add_constructor('!env', _construct_env)


def safe_load_with_env(stream) -> Any:
    """``yaml.safe_load`` with ``!env`` support."""

    return yaml.load(stream, Loader=EnvSafeLoader)


__all__ = ['EnvSafeLoader', 'safe_load_with_env']
