"""Filesystem locations for adapter configuration and logs."""

from pathlib import Path


def get_app_dir() -> Path:
    """Return the adapter's configuration directory under the user's home."""

    return Path.home() / '.ollama-adapter'


__all__ = ['get_app_dir']
