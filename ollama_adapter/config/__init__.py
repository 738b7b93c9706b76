from typing import Optional

from ollama_adapter.config.models import AuthType, ContentGeneratorConfig, LoggingConfig, SamplingParams
from ollama_adapter.config.paths import get_app_dir


class ConfigurationService:
    """Loads and holds a content generator configuration."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path
        self._config = self._load_config()

    def _load_config(self) -> ContentGeneratorConfig:
        return ContentGeneratorConfig.load(self.config_path)

    def get_config(self) -> ContentGeneratorConfig:
        """Get the configuration instance."""
        return self._config

    def reload_config(self) -> ContentGeneratorConfig:
        """Reload configuration from file."""
        self._config = self._load_config()
        return self._config


def setup_config() -> None:
    """Create ~/.ollama-adapter/config.yaml with defaults if it does not exist."""
    app_dir = get_app_dir()
    app_dir.mkdir(exist_ok=True)

    config_file = app_dir / 'config.yaml'
    if not config_file.exists():
        ContentGeneratorConfig().save(str(config_file))


__all__ = ['AuthType', 'ConfigurationService', 'ContentGeneratorConfig', 'LoggingConfig', 'SamplingParams', 'setup_config']
