import logging
import logging.handlers
import re
from pathlib import Path
from typing import List, Optional

import orjson
import structlog
from structlog.types import FilteringBoundLogger

from ollama_adapter.config.models import LoggingConfig
from ollama_adapter.config.paths import get_app_dir

_SIZE_MULTIPLIERS = {'B': 1, 'KB': 1024, 'MB': 1024**2, 'GB': 1024**3, 'TB': 1024**4}


def _orjson_serializer(*args, **kwargs) -> str:
    return orjson.dumps(*args, **kwargs).decode('utf-8')


def parse_file_size(size: str) -> int:
    """Parse a size such as ``10MB`` into bytes; unparseable values give 10MB."""
    size_match = re.match(r'^\s*(\d+)\s*([KMGT]?B?)\s*$', size.upper())
    if not size_match:
        return 10 * _SIZE_MULTIPLIERS['MB']

    size_num = int(size_match.group(1))
    size_unit = size_match.group(2) or 'B'
    if len(size_unit) == 1 and size_unit != 'B':
        size_unit += 'B'
    return size_num * _SIZE_MULTIPLIERS[size_unit]


def _create_log_handlers(log_config: LoggingConfig, log_dir: Path) -> List[logging.Handler]:
    """Create logging handlers based on configuration."""
    handlers: List[logging.Handler] = []

    if log_config.console_enabled:
        formatter = structlog.stdlib.ProcessorFormatter(
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, structlog.processors.format_exc_info, structlog.dev.ConsoleRenderer()]
        )
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    if log_config.file_enabled:
        formatter = structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(serializer=_orjson_serializer),
            ]
        )
        file_handler = logging.handlers.RotatingFileHandler(
            log_dir / 'ollama-adapter.log', maxBytes=parse_file_size(log_config.max_file_size), backupCount=log_config.backup_count
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    return handlers


def get_logger(name: str) -> FilteringBoundLogger:
    """Get a structlog logger."""
    return structlog.get_logger(name)


def configure_structlog(log_config: Optional[LoggingConfig] = None) -> None:
    """Configure structlog on top of stdlib logging (console and optional rotating file)."""
    log_config = log_config or LoggingConfig()
    level = getattr(logging, log_config.level.upper())

    log_dir = Path(log_config.log_file_dir) if log_config.log_file_dir else get_app_dir() / 'logs'
    if log_config.file_enabled:
        if log_dir.exists() and not log_dir.is_dir():
            raise ValueError(f'Log directory {log_dir} is not a directory')
        log_dir.mkdir(exist_ok=True, parents=True)

    logging.basicConfig(
        level=level,
        handlers=_create_log_handlers(log_config, log_dir),
        format='%(message)s',
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt='ISO', utc=True),
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
