"""
Structured Logging.

structlog on top of the stdlib logging tree, configured from the validated
``logging`` section of AppConfig (config/settings/logging.yaml). Client
calls, the reference service and the CLI all log through here, so every
record carries the same fields:

    timestamp   ISO 8601 UTC
    level       debug .. critical
    logger      module path, e.g. hello_versioning.client.invoker
    event       message
    func_name   emitting function
    lineno      emitting line
    source      client, server, cli, internal or unknown

Usage:
    from hello_versioning.core.logging import get_logger, log_with_source, setup_logging

    setup_logging(level="DEBUG", format_type="console")
    logger = get_logger(__name__)
    log_with_source(logger, "client", "debug", "API request", version="2")
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Any

import structlog
from structlog.typing import Processor

from hello_versioning.core.config import find_project_root, get_app_config
from hello_versioning.core.config_schema import FileHandlerSchema

KNOWN_SOURCES = frozenset({"client", "server", "cli", "internal"})

# Libraries that log every request at INFO; ours already carry the version.
NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ],
        ),
    ]


def _file_handler(config: FileHandlerSchema) -> RotatingFileHandler:
    """Rotating JSONL file under the project root."""
    log_path = find_project_root() / config.path
    log_path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        filename=str(log_path),
        maxBytes=config.max_bytes,
        backupCount=config.backup_count,
        encoding="utf-8",
    )


def setup_logging(
    level: str | None = None,
    format_type: str | None = None,
    enable_console: bool | None = None,
    enable_file_logging: bool | None = None,
) -> None:
    """
    Configure structlog and the root logger.

    Arguments left as None fall back to logging.yaml. The file handler
    always writes JSON; ``format_type`` only affects the console.
    """
    config = get_app_config().logging
    level = level or config.level
    format_type = format_type or config.format
    if enable_console is None:
        enable_console = config.handlers.console.enabled
    if enable_file_logging is None:
        enable_file_logging = config.handlers.file.enabled

    processors = _shared_processors()
    structlog.configure(
        processors=processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    json_formatter = structlog.stdlib.ProcessorFormatter(
        processor=structlog.processors.JSONRenderer(),
        foreign_pre_chain=processors,
    )
    if format_type == "console":
        console_formatter = structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()),
            foreign_pre_chain=processors,
        )
    else:
        console_formatter = json_formatter

    handlers: list[logging.Handler] = []
    if enable_console:
        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(console_formatter)
        handlers.append(console)
    if enable_file_logging:
        file_handler = _file_handler(config.handlers.file)
        file_handler.setFormatter(json_formatter)
        handlers.append(file_handler)

    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper()))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> Any:
    """Get a structlog logger for the given name, typically __name__."""
    return structlog.get_logger(name)


def log_with_source(logger: Any, source: str, level: str, message: str, **kwargs: Any) -> None:
    """
    Log ``message`` at ``level`` with a ``source`` field.

    A source outside KNOWN_SOURCES is recorded as "unknown".

    Raises:
        AttributeError: If level is not a log method of ``logger``.
    """
    if source not in KNOWN_SOURCES:
        source = "unknown"
    getattr(logger, level.lower())(message, source=source, **kwargs)
