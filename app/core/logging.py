"""
Logging setup

structlog renders every record, including records from stdlib loggers of
third-party libraries, through one ProcessorFormatter on stdout. Console
output with colors in development, one JSON object per line in production.
The request and project bound in app.core.context are added to each event.
"""

import logging
import re
import sys
from typing import Any, TextIO

import structlog

from app.core.config import settings
from app.core.context import get_project_id, get_request_id

HANDLER_NAME = "changelog"

# Libraries that log every HTTP round trip or callback at INFO
NOISY_LOGGERS = (
    "httpcore",
    "httpx",
    "langfuse",
    "langchain",
    "langgraph",
    "openai",
    "google_genai",
    "anyio",
)

SENSITIVE_PATTERNS = [
    (re.compile(r"(token=)[^&\s]+", re.IGNORECASE), r"\1***"),
    (re.compile(r"(Bearer\s+)[^\s]+", re.IGNORECASE), r"\1***"),
    (re.compile(r"(api[_-]?key=)[^&\s]+", re.IGNORECASE), r"\1***"),
    (re.compile(r"(sk-)[A-Za-z0-9_-]{8,}"), r"\1***"),
    (re.compile(r"\b(ghp_|gho_|github_pat_)[A-Za-z0-9_]{8,}"), r"\1***"),
]


def mask_secrets(value: str) -> str:
    """Replace credentials in a string with ***"""
    for pattern, replacement in SENSITIVE_PATTERNS:
        value = pattern.sub(replacement, value)
    return value


def inject_context(logger: Any, method_name: str, event_dict: dict) -> dict:
    """Add the bound request_id and project_id, leaving explicit values alone"""
    for key, value in (("request_id", get_request_id()), ("project_id", get_project_id())):
        if value and key not in event_dict:
            event_dict[key] = value
    return event_dict


def mask_processor(logger: Any, method_name: str, event_dict: dict) -> dict:
    """Mask credentials in string values and in string items of lists"""
    for key, value in event_dict.items():
        if isinstance(value, str):
            event_dict[key] = mask_secrets(value)
        elif isinstance(value, (list, tuple)):
            event_dict[key] = [mask_secrets(v) if isinstance(v, str) else v for v in value]
    return event_dict


def build_processors(json_output: bool) -> list:
    """Processors shared by structlog loggers and foreign stdlib records

    Masking runs after positional arguments are merged into the event so
    secrets passed as %s arguments are caught too.
    """
    processors: list = [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        inject_context,
    ]
    if json_output:
        processors += [
            structlog.processors.format_exc_info,
            mask_processor,
        ]
    processors += [
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    return processors


def build_handler(json_output: bool, stream: TextIO | None = None) -> logging.Handler:
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=True)
    )
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=build_processors(json_output),
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    level: str | None = None,
    json_output: bool | None = None,
    stream: TextIO | None = None,
) -> None:
    """
    Configure structlog and the root logger

    Safe to call more than once: the handler installed by a previous call is
    replaced, handlers added by others (pytest caplog, for one) are kept.

    Args:
        level: log level name, settings.log_level when omitted
        json_output: JSON lines instead of console output, on in production
        stream: output stream, stdout when omitted
    """
    if json_output is None:
        json_output = settings.is_production
    log_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)

    structlog.configure(
        processors=build_processors(json_output)
        + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if handler.get_name() == HANDLER_NAME:
            root_logger.removeHandler(handler)
    root_logger.addHandler(build_handler(json_output, stream))
    root_logger.setLevel(log_level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger"""
    return structlog.get_logger(name)
