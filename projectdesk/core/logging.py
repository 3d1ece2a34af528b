"""structlog setup for ProjectDesk.

Every record, ours and the stdlib ones from uvicorn, SQLAlchemy and httpx,
goes through one ``ProcessorFormatter`` on stdout. Production emits one JSON
object per line with Chinese text left readable. Debug mode uses the
colored console renderer.
"""

import logging
import logging.config

import structlog
from asgi_correlation_id.context import correlation_id

# WeChat session keys, app secrets and bearer tokens must never reach the logs.
REDACTED_KEYS = frozenset({"session_key", "secret", "app_secret", "appsecret", "token", "jwt_secret"})
REDACTED = "[redacted]"

QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "sqlalchemy.engine", "aiosqlite")


def add_correlation_id(logger, method, event_dict):
    """Attach the X-Request-ID of the current request, if any."""
    cid = correlation_id.get(None)
    if cid:
        event_dict["correlation_id"] = cid
    return event_dict


def _redacted(value):
    # Nested containers are copied, not mutated.
    if isinstance(value, dict):
        return {k: REDACTED if k in REDACTED_KEYS else _redacted(v) for k, v in value.items()}
    if type(value) in (list, tuple):
        return type(value)(_redacted(item) for item in value)
    return value


def redact_secrets(logger, method, event_dict):
    """Mask secret-named keys at any depth of the event."""
    for key, value in event_dict.items():
        event_dict[key] = REDACTED if key in REDACTED_KEYS else _redacted(value)
    return event_dict


def configure_structlog(log_level: str = "INFO", json_logs: bool = True) -> None:
    """Install the processor chain and the stdlib bridge.

    Must run before any module calls ``structlog.get_logger``: loggers cache
    their processor chain on first use.

    Args:
        log_level: Root level name, e.g. "INFO" or "DEBUG"
        json_logs: JSON lines when True, console rendering when False
    """
    pre_chain = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_correlation_id,
        redact_secrets,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_logs:
        render_chain = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]
    else:
        render_chain = [structlog.dev.ConsoleRenderer()]

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structured": {
                "()": structlog.stdlib.ProcessorFormatter,
                "processors": [structlog.stdlib.ProcessorFormatter.remove_processors_meta, *render_chain],
                "foreign_pre_chain": pre_chain,
            },
        },
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "formatter": "structured",
                "stream": "ext://sys.stdout",
            },
        },
        "root": {"handlers": ["stdout"], "level": log_level},
        "loggers": {name: {"level": "WARNING"} for name in QUIET_LOGGERS},
    })

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
