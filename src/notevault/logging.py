import logging
import re

import structlog

from notevault.utils import token_prefix

SHARED_PATH_RE = re.compile(r"(/shared/)([^/?\s\"]+)")


def redact_share_tokens(text: str) -> str:
    """Replace share tokens in URL paths with their short prefix."""
    return SHARED_PATH_RE.sub(lambda m: m.group(1) + token_prefix(m.group(2)), text)


class ShareTokenFilter(logging.Filter):
    """Shorten share tokens in access log records (uvicorn passes the path as a positional arg)."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.args, tuple):
            record.args = tuple(redact_share_tokens(arg) if isinstance(arg, str) else arg for arg in record.args)
        return True


def setup_logging(debug: bool) -> None:
    log_level = logging.DEBUG if debug else logging.INFO

    logging.basicConfig(
        level=log_level,
        format="%(message)s",
    )

    # Suppress verbose MongoDB logs
    for name in ("pymongo", "pymongo.topology", "pymongo.connection", "pymongo.serverSelection", "pymongo.command"):
        logging.getLogger(name).setLevel(logging.WARNING)

    processors: list[structlog.types.Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if debug:
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
