import logging

import structlog

from .config import settings


def configure_logging(level: str | None = None, json_output: bool | None = None) -> None:
    """Route structlog through stdlib logging.

    JSON lines by default; set ``LOG_JSON=false`` for the console renderer
    when running the Streamlit app or the API locally.
    """

    level_name = (level or settings.log_level).upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format="%(message)s")

    use_json = settings.log_json if json_output is None else json_output
    renderer = (
        structlog.processors.JSONRenderer()
        if use_json
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


configure_logging()


def get_logger(name: str | None = None):
    if name is None:
        return structlog.get_logger()
    return structlog.get_logger(name)
