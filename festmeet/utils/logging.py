"""structlog setup for festmeet.

Every festmeet logger and the stdlib ``logging`` root share one processor
chain.  Only the final renderer changes: readable console lines while
developing, one JSON object per line when the app environment is
``production`` or JSON is requested explicitly.

The CLI calls :func:`configure_logging` with values from the merged
configuration (``app.env``, ``logging.level``) and points it at stderr so
the meetup report on stdout stays clean.  Library code only ever calls
:func:`get_logger`.
"""

import logging
import os
import sys

import structlog

# Pillow logs every PNG chunk at DEBUG; pytesseract logs its subprocess calls.
_CHATTY_LIBRARIES = ("PIL", "pytesseract")

_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.StackInfoRenderer(),
    structlog.dev.set_exc_info,
    structlog.processors.TimeStamper(fmt="iso"),
]


def resolve_app_env(app_env: str | None = None) -> str:
    """Return *app_env*, else ``FESTMEET_APP_ENV``, else ``APP_ENV``, else development."""
    if app_env:
        return app_env.lower()
    return os.environ.get("FESTMEET_APP_ENV", os.environ.get("APP_ENV", "development")).lower()


def _renderer(use_json: bool, stream) -> structlog.types.Processor:  # noqa: ANN001
    if use_json:
        return structlog.processors.JSONRenderer()
    isatty = getattr(stream, "isatty", None)
    return structlog.dev.ConsoleRenderer(colors=bool(isatty and isatty()))


def configure_logging(
    log_level: str = "INFO",
    json_output: bool = False,
    stream=None,  # noqa: ANN001
    app_env: str | None = None,
) -> structlog.BoundLogger:
    """Configure structlog and route stdlib logging through it.

    Args:
        log_level: Minimum level name (DEBUG, INFO, WARNING, ERROR).
        json_output: Force JSON lines regardless of environment.
        stream: Where log lines go; stdout when omitted.
        app_env: Application environment, see :func:`resolve_app_env`.

    Returns:
        A configured structlog BoundLogger.
    """
    level = log_level.upper()
    out = stream or sys.stdout
    renderer = _renderer(json_output or resolve_app_env(app_env) == "production", out)

    structlog.configure(
        processors=[*_PROCESSORS, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=out),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(out)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *_PROCESSORS,
                renderer,
            ],
        )
    )
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # Third-party debug output stays hidden even when festmeet runs at DEBUG.
    for name in _CHATTY_LIBRARIES:
        logging.getLogger(name).setLevel(max(logging.WARNING, root_logger.level))

    return structlog.get_logger()


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a structlog logger bound to *name*, configuring defaults first if needed."""
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(logger_name=name)
