"""structlog setup for hook processes.

stdout carries the verdict JSON, so log records always go to stderr.
"""

import logging
import sys

import structlog
from structlog.typing import EventDict, Processor, WrappedLogger


def _drop_empty_context(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
    """Bound hook fields are optional; don't render ``tool_name=''``."""
    for key in ("event_name", "tool_name"):
        if not event_dict.get(key):
            event_dict.pop(key, None)
    return event_dict


def _pre_chain() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        _drop_empty_context,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def build_formatter(json_output: bool = False) -> structlog.stdlib.ProcessorFormatter:
    renderer: Processor = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    return structlog.stdlib.ProcessorFormatter(
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        foreign_pre_chain=_pre_chain(),
    )


def configure_logging(log_level: str = "warning", json_output: bool = False) -> None:
    """Route stdlib and structlog records through one stderr handler.

    ``log_level`` is a name such as ``debug`` or ``warning``; unknown names
    fall back to warning. ``json_output`` switches from console text to
    JSON lines.
    """
    structlog.configure(
        processors=_pre_chain() + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(build_formatter(json_output))

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(getattr(logging, log_level.upper(), logging.WARNING))
    # subprocess transport debug chatter
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def bind_hook_context(hook: str, event: str | None = None, tool_name: str | None = None) -> None:
    """Tag every record from this process with the running hook."""
    structlog.contextvars.bind_contextvars(hook=hook, event_name=event or "", tool_name=tool_name or "")


def clear_hook_context() -> None:
    structlog.contextvars.clear_contextvars()
