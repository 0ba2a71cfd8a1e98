"""Logging setup: one stderr handler for scan and service logs.

The workspace scan logs through stdlib loggers under ``closuredeps``. The
services log structured events through structlog, binding ``op`` and
``root`` as context variables while an operation runs. Records from both
sides carry that context, so a load issue logged during a scan names the
command that triggered the scan.

Console output prints ``path``/``output`` fields relative to the bound scan
root and leaves ``root`` itself out. ``--log-json`` keeps every field as is.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

LOGGER_NAME = "closuredeps"

_PATH_FIELDS = ("path", "output")


def _relative_to_root(_logger: WrappedLogger, _method: str, event_dict: EventDict) -> EventDict:
    root = event_dict.pop("root", None)
    if not root:
        return event_dict
    base = Path(root)
    for field in _PATH_FIELDS:
        value = event_dict.get(field)
        if isinstance(value, str) and Path(value).is_relative_to(base):
            event_dict[field] = Path(value).relative_to(base).as_posix()
    return event_dict


def _render_chain(log_json: bool) -> list[Processor]:
    if log_json:
        return [structlog.processors.JSONRenderer()]
    return [_relative_to_root, structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Route all closuredeps logging to stderr.

    The ``closuredeps`` logger runs at DEBUG with *verbose* and WARNING
    otherwise; third-party loggers stay at WARNING. Calling this again
    replaces the handler rather than adding a second one.
    """
    pre_chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.ExtraAdder(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *_render_chain(log_json),
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers[:] = [handler]
    root_logger.setLevel(logging.WARNING)
    logging.getLogger(LOGGER_NAME).setLevel(logging.DEBUG if verbose else logging.WARNING)
