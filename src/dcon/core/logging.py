"""structlog setup for dcon.

Diagnostics (connect attempts, SQL text, timings, driver errors) go to
stderr; stdout carries only command output, so ``dcon -f csv query ...``
stays pipeable. ``--verbose`` adds the per-statement debug lines and
``--no-color`` turns off ANSI codes in the rendered log lines.
"""

import logging
import sys
from typing import Any

import structlog


class _LazyStderrFactory:
    """Look up sys.stderr when a logger is created.

    CliRunner swaps stderr on every invocation, so a handle bound once
    at configure() time would point at a closed stream.
    """

    def __call__(self, *args: Any, **kwargs: Any) -> structlog.PrintLogger:
        return structlog.PrintLogger(file=sys.stderr)


def setup_logging(verbose: bool = False, *, colors: bool | None = None) -> None:
    """Configure structlog once per CLI invocation.

    Args:
        verbose: Show debug lines (SQL text, durations, row counts).
        colors: Force ANSI colors on or off; None follows whether
            stderr is a terminal.
    """
    level = logging.DEBUG if verbose else logging.INFO
    if colors is None:
        colors = sys.stderr.isatty()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=colors),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=_LazyStderrFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> Any:
    """Logger bound with ``logger=<name>`` (client, interactive, ...).

    Call inside functions, after setup_logging() has run.
    """
    logger = structlog.get_logger()
    if name:
        logger = logger.bind(logger=name)
    return logger
