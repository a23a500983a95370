"""structlog setup for the command line entry point."""

import logging
import sys

import structlog


def configure_logging(verbose: bool = False) -> None:
    """
    Route structlog output to stderr so result tables on stdout stay clean.

    Args:
        verbose: Emit DEBUG events (scenario state transitions, connects)
    """
    level = logging.DEBUG if verbose else logging.INFO

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
