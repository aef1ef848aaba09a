"""
Structured logging for the submission finalizer.

structlog renders JSON in Lambda (CloudWatch) and plain console lines in
development. Invocation identity is bound through structlog's own
contextvars, so every entry written while a submission is being finalized
carries its submission, assignment and user IDs.

Importing this module does not read settings; the Lambda entry point calls
`configure_logging()` with the configured level once settings have loaded.
"""

import logging
import sys
import time
from contextlib import contextmanager
from typing import Any, Generator

import structlog
from structlog.types import Processor

DEFAULT_LOG_LEVEL = 'INFO'


def _processors(json_output: bool) -> list[Processor]:
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt='iso'),
        structlog.processors.StackInfoRenderer(),
    ]
    if json_output:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))
    return processors


def configure_logging(
    json_output: bool = False,
    log_level: str | None = None,
) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        json_output: JSON lines for Lambda, console lines otherwise
        log_level: Level name; unknown names fall back to INFO
    """
    level_num = getattr(logging, (log_level or DEFAULT_LOG_LEVEL).upper(), logging.INFO)

    # boto3 and httpx log through the stdlib
    logging.basicConfig(format='%(message)s', stream=sys.stdout, level=level_num)
    logging.getLogger().setLevel(level_num)

    structlog.configure(
        processors=_processors(json_output),
        wrapper_class=structlog.make_filtering_bound_logger(level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Structured logger for `name` (typically __name__)."""
    return structlog.get_logger(name)


@contextmanager
def logging_context(
    submission_id: str | None = None,
    assignment_id: str | None = None,
    user_id: str | None = None,
) -> Generator[None, None, None]:
    """
    Bind invocation identity to every log entry inside the block.

    Only the IDs that are given are bound; on exit the previous bindings
    are restored, so nested blocks behave as expected.

    Usage:
        with logging_context(submission_id="s1", assignment_id="hw1"):
            logger.info("fetch.started")  # carries submission_id and assignment_id
    """
    identity = {
        'submission_id': submission_id,
        'assignment_id': assignment_id,
        'user_id': user_id,
    }
    with structlog.contextvars.bound_contextvars(
        **{key: value for key, value in identity.items() if value is not None}
    ):
        yield


class PipelineTimer:
    """
    Wall-clock durations of the named pipeline stages, in milliseconds.

    Usage:
        timer = PipelineTimer()
        with timer.stage("fetch"):
            ...
        logger.info("pipeline.complete", **timer.summary())
    """

    def __init__(self):
        self.stages: dict[str, float] = {}
        self.start_time: float = time.perf_counter()

    @contextmanager
    def stage(self, name: str) -> Generator[None, None, None]:
        """Record how long the block takes, even if it raises."""
        started = time.perf_counter()
        try:
            yield
        finally:
            self.stages[name] = (time.perf_counter() - started) * 1000

    @property
    def total_ms(self) -> float:
        return (time.perf_counter() - self.start_time) * 1000

    def summary(self) -> dict[str, Any]:
        return {
            'total_ms': round(self.total_ms, 2),
            'stages': {name: round(ms, 2) for name, ms in self.stages.items()},
        }


configure_logging()
