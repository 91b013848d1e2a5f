#!/usr/bin/env python3
"""
Logging and Metrics for the Recipe Scaling Engine
Structured logging through structlog and Prometheus counters for
scaling requests, parse failures and unit conversions.
"""

import sys
import time
import logging
from functools import wraps
from typing import Optional

import structlog
from structlog.stdlib import LoggerFactory
from prometheus_client import Counter, Histogram

from .config import config

# Prometheus Metrics
SCALING_REQUESTS = Counter(
    'recipe_scaling_requests_total',
    'Total recipe scaling requests',
    ['result']
)
INGREDIENT_PARSE_FAILURES = Counter(
    'ingredient_parse_failures_total',
    'Ingredient entries that could not be parsed',
    ['input_kind']
)
UNIT_CONVERSIONS = Counter(
    'unit_conversions_total',
    'Unit normalization attempts',
    ['result']
)
SCALING_DURATION = Histogram(
    'recipe_scaling_duration_seconds',
    'Time spent scaling a whole recipe'
)


def configure_logging(level: Optional[str] = None, log_format: Optional[str] = None, stream=None):
    """Configure structured logging with Structlog. Logs go to stdout unless a stream is given."""
    level = (level or config.LOG_LEVEL).upper()
    log_format = log_format or config.LOG_FORMAT

    # Configure standard library logging
    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stdout,
        level=getattr(logging, level, logging.INFO)
    )

    # Configure structlog
    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


logger = structlog.get_logger(__name__)


def track_execution_time(operation_name: str):
    """Decorator to log and record execution time of a scaling operation."""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            start_time = time.perf_counter()

            try:
                result = func(*args, **kwargs)
            except Exception as e:
                duration = time.perf_counter() - start_time
                logger.warning(
                    "Operation failed",
                    operation=operation_name,
                    duration=duration,
                    error=str(e),
                    success=False
                )
                raise

            duration = time.perf_counter() - start_time
            if config.ENABLE_METRICS:
                SCALING_DURATION.observe(duration)
            logger.debug(
                "Operation completed",
                operation=operation_name,
                duration=duration,
                success=True
            )
            return result

        return wrapper
    return decorator


def record_metric(counter: Counter, **labels):
    """Increment a labelled counter when metrics are enabled."""
    if config.ENABLE_METRICS:
        counter.labels(**labels).inc()
