"""Structured log context and per-invocation metrics for the pipeline."""

import logging
import uuid
from collections import Counter
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional


class LogLevel(Enum):
    """Log levels accepted by StructuredLogger."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


@dataclass
class LogContext:
    """
    Context carried through one invocation.

    The correlation id ties together every line logged for one finalize
    event; ``metadata`` usually holds the bucket and source key.
    """

    correlation_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    operation: str = ""
    component: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    def with_operation(self, operation: str) -> "LogContext":
        """Create new context with operation set."""
        return replace(self, operation=operation, metadata=dict(self.metadata))

    def with_metadata(self, **kwargs) -> "LogContext":
        """Create new context with additional metadata."""
        return replace(self, metadata={**self.metadata, **kwargs})


def format_message(
    message: str, context: Optional[LogContext] = None, **fields: Any
) -> str:
    """
    Render ``[operation] message (key=value, ...)``.

    The correlation id is not part of the message; StructuredLogger hands
    it to the log record, where the structured format prints it.
    """
    prefix = ""
    if context is not None:
        if context.operation:
            prefix = f"[{context.operation}] "
        fields = {**context.metadata, **fields}

    if fields:
        rendered = ", ".join(f"{k}={v}" for k, v in fields.items())
        return f"{prefix}{message} ({rendered})"
    return f"{prefix}{message}"


class StructuredLogger:
    """LoggerProtocol implementation writing context-rich lines to ``logging``."""

    def __init__(self, logger: logging.Logger):
        self._logger = logger

    def _log(
        self,
        level: LogLevel,
        message: str,
        context: Optional[LogContext] = None,
        **kwargs,
    ):
        log_method = getattr(self._logger, level.value.lower())
        extra = {"correlation_id": context.correlation_id} if context else {}
        log_method(format_message(message, context, **kwargs), extra=extra)

    def debug(self, message: str, context: Optional[LogContext] = None, **kwargs):
        self._log(LogLevel.DEBUG, message, context, **kwargs)

    def info(self, message: str, context: Optional[LogContext] = None, **kwargs):
        self._log(LogLevel.INFO, message, context, **kwargs)

    def warning(self, message: str, context: Optional[LogContext] = None, **kwargs):
        self._log(LogLevel.WARNING, message, context, **kwargs)

    def error(self, message: str, context: Optional[LogContext] = None, **kwargs):
        self._log(LogLevel.ERROR, message, context, **kwargs)


@dataclass
class InvocationMetrics:
    """Timing and outcome of one pipeline invocation."""

    operation: str
    start_time: float
    end_time: float
    status: str
    source_key: str = ""
    failed_stage: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def success(self) -> bool:
        """Skips count as successful invocations; only failures do not."""
        return self.status != "failed"

    @property
    def duration(self) -> float:
        """Calculate invocation duration in seconds."""
        return self.end_time - self.start_time

    @property
    def duration_ms(self) -> float:
        """Calculate invocation duration in milliseconds."""
        return self.duration * 1000


class MetricsCollector:
    """In-process collector of InvocationMetrics."""

    def __init__(self):
        self._metrics: List[InvocationMetrics] = []

    def record_metric(self, metric: InvocationMetrics):
        self._metrics.append(metric)

    def get_metrics(self, operation: Optional[str] = None) -> List[InvocationMetrics]:
        """Get recorded metrics, optionally filtered by operation."""
        if operation:
            return [m for m in self._metrics if m.operation == operation]
        return list(self._metrics)

    def get_summary(self, operation: Optional[str] = None) -> Dict[str, Any]:
        """
        Summarize recorded invocations.

        Returns an empty dict when nothing was recorded. ``failures_by_stage``
        counts failed invocations by the stage they failed in.
        """
        metrics = self.get_metrics(operation)
        if not metrics:
            return {}

        durations = [m.duration for m in metrics]
        statuses = Counter(m.status for m in metrics)
        successful = len(metrics) - statuses["failed"]

        return {
            "total_operations": len(metrics),
            "successful_operations": successful,
            "failed_operations": statuses["failed"],
            "skipped_operations": statuses["skipped"],
            "success_rate": successful / len(metrics),
            "failures_by_stage": dict(
                Counter(m.failed_stage for m in metrics if not m.success)
            ),
            "avg_duration": sum(durations) / len(durations),
            "min_duration": min(durations),
            "max_duration": max(durations),
            "total_duration": sum(durations),
        }

    def clear_metrics(self):
        """Clear all recorded metrics."""
        self._metrics.clear()
