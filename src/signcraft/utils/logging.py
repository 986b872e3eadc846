"""Logging utilities for SignCraft."""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import structlog

# Marks handlers installed by configure_logging so reconfiguring replaces them
_HANDLER_TAG = "_signcraft_handler"


@dataclass
class GenerationStats:
    """Statistics from one generation run."""

    stage_count: int = 0
    path_count: int = 0
    point_count: int = 0
    connection_count: int = 0
    triangle_count: int = 0
    skipped_count: int = 0
    error_count: int = 0
    output_bytes: int = 0
    errors: list[tuple[str, str]] = field(default_factory=list)
    stage_durations_ms: dict[str, float] = field(default_factory=dict)
    start_time: float | None = None
    end_time: float | None = None

    @property
    def duration_seconds(self) -> float:
        """Calculate generation duration."""
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return 0.0


def configure_logging(
    log_file: Path | None = None,
    console_level: str = "INFO",
    file_level: str = "DEBUG",
    quiet: bool = False,
) -> structlog.stdlib.BoundLogger:
    """Configure dual-output structured logging.

    Args:
        log_file: Path to log file (auto-generated if None)
        console_level: Logging level for console output
        file_level: Logging level for file output
        quiet: If True, suppress console output except errors

    Returns:
        Configured structlog logger
    """
    if log_file is None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = Path(f"signcraft_{timestamp}.log")

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if getattr(handler, _HANDLER_TAG, False):
            root_logger.removeHandler(handler)
            handler.close()

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(getattr(logging, file_level.upper()))
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
    )
    setattr(file_handler, _HANDLER_TAG, True)

    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.ERROR if quiet else getattr(logging, console_level.upper()))
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    setattr(console_handler, _HANDLER_TAG, True)
    root_logger.addHandler(console_handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logger = structlog.get_logger("signcraft")
    logger.info("Logging initialized", log_file=str(log_file), level=file_level)

    return logger


class PipelineLogger:
    """Logger for tracking pipeline stages and statistics."""

    def __init__(self, logger: structlog.stdlib.BoundLogger) -> None:
        self._logger = logger
        self._stats = GenerationStats()

    def log_stage_start(self, stage: str, **details: object) -> None:
        """Log start of a pipeline stage."""
        self._logger.debug("Stage started", stage=stage, **details)
        if self._stats.start_time is None:
            self._stats.start_time = time.time()

    def log_stage_complete(self, stage: str, duration_ms: float, **details: object) -> None:
        """Log successful completion of a pipeline stage."""
        self._logger.info(
            "Stage complete",
            stage=stage,
            duration_ms=round(duration_ms, 2),
            **details,
        )
        self._stats.stage_count += 1
        self._stats.end_time = time.time()
        self._stats.stage_durations_ms[stage] = (
            self._stats.stage_durations_ms.get(stage, 0.0) + duration_ms
        )

    def log_stage_failed(self, stage: str, duration_ms: float, error: Exception) -> None:
        """Log a stage that raised; its time still counts toward the stage."""
        self._logger.warning(
            "Stage failed",
            stage=stage,
            duration_ms=round(duration_ms, 2),
            error_type=type(error).__name__,
            error_message=str(error),
        )
        self._stats.end_time = time.time()
        self._stats.stage_durations_ms[stage] = (
            self._stats.stage_durations_ms.get(stage, 0.0) + duration_ms
        )

    def log_paths(self, stage: str, path_count: int, point_count: int) -> None:
        """Log paths produced by a stage."""
        self._logger.debug("Paths produced", stage=stage, paths=path_count, points=point_count)
        self._stats.path_count = path_count
        self._stats.point_count = point_count

    def log_connections(self, connections: int, original: int, connected: int,
                        total_length: float) -> None:
        """Log path connector results."""
        self._logger.info(
            "Paths connected",
            connections=connections,
            original_segments=original,
            connected_segments=connected,
            total_length=round(total_length, 2),
        )
        self._stats.connection_count += connections

    def log_mesh(self, triangles: int) -> None:
        """Log mesh synthesis results."""
        self._logger.info("Mesh synthesized", triangles=triangles)
        self._stats.triangle_count = triangles

    def log_skipped(self, element: str, reason: str) -> None:
        """Log an input element that was skipped."""
        self._logger.debug("Element skipped", element=element, reason=reason)
        self._stats.skipped_count += 1

    def log_error(
        self,
        element: str,
        error: Exception,
        traceback: str | None = None,
    ) -> None:
        """Log a recoverable error on one element."""
        self._logger.warning(
            "Element failed",
            element=element,
            error=str(error),
            error_type=type(error).__name__,
            traceback=traceback,
        )
        self._stats.error_count += 1
        self._stats.errors.append((element, str(error)))

    def log_export(self, output: str, size: int, format: str) -> None:
        """Log STL export."""
        self._logger.info("STL written", output=output, bytes=size, format=format)
        self._stats.output_bytes = size

    @property
    def stats(self) -> GenerationStats:
        """Get current generation statistics."""
        return self._stats
