"""Logging utilities for Atlasify."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import structlog

from atlasify.domain import Diagnostic

# Handlers added by the last configure_logging call
_installed_handlers: list[logging.Handler] = []


@dataclass
class ProcessingStats:
    """Statistics from processing run."""

    processed_count: int = 0
    skipped_count: int = 0
    error_count: int = 0
    ring_count: int = 0
    polygon_count: int = 0
    region_count: int = 0
    empty_region_count: int = 0
    diagnostic_counts: dict[str, int] = field(default_factory=dict)
    errors: list[tuple[str, str]] = field(default_factory=list)
    shape_timings_ms: list[float] = field(default_factory=list)
    was_cancelled: bool = False
    cancelled_count: int = 0
    start_time: float | None = None
    end_time: float | None = None

    @property
    def duration_seconds(self) -> float:
        """Calculate processing duration."""
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return 0.0

    @property
    def diagnostic_total(self) -> int:
        return sum(self.diagnostic_counts.values())

    @property
    def avg_shape_time_ms(self) -> float | None:
        if not self.shape_timings_ms:
            return None
        return sum(self.shape_timings_ms) / len(self.shape_timings_ms)

    @property
    def min_shape_time_ms(self) -> float | None:
        return min(self.shape_timings_ms) if self.shape_timings_ms else None

    @property
    def max_shape_time_ms(self) -> float | None:
        return max(self.shape_timings_ms) if self.shape_timings_ms else None


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
        log_file = Path(f"atlasify_{timestamp}.log")

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(getattr(logging, file_level.upper()))
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    for handler in _installed_handlers:
        root_logger.removeHandler(handler)
        handler.close()
    _installed_handlers.clear()
    root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(
        logging.ERROR if quiet else getattr(logging, console_level.upper())
    )
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(console_handler)
    _installed_handlers.extend([file_handler, console_handler])

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

    logger = structlog.get_logger("atlasify")
    logger.info("Logging initialized", log_file=str(log_file), level=file_level)

    return logger


class ProcessingLogger:
    """Logger for tracking processing progress and statistics."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger,
        stats: ProcessingStats | None = None,
    ) -> None:
        self._logger = logger
        self._stats = stats if stats is not None else ProcessingStats()

    def log_shape_start(self, shape_name: str, index: int) -> None:
        """Log start of shape processing."""
        self._logger.debug("Processing shape", shape=shape_name, index=index)

    def log_shape_complete(
        self,
        shape_name: str,
        index: int,
        ring_count: int,
        duration_ms: float,
    ) -> None:
        """Log successful shape processing."""
        self._logger.info(
            "Shape processed",
            shape=shape_name,
            index=index,
            rings=ring_count,
            duration_ms=round(duration_ms, 2),
        )
        self._stats.processed_count += 1
        self._stats.ring_count += ring_count
        self._stats.shape_timings_ms.append(duration_ms)

    def log_shape_skipped(self, shape_name: str, reason: str) -> None:
        """Log skipped shape."""
        self._logger.debug("Shape skipped", shape=shape_name, reason=reason)
        self._stats.skipped_count += 1

    def log_shape_error(
        self,
        shape_name: str,
        error: Exception,
        traceback: str | None = None,
    ) -> None:
        """Log shape processing error."""
        self._logger.error(
            "Shape processing failed",
            shape=shape_name,
            error=str(error),
            error_type=type(error).__name__,
            traceback=traceback,
        )
        self._stats.error_count += 1
        self._stats.errors.append((shape_name, str(error)))

    def log_diagnostic(self, subject: str, diagnostic: Diagnostic) -> None:
        """Log a recoverable geometric condition."""
        self._logger.warning(
            "Geometry diagnostic",
            subject=subject,
            code=diagnostic.code.value,
            detail=diagnostic.detail,
        )
        key = diagnostic.code.value
        self._stats.diagnostic_counts[key] = self._stats.diagnostic_counts.get(key, 0) + 1

    def log_region_complete(
        self,
        region_name: str,
        shape_count: int,
        polygon_count: int,
        duration_ms: float,
    ) -> None:
        """Log a finished region."""
        self._logger.info(
            "Region built",
            region=region_name,
            shapes=shape_count,
            polygons=polygon_count,
            duration_ms=round(duration_ms, 2),
        )
        self._stats.region_count += 1
        self._stats.polygon_count += polygon_count

    def log_region_skipped(self, region_name: str, reason: str) -> None:
        """Log a region that produced no geometry."""
        self._logger.info("Region skipped", region=region_name, reason=reason)
        self._stats.empty_region_count += 1

    def log_region_error(
        self,
        region_name: str,
        error: Exception,
        traceback: str | None = None,
    ) -> None:
        """Log a region that could not be built."""
        self._logger.error(
            "Region processing failed",
            region=region_name,
            error=str(error),
            error_type=type(error).__name__,
            traceback=traceback,
        )
        self._stats.error_count += 1
        self._stats.errors.append((region_name, str(error)))

    @property
    def stats(self) -> ProcessingStats:
        """Get current processing statistics."""
        return self._stats
