"""Logging setup with structured output and per-operation timing metrics"""

import json
import logging
import logging.handlers
import time
from datetime import datetime
from typing import Dict, Any, Optional
from pathlib import Path
from functools import wraps
import asyncio

from .settings import Settings, get_settings


class StructuredFormatter(logging.Formatter):
    """
    Custom formatter for structured JSON logging.

    Outputs logs in JSON format for better parsing and analysis.
    """

    RESERVED_ATTRS = {
        'name', 'msg', 'args', 'levelname', 'levelno', 'pathname',
        'filename', 'module', 'exc_info', 'exc_text', 'stack_info',
        'lineno', 'funcName', 'created', 'msecs', 'relativeCreated',
        'thread', 'threadName', 'processName', 'process', 'getMessage',
        'taskName', 'message', 'asctime'
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured JSON"""

        log_data = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        if record.exc_info:
            log_data['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
                'traceback': self.formatException(record.exc_info)
            }

        # Anything passed through `extra=` lands on the record itself
        extra_fields = {
            key: value for key, value in record.__dict__.items()
            if key not in self.RESERVED_ATTRS
        }
        if extra_fields:
            log_data['extra'] = extra_fields

        return json.dumps(log_data, default=str, ensure_ascii=False)


class PerformanceMetrics:
    """Track call counts and durations of named operations"""

    def __init__(self):
        self._metrics: Dict[str, Dict[str, Any]] = {}

    def record_operation(self, operation: str, duration: float, success: bool = True):
        """Record performance metrics for an operation"""
        if operation not in self._metrics:
            self._metrics[operation] = {
                'total_calls': 0,
                'successful_calls': 0,
                'failed_calls': 0,
                'total_duration': 0.0,
                'min_duration': float('inf'),
                'max_duration': 0.0,
                'last_call': None
            }

        metrics = self._metrics[operation]
        metrics['total_calls'] += 1
        metrics['total_duration'] += duration
        metrics['min_duration'] = min(metrics['min_duration'], duration)
        metrics['max_duration'] = max(metrics['max_duration'], duration)
        metrics['last_call'] = datetime.now().isoformat()

        if success:
            metrics['successful_calls'] += 1
        else:
            metrics['failed_calls'] += 1

    def get_metrics(self, operation: Optional[str] = None) -> Dict[str, Any]:
        """Get performance metrics, with averages and success rates filled in"""
        if operation:
            metrics = self._metrics.get(operation)
            return self._summarize(metrics) if metrics else {}

        return {op: self._summarize(metrics) for op, metrics in self._metrics.items()}

    def reset(self, operation: Optional[str] = None):
        """Reset metrics"""
        if operation:
            self._metrics.pop(operation, None)
        else:
            self._metrics.clear()

    @staticmethod
    def _summarize(metrics: Dict[str, Any]) -> Dict[str, Any]:
        summary = metrics.copy()
        summary['avg_duration'] = metrics['total_duration'] / metrics['total_calls']
        summary['success_rate'] = metrics['successful_calls'] / metrics['total_calls']
        return summary


# Global performance metrics instance
performance_metrics = PerformanceMetrics()


class LoggingManager:
    """
    Centralized logging configuration and management.

    Development gets a readable console format, production gets JSON lines.
    A rotating file handler is added only when a log file is configured.
    """

    CONSOLE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    def __init__(self):
        self.configured = False
        self.loggers: Dict[str, logging.Logger] = {}

    def setup_logging(self, settings: Optional[Settings] = None, force: bool = False):
        """Configure the root logger from settings"""
        if self.configured and not force:
            return

        settings = settings or get_settings()
        level = getattr(logging, settings.log_level)

        root_logger = logging.getLogger()
        root_logger.setLevel(level)

        # Remove existing handlers
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        if settings.is_production:
            console_handler.setFormatter(StructuredFormatter())
        else:
            console_handler.setFormatter(logging.Formatter(self.CONSOLE_FORMAT))
        root_logger.addHandler(console_handler)

        if settings.log_file:
            log_path = Path(settings.log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                log_path,
                maxBytes=50 * 1024 * 1024,  # 50MB
                backupCount=5
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(StructuredFormatter())
            root_logger.addHandler(file_handler)

        self.configured = True

        logging.getLogger(__name__).info(
            "Logging system initialized",
            extra={
                'environment': settings.environment,
                'log_level': settings.log_level,
                'structured_logging': settings.is_production,
                'log_file': settings.log_file
            }
        )

    def get_logger(self, name: str) -> logging.Logger:
        """Get a configured logger instance"""
        if not self.configured:
            self.setup_logging()

        if name not in self.loggers:
            self.loggers[name] = logging.getLogger(name)

        return self.loggers[name]


# Global logging manager
logging_manager = LoggingManager()


def get_logger(name: str) -> logging.Logger:
    """Get a configured logger instance"""
    return logging_manager.get_logger(name)


def log_performance(operation: str):
    """
    Decorator to time a function and record the outcome under `operation`.

    Failures are logged and re-raised; the decorator never swallows them.

    Args:
        operation: Name of the operation for metrics
    """
    def decorator(func):
        def finish(logger: logging.Logger, start_time: float, success: bool):
            duration = time.time() - start_time
            performance_metrics.record_operation(operation, duration, success)
            logger.debug(
                f"Completed {operation}",
                extra={
                    'operation': operation,
                    'function': func.__name__,
                    'duration': duration,
                    'success': success
                }
            )

        if asyncio.iscoroutinefunction(func):
            @wraps(func)
            async def async_wrapper(*args, **kwargs):
                logger = get_logger(func.__module__)
                start_time = time.time()
                success = True
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    success = False
                    logger.warning(
                        f"Operation {operation} failed: {e}",
                        extra={'operation': operation, 'error_type': type(e).__name__}
                    )
                    raise
                finally:
                    finish(logger, start_time, success)

            return async_wrapper

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            logger = get_logger(func.__module__)
            start_time = time.time()
            success = True
            try:
                return func(*args, **kwargs)
            except Exception as e:
                success = False
                logger.warning(
                    f"Operation {operation} failed: {e}",
                    extra={'operation': operation, 'error_type': type(e).__name__}
                )
                raise
            finally:
                finish(logger, start_time, success)

        return sync_wrapper

    return decorator


def setup_logging(settings: Optional[Settings] = None, force: bool = False):
    """Initialize the logging system"""
    logging_manager.setup_logging(settings, force=force)


def get_performance_metrics(operation: Optional[str] = None) -> Dict[str, Any]:
    """Get performance metrics"""
    return performance_metrics.get_metrics(operation)


def reset_performance_metrics(operation: Optional[str] = None):
    """Reset performance metrics"""
    performance_metrics.reset(operation)
