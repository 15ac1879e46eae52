"""Centralized logging with OpenTelemetry integration"""

import logging
import json
import sys
import os
from datetime import datetime, timezone
from typing import Dict, Any
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

LOG_LEVEL_ENV = "ISSUE_RESOLVER_LOG_LEVEL"
LOG_FORMAT_ENV = "ISSUE_RESOLVER_LOG_JSON"


class CentralizedLogger:
    """Central logger with trace context injection"""

    def __init__(self, service_name: str):
        self.service_name = service_name
        self.logger = logging.getLogger(service_name)

        log_level_str = os.getenv(LOG_LEVEL_ENV, 'WARNING').upper()
        log_level = getattr(logging, log_level_str, logging.WARNING)
        self.logger.setLevel(log_level)

        # Loggers are process-wide; only the first instance attaches handlers
        if self.logger.handlers:
            return

        # Console goes to stderr so CLI tables on stdout stay clean
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(self._get_console_formatter())
        self.logger.addHandler(console_handler)

        # JSON handler for observability platforms
        if os.getenv(LOG_FORMAT_ENV, '').lower() in ('1', 'true', 'yes'):
            json_handler = logging.StreamHandler(sys.stderr)
            json_handler.setLevel(log_level)
            json_handler.setFormatter(self._get_json_formatter())
            self.logger.addHandler(json_handler)

        self.logger.propagate = False

    def _get_console_formatter(self) -> logging.Formatter:
        """Human-readable console format with colors"""
        class ConsoleFormatter(logging.Formatter):
            COLORS = {
                'DEBUG': '\033[36m',    # Cyan
                'INFO': '\033[32m',     # Green
                'WARNING': '\033[33m',  # Yellow
                'ERROR': '\033[31m',    # Red
                'CRITICAL': '\033[35m', # Magenta
            }
            RESET = '\033[0m'
            BOLD = '\033[1m'

            def format(self, record):
                record.trace_id = getattr(record, 'trace_id', 'no-trace')
                record.span_id = getattr(record, 'span_id', 'no-span')

                levelname = record.levelname
                service_name = record.name

                if levelname in self.COLORS:
                    color = self.COLORS[levelname]
                    record.levelname = f"{color}{self.BOLD}{levelname}{self.RESET}"
                    record.name = f"{color}{self.BOLD}{service_name}{self.RESET}"

                formatted = super().format(record)

                # Reset values for other handlers
                record.levelname = levelname
                record.name = service_name
                return formatted

        return ConsoleFormatter(
            '%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s',
            datefmt='%H:%M:%S'
        )

    def _get_json_formatter(self) -> logging.Formatter:
        """JSON format for observability platforms"""
        class JsonFormatter(logging.Formatter):
            def format(self, record):
                log_obj = {
                    'timestamp': datetime.now(timezone.utc).isoformat(),
                    'level': record.levelname,
                    'service': record.name,
                    'message': record.getMessage(),
                    'trace_id': getattr(record, 'trace_id', None),
                    'span_id': getattr(record, 'span_id', None),
                }
                return json.dumps(log_obj)
        return JsonFormatter()

    def _inject_trace_context(self, kwargs: Dict[str, Any]) -> Dict[str, Any]:
        """Inject current trace context into log extras"""
        kwargs['extra'] = kwargs.get('extra', {})

        span = trace.get_current_span()
        if span and span.is_recording():
            span_context = span.get_span_context()
            kwargs['extra']['trace_id'] = format(span_context.trace_id, '032x')
            kwargs['extra']['span_id'] = format(span_context.span_id, '016x')
        else:
            kwargs['extra']['trace_id'] = 'no-trace'
            kwargs['extra']['span_id'] = 'no-span'

        return kwargs

    def debug(self, message: str, **kwargs):
        kwargs = self._inject_trace_context(kwargs)
        self.logger.debug(message, **kwargs)

    def info(self, message: str, **kwargs):
        kwargs = self._inject_trace_context(kwargs)
        self.logger.info(message, **kwargs)

    def warning(self, message: str, **kwargs):
        kwargs = self._inject_trace_context(kwargs)
        self.logger.warning(message, **kwargs)

    def error(self, message: str, **kwargs):
        kwargs = self._inject_trace_context(kwargs)
        self.logger.error(message, **kwargs)

        # Record exception in current span if available
        span = trace.get_current_span()
        if span and span.is_recording():
            exc_info = kwargs.get('exc_info')
            if exc_info and exc_info is not True and hasattr(exc_info, '__traceback__'):
                span.record_exception(exc_info)
            span.set_status(Status(StatusCode.ERROR, message))

    def critical(self, message: str, **kwargs):
        kwargs = self._inject_trace_context(kwargs)
        self.logger.critical(message, **kwargs)
