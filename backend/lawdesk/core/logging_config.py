"""
Logging setup for lawdesk

Records are written as JSON (or plain text) to stdout and, optionally, a
daily rotated file. Request context set by the middleware is merged into
every JSON record; credentials are masked before any handler formats them.
"""
import json
import logging
import re
import sys
from contextvars import ContextVar
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, Optional

from lawdesk.core.config import Settings, get_settings

# Context variables for request context
request_context: ContextVar[Dict[str, Any]] = ContextVar('request_context', default={})

# Attributes every LogRecord carries; anything else came in through extra=
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {'message', 'asctime', 'taskName'}

_LEVEL_NAMES = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent.parent


def _extra_items(record: logging.LogRecord):
    return [(k, v) for k, v in vars(record).items() if k not in _RESERVED_ATTRS]


class SensitiveDataFilter(logging.Filter):
    """Masks passwords and database URL credentials in messages, args and extra fields"""

    SENSITIVE_PATTERNS = [
        # user:password@host in database URLs
        (re.compile(r'(\w[\w+.-]*://[^:/@\s]+):([^@\s]+)@'), r'\1:***@'),
        (re.compile(r'(password|passwd|secret|token)(["\']?\s*[:=]\s*["\']?)[^"\'\s&,}]+',
                    re.IGNORECASE), r'\1\2***'),
    ]

    def __init__(self, enabled: bool = True):
        super().__init__()
        self.enabled = enabled

    @classmethod
    def mask(cls, value: str) -> str:
        for pattern, replacement in cls.SENSITIVE_PATTERNS:
            value = pattern.sub(replacement, value)
        return value

    def filter(self, record: logging.LogRecord) -> bool:
        if not self.enabled:
            return True

        if isinstance(record.msg, str):
            record.msg = self.mask(record.msg)
        if record.args and isinstance(record.args, tuple):
            record.args = tuple(
                self.mask(arg) if isinstance(arg, str) else arg for arg in record.args
            )
        for key, value in _extra_items(record):
            if isinstance(value, str):
                setattr(record, key, self.mask(value))

        return True


class ContextualFormatter(logging.Formatter):
    """One JSON object per record: core fields, request context, then extra fields"""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            'timestamp': self.formatTime(record, self.datefmt),
            'level': record.levelname,
            'logger': record.name,
            'function': record.funcName,
            'line': record.lineno,
            'message': record.getMessage(),
        }
        payload.update(request_context.get({}))
        if record.exc_info:
            payload['exception'] = self.formatException(record.exc_info)
        payload.update(_extra_items(record))

        return json.dumps(payload, ensure_ascii=False, default=str)


class LoggingConfig:
    """Process-wide logging configuration for the lawdesk service"""

    _configured = False
    _module_levels: Dict[str, str] = {}
    _log_metrics: Dict[str, int] = dict.fromkeys(_LEVEL_NAMES, 0)

    @staticmethod
    def _resolve_levels(settings: Settings, overrides: Optional[Dict[str, str]]) -> Dict[str, str]:
        levels = {
            "root": settings.log_level,
            "lawdesk": settings.log_level,
            "sqlalchemy.engine": "INFO" if settings.log_sqlalchemy else "WARNING",
            "sqlalchemy.pool": "WARNING",
            "uvicorn.access": "INFO" if settings.log_uvicorn_access else "WARNING",
            "uvicorn.error": "INFO",
        }
        if settings.log_module_levels:
            try:
                levels.update(json.loads(settings.log_module_levels))
            except (json.JSONDecodeError, TypeError):
                sys.stderr.write(
                    f"Ignoring malformed LOG_MODULE_LEVELS: {settings.log_module_levels!r}\n"
                )
        if overrides:
            levels.update(overrides)
        return levels

    @staticmethod
    def _build_handlers(settings: Settings) -> List[logging.Handler]:
        if settings.log_format == "json":
            formatter: logging.Formatter = ContextualFormatter(datefmt='%Y-%m-%d %H:%M:%S')
        else:
            formatter = logging.Formatter(
                '%(asctime)s %(levelname)s [%(name)s] %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )

        handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]

        if settings.log_file_enabled:
            log_path = Path(settings.log_file_path)
            if not log_path.is_absolute():
                log_path = PROJECT_ROOT / log_path
            log_path.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(TimedRotatingFileHandler(
                filename=str(log_path),
                when='midnight',
                backupCount=settings.log_file_retention,
                encoding='utf-8'
            ))

        sensitive_filter = SensitiveDataFilter(enabled=not settings.log_sensitive_data)
        for handler in handlers:
            handler.setFormatter(formatter)
            handler.addFilter(sensitive_filter)
        return handlers

    @classmethod
    def configure(cls, module_levels: Optional[Dict[str, str]] = None, force: bool = False):
        """Install handlers and levels once per process (again with force=True)"""
        if cls._configured and not force:
            return

        settings = get_settings()
        levels = cls._resolve_levels(settings, module_levels)
        cls._module_levels = levels

        logging.basicConfig(
            level=levels["root"].upper(),
            handlers=cls._build_handlers(settings),
            force=True
        )
        for module, level in levels.items():
            if module == "root":
                continue
            module_logger = logging.getLogger(module)
            module_logger.setLevel(level.upper())
            # SQL and access logs stay off the application handlers
            if module.startswith(("sqlalchemy", "uvicorn")):
                module_logger.propagate = False

        logging.getLogger().addHandler(cls._MetricsHandler(level=logging.DEBUG))
        cls._configured = True

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        if not cls._configured:
            cls.configure()
        return logging.getLogger(name)

    @classmethod
    def set_module_level(cls, module: str, level: str):
        logging.getLogger(module).setLevel(level.upper())
        cls._module_levels[module] = level

    @classmethod
    def get_module_level(cls, module: str) -> str:
        return logging.getLevelName(logging.getLogger(module).level)

    @classmethod
    def set_context(cls, **kwargs):
        """Merge fields into the current request's log context"""
        request_context.set({**request_context.get({}), **kwargs})

    @classmethod
    def clear_context(cls):
        request_context.set({})

    @classmethod
    def get_metrics(cls) -> Dict[str, int]:
        """Number of records emitted per level since the last reset"""
        return cls._log_metrics.copy()

    @classmethod
    def reset_metrics(cls):
        cls._log_metrics = dict.fromkeys(_LEVEL_NAMES, 0)

    class _MetricsHandler(logging.Handler):

        def emit(self, record: logging.LogRecord):
            if record.levelname in LoggingConfig._log_metrics:
                LoggingConfig._log_metrics[record.levelname] += 1


LoggingConfig.configure()
