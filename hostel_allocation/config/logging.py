"""
Logging configuration for the hostel allocation service.
Provides structured logging with different handlers and formatters.
"""

import logging
import logging.config
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger

from hostel_allocation.config.settings import Settings, settings as default_settings


# Structured context attached through ``extra=`` by services and middleware
CONTEXT_FIELDS = (
    "request_id",
    "actor_id",
    "transaction_id",
    "operation",
    "resident_id",
    "asset_id",
)


class AllocationJsonFormatter(jsonlogger.JsonFormatter):
    """JSON lines with a fixed envelope plus whatever allocation context is present."""

    def __init__(self, *args, environment: str = "development", **kwargs):
        super().__init__(*args, **kwargs)
        self.environment = environment

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]):
        super().add_fields(log_record, record, message_dict)

        log_record['timestamp'] = datetime.now(timezone.utc).isoformat()
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['environment'] = self.environment

        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_record[name] = value

        if record.exc_info and record.exc_info[0] is not None:
            log_record['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
            }


def build_logging_config(config: Settings) -> Dict[str, Any]:
    """Create logging config dictionary"""
    handlers: Dict[str, Dict[str, Any]] = {
        'console': {
            'level': 'DEBUG' if config.DEBUG else 'INFO',
            'class': 'logging.StreamHandler',
            'formatter': 'colored' if config.is_development() else 'standard'
        },
    }

    if config.LOG_TO_FILE:
        os.makedirs(config.LOG_DIR, exist_ok=True)
        handlers.update({
            'json_file': {
                'level': 'INFO',
                'class': 'logging.handlers.RotatingFileHandler',
                'filename': os.path.join(config.LOG_DIR, 'allocation.json.log'),
                'maxBytes': 10485760,  # 10MB
                'backupCount': 10,
                'formatter': 'json',
                'encoding': 'utf8'
            },
        })

    handler_names = list(handlers)

    return {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'standard': {
                'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
            },
            'json': {
                '()': AllocationJsonFormatter,
                'format': '%(timestamp)s %(level)s %(logger)s %(message)s',
                'environment': config.ENVIRONMENT,
            },
            'colored': {
                '()': 'colorlog.ColoredFormatter',
                'format': '%(log_color)s%(asctime)s [%(levelname)s] %(name)s: %(message)s',
                'log_colors': {
                    'DEBUG': 'cyan',
                    'INFO': 'green',
                    'WARNING': 'yellow',
                    'ERROR': 'red',
                    'CRITICAL': 'red,bg_white',
                }
            }
        },
        'handlers': handlers,
        'loggers': {
            '': {
                'handlers': handler_names,
                'level': config.LOG_LEVEL,
            },
            'hostel_allocation': {
                'handlers': handler_names,
                'level': config.LOG_LEVEL,
                'propagate': False
            },
            'sqlalchemy.engine': {
                'handlers': ['console'],
                'level': 'WARNING',
                'propagate': False
            },
            'uvicorn.access': {
                'handlers': ['console'],
                'level': 'INFO',
                'propagate': False
            }
        }
    }


def _init_sentry(config: Settings) -> None:
    import sentry_sdk
    from sentry_sdk.integrations.logging import LoggingIntegration

    sentry_logging = LoggingIntegration(
        level=logging.INFO,  # Log INFO and above to Sentry
        event_level=logging.ERROR  # Send errors as events
    )

    sentry_sdk.init(
        dsn=config.SENTRY_DSN,
        environment=config.ENVIRONMENT,
        integrations=[sentry_logging],
        traces_sample_rate=0.2,
        send_default_pii=False
    )


def setup_logging(config: Optional[Settings] = None) -> logging.Logger:
    """Configure application logging"""
    config = config or default_settings
    logging.config.dictConfig(build_logging_config(config))
    if config.SENTRY_DSN:
        _init_sentry(config)
    logger = logging.getLogger("hostel_allocation")
    logger.info(f"Logging initialized with level: {config.LOG_LEVEL}")
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get logger under the application namespace"""
    if not name.startswith("hostel_allocation"):
        name = f"hostel_allocation.{name}"
    return logging.getLogger(name)
