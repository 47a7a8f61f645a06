"""
Logging configuration for structured logging.

Records are emitted as JSON so log aggregation can index the ``extra``
fields (organization, event and correlation ids) attached by the code.
"""
import sys

from pythonjsonlogger import jsonlogger

APPLICATION_LOGGERS = ("core", "api", "organizations", "memberships", "licenses", "billing")


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter that always carries the logger name and level."""

    def add_fields(self, log_record, record, message_dict):
        """Add custom fields to log record."""
        super().add_fields(log_record, record, message_dict)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name


def get_logging_config(environment: str = "development", log_file: str = None) -> dict:
    """
    Get logging configuration for the application.

    Args:
        environment: Environment name (development, production, test)
        log_file: Optional path of a rotating log file

    Returns:
        Django logging configuration dictionary
    """
    log_level = "DEBUG" if environment == "development" else "INFO"
    handlers = ["console"]

    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": CustomJsonFormatter,
                "format": "%(asctime)s %(name)s %(levelname)s %(message)s %(pathname)s %(lineno)d",
            },
            "simple": {
                "format": "{levelname} {message}",
                "style": "{",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json",
                "stream": sys.stdout,
            },
        },
        "root": {
            "handlers": handlers,
            "level": log_level,
        },
        "loggers": {
            "django": {
                "handlers": handlers,
                "level": "INFO",
                "propagate": False,
            },
            "django.request": {
                "handlers": handlers,
                "level": "WARNING",
                "propagate": False,
            },
            "django.db.backends": {
                "handlers": handlers,
                "level": "WARNING",
                "propagate": False,
            },
        },
    }

    if log_file:
        config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "json",
            "filename": log_file,
            "maxBytes": 10485760,  # 10MB
            "backupCount": 5,
        }
        handlers.append("file")

    for name in APPLICATION_LOGGERS:
        config["loggers"][name] = {
            "handlers": handlers,
            "level": log_level,
            "propagate": False,
        }
    return config
