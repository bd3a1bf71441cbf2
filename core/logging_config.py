import logging.config
import structlog
from pythonjsonlogger import jsonlogger
import coloredlogs

from core.config import get_settings


def setup_logging():
    """Route every logger through one handler picked by LOG_JSON.

    The console handler uses coloredlogs' default palette; the JSON handler is
    meant for log shippers in deployed environments.
    """
    settings = get_settings()
    handler = "json" if settings.LOG_JSON else "console"

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": jsonlogger.JsonFormatter,
                "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s"
            },
            "colored": {
                "()": coloredlogs.ColoredFormatter,
                "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s",
            }
        },
        "handlers": {
            "json": {"class": "logging.StreamHandler", "formatter": "json"},
            "console": {"class": "logging.StreamHandler", "formatter": "colored"},
        },
        "root": {"handlers": [handler], "level": settings.LOG_LEVEL},
        "loggers": {
            # SQL echo goes through this logger when DATABASE_ECHO is on
            "sqlalchemy.engine": {
                "level": "INFO" if settings.DATABASE_ECHO else "WARNING"
            }
        }
    })

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
