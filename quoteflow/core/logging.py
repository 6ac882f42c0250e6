import logging
import sys

from pythonjsonlogger import jsonlogger

from quoteflow.core.config import Settings

# third-party loggers that are noisy at INFO
QUIET_LOGGERS = ("botocore", "boto3", "urllib3", "httpx", "httpcore")


class ServiceContextFilter(logging.Filter):
    """Stamps service / environment on every record so JSON lines are self-describing."""

    def __init__(self, service: str, environment: str):
        super().__init__()
        self.service = service
        self.environment = environment

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self.service
        record.environment = self.environment
        return True


def configure_logging(settings: Settings) -> None:
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(ServiceContextFilter(settings.app_name, settings.environment))
    handler.setFormatter(
        jsonlogger.JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(service)s %(environment)s %(message)s",
            rename_fields={"levelname": "level", "name": "logger"},
        )
    )

    root = logging.getLogger()
    root.setLevel(level)
    # idempotent across app reloads / repeated create_app() calls
    root.handlers = [handler]

    for name in ("uvicorn.access", "uvicorn.error"):
        logging.getLogger(name).setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
