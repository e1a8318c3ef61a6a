import logging
import os
import pytz
from datetime import datetime


class LocalTimeFormatter(logging.Formatter):
    """Render record timestamps in the organization's timezone."""

    def __init__(self, fmt=None, datefmt=None, timezone='Asia/Kolkata'):
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.timezone = pytz.timezone(timezone)

    def formatTime(self, record, datefmt=None):
        record_time = datetime.fromtimestamp(record.created, self.timezone)
        return record_time.strftime(datefmt) if datefmt else record_time.isoformat()


def setup_logging(timezone=None, level=None):
    logger = logging.getLogger()
    if not logger.handlers:
        formatter = LocalTimeFormatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S',
            timezone=timezone or os.environ.get('APP_TIMEZONE', 'Asia/Kolkata'),
        )

        handler = logging.StreamHandler()
        handler.setFormatter(formatter)

        logger.setLevel(level or os.environ.get('LOG_LEVEL', 'INFO').upper())
        logger.addHandler(handler)

    return logger
