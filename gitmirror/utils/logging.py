"""Application-wide logging initialization

IMPORTANT: Call `initialize_logging()` once at process start (see gitmirror.main)
before any other logging is done.

Logging format (APP_ENV != local):
{
    "timestamp": "2025-12-26T12:00:00.000Z",
    "level": "INFO",
    "logger": "gitmirror.services.proxy_engine",
    "message": "Serving download from cache.",
    "url": "https://github.com/a/b/archive/main.zip",
    "cache": "HIT"
}

With APP_ENV=local a plain one-line text format is used instead.
"""

import os
import json
import logging
import logging.config
from datetime import datetime, UTC

from gitmirror.utils.constants import ENV
from gitmirror.utils.runtime import running_locally


# Attributes every LogRecord carries; anything else came in through `extra`
_RECORD_ATTRS = frozenset(logging.LogRecord('', logging.NOTSET, '', 0, '', None, None).__dict__) | {'asctime', 'message', 'color_message'}


class JsonFormatter(logging.Formatter):
    """One JSON object per line, with `extra` fields at the top level"""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=UTC)
        log = {
            'timestamp': created.isoformat(timespec='milliseconds').replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        log.update((key, value) for key, value in record.__dict__.items() if key not in _RECORD_ATTRS)

        if record.exc_info:
            log['exception'] = self.formatException(record.exc_info)

        return json.dumps(log, default=str)


def initialize_logging() -> None:
    log_level = os.getenv(ENV.App.LOG_LEVEL, 'INFO').upper()
    formatter = 'text' if running_locally() else 'json'
    logging.config.dictConfig(
        {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'json': {
                    '()': JsonFormatter,
                },
                'text': {
                    'format': '%(asctime)s %(levelname)-8s %(name)s: %(message)s',
                },
            },
            'handlers': {
                'stdout': {
                    'class': 'logging.StreamHandler',
                    'formatter': formatter,
                    'stream': 'ext://sys.stdout',
                }
            },
            'root': {
                'level': log_level,
                'handlers': ['stdout'],
            },
            'loggers': {
                # uvicorn installs its own handlers unless told otherwise; route it through ours
                'uvicorn': {'handlers': [], 'propagate': True},
                'uvicorn.access': {'handlers': [], 'propagate': True},
                'uvicorn.error': {'handlers': [], 'propagate': True},
            },
        }
    )
