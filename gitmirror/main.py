"""Command line entry point: `gitmirror`

Environment variables:
    GITMIRROR_HOST  – bind address (default 0.0.0.0)
    GITMIRROR_PORT  – bind port (default 8080)
    LOG_LEVEL       – root log level (default INFO)
    APP_ENV         – 'local' switches logs to plain text
"""

import os
import logging

import uvicorn

from gitmirror.app import create_app
from gitmirror.utils.config import load_settings
from gitmirror.utils.constants import ENV
from gitmirror.utils.logging import initialize_logging


logger = logging.getLogger(__name__)


def main() -> None:
    initialize_logging()

    settings = load_settings()
    host = os.environ.get(ENV.Server.HOST, '0.0.0.0')  # noqa: S104
    port = int(os.environ.get(ENV.Server.PORT, 8080))

    logger.info('Starting GitMirror.', extra={'host': host, 'port': port, 'prefix': settings.prefix})
    # log_config=None keeps the configuration installed by initialize_logging()
    uvicorn.run(create_app(settings), host=host, port=port, log_config=None, proxy_headers=True)


if __name__ == '__main__':
    main()
