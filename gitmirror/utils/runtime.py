"""Runtime utilities

Functions:
    running_locally() -> bool:
        True if the gateway runs on a developer machine, False otherwise.

Example:
    >>> from gitmirror.utils.runtime import running_locally
    >>> os.environ['APP_ENV'] = 'local'
    >>> running_locally()
    True
    >>> os.environ['APP_ENV'] = 'prod'
    >>> running_locally()
    False
"""

import os

from gitmirror.utils.constants import ENV


def running_locally() -> bool:
    """Check if the gateway is running locally (APP_ENV=local)"""
    return os.getenv(ENV.App.APP_ENV, '').lower() == 'local'
