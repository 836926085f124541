"""Exceptions related to Data Access Objects (DAO) operations.

Classes:
    DAOError:
        Generic base class for DAO-related exceptions.

    ShortLinkNotFoundError:
        Raised when a ShortLinkModel is not found in the data store.

    ShortLinkAlreadyExistsError:
        Raised when attempting to insert a short code that is already taken.

    DataStoreError:
        Raised when there is an error in the data store (e.g., connection issues, time, OOM, etc.).

    CacheMissError:
        Raised when a requested cache entry (e.g., a cached download) is missing.

    CachePutError:
        Raised when writing a cache entry fails or is abandoned.

Example:
    >>> from gitmirror.dao.exceptions import CacheMissError
    >>> raise CacheMissError("No cached response for GET https://github.com/a/b.zip")
    Traceback (most recent call last):
        ...
    gitmirror.dao.exceptions.CacheMissError: No cached response for GET https://github.com/a/b.zip
"""


class DAOError(Exception):
    """Generic base class for DAO-related exceptions."""

    pass


class ShortLinkNotFoundError(DAOError):
    """Exception raised when a ShortLinkModel is not found in the data store."""

    pass


class ShortLinkAlreadyExistsError(DAOError):
    """Exception raised when attempting to insert a short code that already exists in the data store."""

    pass


class DataStoreError(DAOError):
    """Exception raised when there is an error in the data store.

    e.g. connection issues, timeouts, OOM, etc.
    """

    pass


class CacheMissError(DAOError):
    """Exception raised when a requested cache entry is missing."""

    pass


class CachePutError(DAOError):
    """Exception raised when writing a cache entry fails or is abandoned."""

    pass
