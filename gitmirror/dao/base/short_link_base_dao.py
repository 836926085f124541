"""Abstract base class for short link data access objects (DAOs).

This class establishes a consistent contract for all short link DAO
implementations, regardless of the underlying key-value store (e.g., Redis,
Cloudflare KV, DynamoDB).

Responsibilities:
    - Maintain the `code -> target` index (insert/get).
    - Maintain the `url hash -> code` index used for deduplication (find/index).
    - Standardize error handling across multiple data store implementations.

Example:
    Typical usage with a datastore-specific implementation:

        >>> from gitmirror.models import ShortLinkModel
        >>> from gitmirror.dao.redis import ShortLinkRedisDAO

        >>> dao = ShortLinkRedisDAO(...)

        >>> await dao.insert(ShortLinkModel(code="Kx7pQa", target="https://github.com/a/b"))
        >>> await dao.index("5f3c...", "Kx7pQa")
        'Kx7pQa'

        >>> (await dao.get("Kx7pQa")).target
        'https://github.com/a/b'
        >>> await dao.find("5f3c...")
        'Kx7pQa'

NOTE:
    - The store is append-only. The DAO provides no interface to update or
      delete entries; eviction is left to the store itself.
"""

from abc import ABC, abstractmethod

from gitmirror.models import ShortLinkModel


class ShortLinkBaseDAO(ABC):
    """Interface for short link data access objects (DAOs).

    Methods:
        insert(short_link: ShortLinkModel, force: bool = False, **kwargs) -> ShortLinkBaseDAO:
            Store `code -> target`.
            Raises ShortLinkAlreadyExistsError if the code is taken and force is False.
            Raises DataStoreError on connection or write failure.

        get(code: str, **kwargs) -> ShortLinkModel:
            Retrieve a ShortLinkModel by code.
            Raises ShortLinkNotFoundError if the code does not exist.
            Raises DataStoreError on connection or read failure.

        find(url_hash: str, **kwargs) -> str | None:
            Return the code already issued for a URL hash, if any.
            Raises DataStoreError on connection or read failure.

        index(url_hash: str, code: str, **kwargs) -> str:
            Record `url hash -> code` unless a code is already recorded.
            Returns the code that ends up recorded.
            Raises DataStoreError on connection or write failure.

    Subclassing:
        Datastore-specific implementations (e.g., ShortLinkRedisDAO) must
        extend this class and implement all abstract methods.
    """

    @abstractmethod
    async def insert(self, short_link: ShortLinkModel, force: bool = False, **kwargs) -> 'ShortLinkBaseDAO':
        """Store a new `code -> target` mapping.

        Args:
            short_link (ShortLinkModel):
                The ShortLinkModel instance to be inserted.

            force (bool):
                If True, overwrite an existing mapping for the same code.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            ShortLinkBaseDAO: self (for method chaining)

        Raises:
            ShortLinkAlreadyExistsError:
                If the code is already taken and force is False.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    async def get(self, code: str, **kwargs) -> ShortLinkModel:
        """Retrieve a ShortLinkModel from the data store by its code.

        Args:
            code (str):
                The short code of the link to be retrieved.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            ShortLinkModel: The ShortLinkModel instance.

        Raises:
            ShortLinkNotFoundError:
                If no link with the given code exists.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    async def find(self, url_hash: str, **kwargs) -> str | None:
        """Return the code issued for a URL hash, or None."""
        pass

    @abstractmethod
    async def index(self, url_hash: str, code: str, **kwargs) -> str:
        """Record `url_hash -> code` if no code is recorded yet.

        Returns:
            str: `code` if it was recorded, otherwise the code recorded earlier
                 by another writer.
        """
        pass
