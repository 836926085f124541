"""Abstract base class for response cache DAOs.

The cache stores complete upstream responses keyed by `(method, target URL)`.
Entries are written once and never invalidated by the gateway; the backing
store expires them.
"""

from abc import ABC, abstractmethod

from gitmirror.models import CachedResponseModel
from gitmirror.types import ByteStream, Headers


class ResponseCacheBaseDAO(ABC):
    """Interface for response cache data access objects (DAOs).

    Methods:
        match(url: str, method: str = 'GET') -> CachedResponseModel:
            Look up a stored response.
            Raises CacheMissError if nothing is stored.
            Raises DataStoreError on connection failure.

        put(url: str, status: int, headers: Headers, body: ByteStream, method: str = 'GET') -> None:
            Store a response, consuming `body` chunk by chunk.
            The entry only becomes visible once the body is fully stored.
            Raises CachePutError if the write fails or `body` raises CachePutError.
    """

    @abstractmethod
    async def match(self, url: str, method: str = 'GET') -> CachedResponseModel:
        pass

    @abstractmethod
    async def put(self, url: str, status: int, headers: Headers, body: ByteStream, method: str = 'GET') -> None:
        pass
