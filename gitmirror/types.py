from collections.abc import AsyncIterator, Mapping
from typing import Any, TypeAlias


# Type aliases for HTTP plumbing
Headers: TypeAlias = Mapping[str, str]
ByteStream: TypeAlias = AsyncIterator[bytes]

# Type aliases for configuration documents
AppConfig: TypeAlias = dict[str, Any]
RedisConfiguration: TypeAlias = dict[str, Any]
