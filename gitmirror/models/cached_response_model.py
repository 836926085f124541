from dataclasses import dataclass, field
from datetime import datetime

from gitmirror.types import ByteStream


# fmt: off
@dataclass(frozen=True)
class CachedResponseModel:
    url: str                                     # Normalized target URL the entry was stored for
    status: int                                  # Upstream status code (always 200 for stored entries)
    headers: dict[str, str]                      # Response headers as sent to the first client
    stored_at: datetime                          # When the copy finished (UTC)
    body: ByteStream = field(repr=False)         # Body replayed chunk by chunk
# fmt: on
