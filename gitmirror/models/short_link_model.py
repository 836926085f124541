from dataclasses import dataclass


@dataclass(frozen=True)
class ShortLinkModel:
    """Represent a short link mapping.

    Attributes:
        code (str):
            The 6-character short identifier of the link.
        target (str):
            The normalized, allow-listed URL the short code resolves to.

    Example:
        >>> link = ShortLinkModel(
        ...     code="aB3xYz",
        ...     target="https://github.com/a/b/archive/refs/heads/main.zip",
        ... )
        >>> link.code
        'aB3xYz'
        >>> link.target
        'https://github.com/a/b/archive/refs/heads/main.zip'
    """
    code: str
    target: str
