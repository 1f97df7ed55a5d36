"""Stored link record shared by the storage backends and the manager layer."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Link:
    """A stored short link.

    Attributes:
        id (int):
            Canonical identifier; the token is its Base62 form.
        target (str):
            URL the token redirects to.
        expiry (Optional[int]):
            Unix timestamp after which the link is dead. None never expires.

    Example:
        >>> link = Link(id=8, target="https://example.com", expiry=None)
        >>> link.is_expired(now=1_700_000_000)
        False
    """

    id: int
    target: str
    expiry: Optional[int] = None

    def is_expired(self, now: int) -> bool:
        return self.expiry is not None and self.expiry < now
