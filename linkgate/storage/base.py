"""
Base storage interface for linkgate.

Purpose:
    Define the small contract every link backend (in-memory, PostgreSQL)
    implements, so the allocator, creator and resolver never care where
    links live.

Contract:
    - Rows are keyed by integer id.
    - Reads return rows as stored; expiry is a read-time policy owned by the
      resolver, so expired rows are NOT filtered here.
    - Failures surface as StoreError (DuplicateLinkError on a taken id).

Testing & Coverage:
    Abstract methods are annotated with `# pragma: no cover` since they are
    never executed directly.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..models import Link


class BaseStorage(ABC):
    """Abstract base class for link storage backends."""

    @abstractmethod  # pragma: no cover
    def get_link(self, link_id: int) -> Optional[Link]:
        """
        Retrieve a link by id.

        Returns:
            Optional[Link]: The stored row, expired or not, or None if absent.

        Raises:
            StoreError: On connectivity or query failure.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def save_link(self, link_id: int, target: str, expiry: Optional[int] = None) -> None:
        """
        Insert a new link.

        Raises:
            DuplicateLinkError: If the id is already stored.
            StoreError: On any other failure.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def delete_link(self, link_id: int) -> bool:
        """
        Delete a link by id. Deleting a missing id is not an error.

        Returns:
            bool: True if a row was removed.

        Raises:
            StoreError: On connectivity or query failure.
        """
        raise NotImplementedError

    def ensure_schema(self) -> None:
        """Create backing tables if the backend needs them."""
