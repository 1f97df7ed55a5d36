"""
Storage module for linkgate (in-memory implementation).

Responsibilities:
    - Save links keyed by integer id
    - Reject inserts on an id that is already taken
    - Look up and delete by id

Design:
    - Reference implementation of the BaseStorage contract, used by tests and
      local demos.
    - A single lock guards the dict so concurrent request threads see atomic
      check-and-insert, the same guarantee a primary key gives in SQL.
"""

import threading
from typing import Dict, Optional

from ..errors import DuplicateLinkError
from ..models import Link
from .base import BaseStorage


class Storage(BaseStorage):
    def __init__(self):
        """
        Initialize empty storage.

        Internal schema:
            self.links = {link_id: Link(id, target, expiry)}
        """
        self.links: Dict[int, Link] = {}
        self._lock = threading.Lock()

    def get_link(self, link_id: int) -> Optional[Link]:
        with self._lock:
            return self.links.get(link_id)

    def save_link(self, link_id: int, target: str, expiry: Optional[int] = None) -> None:
        """
        Insert a link.

        Raises:
            DuplicateLinkError: If link_id is already stored. The existing row
                is left untouched.
        """
        with self._lock:
            if link_id in self.links:
                raise DuplicateLinkError(f"link id {link_id} already exists")
            self.links[link_id] = Link(id=link_id, target=target, expiry=expiry)

    def delete_link(self, link_id: int) -> bool:
        with self._lock:
            return self.links.pop(link_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self.links)
