"""
LinkCreator module for linkgate.

Responsibilities:
    - Validate creation fields (key, target, validity)
    - Check the caller's key against the configured allow-list
    - Allocate a free id and persist the link
    - Return the short token

Validation order:
    1. key and target present            -> else BadRequest
    2. key in allow-list                 -> else Forbidden
    3. validity, if given, is an int64
       strictly in the future            -> else BadRequest

Race handling:
    Allocation and insert are not atomic. If the insert hits a taken id
    (DuplicateLinkError), the creator allocates once more and retries; a
    second conflict, or any other store failure, becomes InternalError.
"""

import logging
import re
from typing import Iterable, Optional

from ..auth import authorize_key
from ..errors import BadRequest, DuplicateLinkError, Forbidden, InternalError, StoreError
from ..storage.base import BaseStorage
from .allocator import IdentifierAllocator
from .resolver import Clock, unix_now

logger = logging.getLogger(__name__)

ValidityPattern = re.compile(r"[+-]?[0-9]+")
MAX_VALIDITY = 2**63 - 1


class LinkCreator:
    def __init__(
        self,
        storage: BaseStorage,
        allowed_keys: Iterable[str],
        allocator: Optional[IdentifierAllocator] = None,
        clock: Optional[Clock] = None,
        retry_on_conflict: bool = True,
    ):
        """
        Args:
            storage (BaseStorage): Link backend.
            allowed_keys (Iterable[str]): Credentials permitted to create links.
            allocator (Optional[IdentifierAllocator]): Id source; defaults to a
                6-symbol allocator over `storage`.
            clock (Optional[Clock]): Current Unix time; injectable for tests.
            retry_on_conflict (bool): Allocate again once on a duplicate id.
        """
        self.storage = storage
        self.allowed_keys = tuple(allowed_keys)
        self.allocator = allocator or IdentifierAllocator(storage)
        self.clock = clock or unix_now
        self.retry_on_conflict = retry_on_conflict

    def _parse_validity(self, validity: Optional[str]) -> Optional[int]:
        """
        Parse an optional expiry timestamp.

        Returns:
            Optional[int]: None when validity is absent or empty.

        Raises:
            BadRequest: Not an integer, outside int64, or not in the future.
        """
        if validity is None or validity == "":
            return None
        if not ValidityPattern.fullmatch(validity):
            raise BadRequest(f"validity is not an integer: {validity!r}")
        value = int(validity)
        if value > MAX_VALIDITY:
            raise BadRequest("validity out of range")
        if value <= self.clock():
            raise BadRequest("validity is not in the future")
        return value

    def create_link(self, key: str, target: str, validity: Optional[str] = None) -> str:
        """
        Register a new short link.

        Args:
            key (str): Caller credential.
            target (str): Destination URL.
            validity (Optional[str]): Unix timestamp as a string; empty for no expiry.

        Returns:
            str: The new 6-symbol token.

        Raises:
            BadRequest, Forbidden, InternalError
        """
        if not key or not target:
            raise BadRequest("key and link are required")
        if not authorize_key(key, self.allowed_keys):
            raise Forbidden("key not in allow-list")
        expiry = self._parse_validity(validity)

        attempts = 2 if self.retry_on_conflict else 1
        for attempt in range(1, attempts + 1):
            try:
                token, link_id = self.allocator.allocate()
                self.storage.save_link(link_id, target, expiry)
            except DuplicateLinkError as exc:
                logger.warning("Id conflict on insert (attempt %d/%d): %s", attempt, attempts, exc)
                continue
            except StoreError as exc:
                logger.error("Failed to create link: %s", exc)
                raise InternalError("link store failure") from exc
            logger.info("Created link id=%s expiry=%s", link_id, expiry)
            return token

        raise InternalError("id conflict persisted after retry")
