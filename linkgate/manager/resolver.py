"""
RedirectResolver module for linkgate.

Turns a token into a redirect target, or raises LinkNotFound.

Order of checks:
    1. Token symbols are validated before any query, so malformed input
       never costs a lookup and decoding errors never reach the caller.
    2. Decode to an id and fetch the row.
    3. Missing row or empty target -> not found.
    4. Expired row -> schedule an expiry sweep, then not found. The sweep
       is handed to `defer` (FastAPI BackgroundTasks in the API) so the 404
       does not wait on the delete.
    5. Otherwise return the target.
"""

import logging
import time
from typing import Any, Callable, Optional

from . import codec
from ..errors import LinkNotFound, StoreError
from ..storage.base import BaseStorage

logger = logging.getLogger(__name__)

Clock = Callable[[], int]
Defer = Callable[..., Any]


def unix_now() -> int:
    return int(time.time())


class RedirectResolver:
    def __init__(self, storage: BaseStorage, clock: Optional[Clock] = None):
        """
        Args:
            storage (BaseStorage): Link backend.
            clock (Optional[Clock]): Returns the current Unix time; injectable for tests.
        """
        self.storage = storage
        self.clock = clock or unix_now

    def resolve(self, token: str, defer: Optional[Defer] = None) -> str:
        """
        Resolve a token to its target URL.

        Args:
            token (str): Public short token.
            defer (Optional[Defer]): Called as defer(fn, *args) to schedule the
                expiry sweep. When None the sweep runs inline.

        Returns:
            str: Target URL of a live link.

        Raises:
            LinkNotFound: Invalid token, no row, empty target or expired link.
            StoreError: If the lookup itself fails.
        """
        if not codec.is_valid(token):
            raise LinkNotFound(f"invalid token {token!r}")

        link_id = codec.decode(token)
        link = self.storage.get_link(link_id)
        if link is None or not link.target:
            raise LinkNotFound(f"no link for token {token!r}")

        if link.is_expired(self.clock()):
            logger.info("Link id=%s expired at %s; scheduling sweep", link_id, link.expiry)
            if defer is None:
                self.sweep(link_id)
            else:
                defer(self.sweep, link_id)
            raise LinkNotFound(f"link for token {token!r} expired")

        return link.target

    def sweep(self, link_id: int) -> None:
        """Delete an expired link. Failures are logged and dropped."""
        try:
            removed = self.storage.delete_link(link_id)
        except StoreError as exc:
            logger.warning("Expiry sweep failed for id=%s: %s", link_id, exc)
            return
        if removed:
            logger.info("Swept expired link id=%s", link_id)
