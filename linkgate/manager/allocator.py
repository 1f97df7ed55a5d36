"""
Identifier allocation for new links.

A fresh id is found by rejection sampling: draw a random token, decode it,
and keep it only if the store has no row for that id. With 6 symbols the
space is 62**6 (about 5.7e10), so retries are rare and there is no cap.

The allocator reserves nothing. Two concurrent requests can pick the same
free id; the store's uniqueness check makes the second insert fail and the
creator handles it.

The random source is injectable so tests can force collisions with a seeded
`random.Random` or a scripted `choice`.
"""

import logging
import random
from typing import Optional, Tuple

from . import codec
from ..storage.base import BaseStorage

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_LENGTH = 6


class IdentifierAllocator:
    """Draws random tokens until one decodes to an unused id."""

    def __init__(
        self,
        storage: BaseStorage,
        rng: Optional[random.Random] = None,
        length: int = DEFAULT_TOKEN_LENGTH,
        alphabet: str = codec.DIGIT_TO_SYMBOL,
    ):
        if length < 1:
            raise ValueError("length must be at least 1")
        if not alphabet or any(char not in codec.SYMBOL_TO_DIGIT for char in alphabet):
            raise ValueError("alphabet must be a non-empty subset of the codec alphabet")
        self.storage = storage
        self.rng = rng or random.SystemRandom()
        self.length = length
        self.alphabet = alphabet

    def random_token(self) -> str:
        return "".join(self.rng.choice(self.alphabet) for _ in range(self.length))

    def allocate(self) -> Tuple[str, int]:
        """
        Return a (token, id) pair whose id has no row in storage.

        Any existing row makes the id unavailable, including one with an empty
        target; only "no row" counts as free.

        Raises:
            StoreError: If the occupancy check fails.
        """
        attempts = 0
        while True:
            attempts += 1
            token = self.random_token()
            link_id = codec.decode(token)
            if self.storage.get_link(link_id) is None:
                if attempts > 1:
                    logger.debug("Allocated id after %d attempts", attempts)
                return token, link_id
