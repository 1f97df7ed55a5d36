"""
Creation credential check.

Link creation is guarded by a static allow-list of shared secrets loaded
from config. Comparison is constant-time per entry.
"""

import hmac
from typing import Iterable


def authorize_key(key: str, allowed_keys: Iterable[str]) -> bool:
    """
    Return True if `key` matches one of `allowed_keys`.

    Args:
        key (str): Credential provided by the caller.
        allowed_keys (Iterable[str]): Configured allow-list.

    Returns:
        bool: False for an empty key or no match.
    """
    if not key:
        return False
    candidate = key.encode("utf-8")
    matched = False
    for allowed in allowed_keys:
        if hmac.compare_digest(candidate, allowed.encode("utf-8")):
            matched = True
    return matched
