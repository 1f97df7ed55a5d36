"""
Error taxonomy for linkgate.

Every error carries the HTTP status it maps to and a short public message.
The message is what clients see; anything more detailed (SQL text, DSNs,
driver errors) goes to the log only.

Hierarchy:
    LinkgateError
    ├── InvalidCharacter    token symbol outside the alphabet (also a ValueError)
    ├── LinkNotFound        no live link for the token
    ├── BadRequest          missing/malformed creation fields
    ├── Forbidden           credential not in the allow-list
    ├── InternalError       creation could not be completed
    ├── StoreError          connectivity/query failure in a storage backend
    │   └── DuplicateLinkError
    └── ConfigError         config document missing or invalid
"""


class LinkgateError(Exception):
    """Base class for all linkgate errors."""

    status_code = 500
    message = "error"

    def __init__(self, detail: str = ""):
        super().__init__(detail or self.message)
        self.detail = detail or self.message


class InvalidCharacter(LinkgateError, ValueError):
    """A token contains a symbol outside the Base62 alphabet."""

    status_code = 404
    message = "not found"


class LinkNotFound(LinkgateError):
    """No live (non-expired) link exists for the token."""

    status_code = 404
    message = "not found"


class BadRequest(LinkgateError):
    status_code = 400
    message = "bad field(s)"


class Forbidden(LinkgateError):
    status_code = 403
    message = "forbidden"


class InternalError(LinkgateError):
    status_code = 500
    message = "error"


class StoreError(LinkgateError):
    """Storage backend failure (connection, timeout, query)."""

    status_code = 500
    message = "error"


class DuplicateLinkError(StoreError):
    """Raised when inserting an id that is already present."""


class ConfigError(LinkgateError):
    """Config document could not be read or validated."""
