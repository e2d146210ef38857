"""
Typed errors raised by the tonnage core.

The HTTP layer translates these into status codes; nothing here knows about web
frameworks or logging.
"""


class TonnageError(Exception):
    """Base class for tonnage service errors"""

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.code = code


class ValidationError(TonnageError):
    """Input outside the accepted volume/density/temperature ranges"""

    def __init__(self, details: list[str]):
        super().__init__("Validation failed")
        self.details = details


class NotFoundError(TonnageError):
    """No resolvable VCF entry, or no calculation record with the given id"""


class StoreError(TonnageError):
    """Backing store rejected or failed a statement (missing table, numeric overflow, ...)"""


class StoreUnavailableError(StoreError):
    """Backing store unreachable or connection pool exhausted"""
