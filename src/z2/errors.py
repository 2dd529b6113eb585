"""Defines the exceptions raised by z2.

Everything z2 raises on purpose is a subclass of :exc:`Error`, so callers (such as the CLI) can report
those cleanly and let anything else propagate.
"""


class Error(Exception):
    """Base class for z2 errors."""
    def __init__(self, message: str, cause: BaseException = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class ConfError(Error):
    """Raised when the user's config file does not define a usable configuration."""


class StoreUnavailable(Error):
    """Raised when the database cannot be opened or closed, or is used after being closed."""


class BodyUnreadable(Error):
    """Raised when the file containing a note's body cannot be read."""
    def __init__(self, message: str, path: str, cause: BaseException = None):
        super().__init__(message, cause)
        self.path = path


class PersistFailure(Error):
    """Raised when writing to the database fails. Nothing from the failed unit of work is committed."""
