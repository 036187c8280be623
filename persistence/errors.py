from __future__ import annotations


class SiteDataError(Exception):
    """Base class for failures raised by the site-data persistence layer."""


class InvalidInput(SiteDataError, ValueError):
    """The document offered for save is missing, not an object, or empty."""


class StoreUnavailable(SiteDataError):
    """The backing store could not be reached (I/O failure, missing mount, timeout)."""


class StoreCorrupted(SiteDataError):
    """
    The backing store answered but its content could not be understood.

    Reported to clients as a generic server error.
    """
