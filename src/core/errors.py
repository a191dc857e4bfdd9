"""Error taxonomy shared by the core and adapters.

Adapters translate library exceptions (sqlite3, smtplib) into these types at
their boundary so the core never has to know which backend raised.
"""

from __future__ import annotations


class NudgerError(Exception):
    """Base class for all nudger errors."""


class ConfigurationError(NudgerError):
    """A category or setting is invalid, or its item source cannot be queried."""


class NoEligibleItemError(NudgerError):
    """A configured category has no published items to notify about."""


class DeliveryError(NudgerError):
    """Sending to a single recipient failed."""


class StorageError(NudgerError):
    """The cursor store could not be read or written."""
