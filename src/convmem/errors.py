"""Exception types raised by convmem.

I/O failures are not wrapped: they propagate as the builtin ``OSError``.
"""


class ConvmemError(Exception):
    """Base class for convmem failures reported to the user."""


class ConfigurationError(ConvmemError):
    """Workspace marker missing or an invalid configuration value."""


class DuplicateRecordError(ConvmemError):
    """A record with the requested name already exists in either partition."""


class NotFoundError(ConvmemError):
    """A record or document that an operation needs does not exist."""


class InvalidRecordNameError(ConvmemError):
    """A record name that cannot be used as a single directory name."""
