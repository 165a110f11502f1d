"""Error kinds raised by the versioning core."""


class VersioningError(Exception):
    """Base class for all content versioning errors."""


class NotFoundError(VersioningError, LookupError):
    """A referenced document, version, or branch does not exist."""


class InvalidArgumentError(VersioningError, ValueError):
    """A reference or snapshot is malformed or does not belong where stated."""


class InvalidStateError(VersioningError):
    """The operation is not allowed in the record's current state."""
