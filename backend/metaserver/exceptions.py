"""Exception types raised while resolving and rendering metadata.

Everything below ``MetaserverError`` is recovered at the HTTP boundary and
turned into an empty 500 response. ``ConfigurationError`` is only raised
while the application is being built and is fatal.
"""


class MetaserverError(Exception):
    """Base class for per-request failures."""


class BackendError(MetaserverError):
    """A backend call failed, returned garbage, or found no match."""


class ValidationError(MetaserverError):
    """A request parameter (the public key index) is unparsable or out of range."""


class RenderError(MetaserverError):
    """Serializing the metadata document or rendering user-data failed."""


class ConfigurationError(RuntimeError):
    """Raised on unrecoverable startup configuration errors."""
