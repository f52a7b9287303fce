class MovieCatalogError(Exception):
    """Base class for failures in the movie catalog data layer."""


class TransportError(MovieCatalogError):
    """The remote catalog could not be reached (connection refused, timeout, ...)."""


class ProtocolError(MovieCatalogError):
    """The remote catalog answered with a non-2xx status or an unreadable body."""


class NotFoundError(MovieCatalogError):
    """A single-movie lookup missed the local store."""


class MalformedStoredDataError(MovieCatalogError):
    """A persisted column could not be decoded back into its domain type."""
