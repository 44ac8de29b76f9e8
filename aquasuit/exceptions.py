class AquasuitError(Exception):
    """Base class for errors raised by aquasuit."""


class GridMismatchError(AquasuitError):
    """Raised when rasters that must share a grid do not."""


class InvalidRangeError(AquasuitError):
    """Raised when a classification range has low > high."""


class UnknownZoneError(AquasuitError):
    """Raised when a rasterized zone id has no row in the zone attribute table."""
