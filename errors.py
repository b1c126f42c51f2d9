"""Errors raised while building character sheets."""


class CompositorError(Exception):
    """Base class for compositing errors."""


class ResourceFailure(CompositorError):
    """An image listed in the catalog cannot be read.

    Fatal for the character being composited, the batch carries on.
    """

    def __init__(self, variant_id: str, animation: str, path, reason: str = ""):
        self.variant_id = variant_id
        self.animation = animation
        self.path = path
        self.reason = reason
        message = f"Cannot read {variant_id} [{animation}] from {path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class DependencyUnavailable(CompositorError):
    """The raster backend cannot write sheets, fatal for the whole run."""


class OutputUnavailable(CompositorError):
    """The output location cannot be created or written."""


class IdentifierCollision(CompositorError):
    """Resampling ran out of retries without finding a fresh character."""
