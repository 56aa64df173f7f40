"""Error taxonomy for the recommendation engine."""


class CorrosionBotError(Exception):
    """Base class for engine errors."""


class InvalidInput(CorrosionBotError):
    """Request rejected before any processing (e.g. empty image list)."""


class UpstreamMalformed(CorrosionBotError):
    """Classifier output could not be parsed. Recovered inside the reconciler."""


class UpstreamUnavailable(CorrosionBotError):
    """The external classifier or assistant call failed."""
