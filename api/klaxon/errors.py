"""Exceptions raised by the relay outside the normal response chain."""


class KlaxonError(Exception):
    """Base class for relay errors."""


class ConfigurationError(KlaxonError):
    """A setting required for the current step is missing."""


class UnsupportedAlgorithm(KlaxonError, ValueError):
    """The requested HMAC algorithm is not accepted."""

    def __init__(self, algorithm: str):
        self.algorithm = algorithm
        super().__init__(f"Unsupported signing hash: {algorithm}")
