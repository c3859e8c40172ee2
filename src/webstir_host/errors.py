"""Error types raised by the host processes."""


class WebstirHostError(Exception):
    """Base class for host errors."""


class ConfigurationError(WebstirHostError):
    """Missing or malformed host arguments."""


class ProviderResolutionError(WebstirHostError):
    """A provider module could not be loaded or has no usable shape."""

    def __init__(self, provider_id: str, message: str):
        super().__init__(message)
        self.provider_id = provider_id
