"""Exception hierarchy shared by the providers and the selection engine."""


class DigestError(Exception):
    """Base class for every error raised by this package."""


class ConfigError(DigestError):
    """A required key or setting is missing."""


class TransportError(DigestError):
    """Network or HTTP failure while calling an external API."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class RateLimitError(TransportError):
    """The provider reports that the request quota is exhausted."""


class ParseError(DigestError):
    """An external API answered with a body we could not decode."""


class RegistrationError(DigestError):
    """A registration request could not be processed at all."""
